"""
Binary FBX reader and writer.

Supports FBX 7.x binary files, with 32-bit record offsets before 7500 and
64-bit offsets from 7500 on. Object names stored in binary as
``Name\\x00\\x01Class`` are exposed in memory as ``Class::Name``.
"""

import io
import logging
import os
import struct
import zlib
from pathlib import Path
from typing import Union

import numpy as np

from .errors import FbxFormatError
from .nodes import FbxDocument, FbxNode, PropertyType, PropertyValue


logger = logging.getLogger(__name__)

MAGIC = b"Kaydara FBX Binary  \x00\x1a\x00"
HEADER_SIZE = len(MAGIC) + 4
WIDE_OFFSET_VERSION = 7500

FOOTER_ID = b"\xfa\xbc\xab\x09\xd0\xc8\xd4\x66\xb1\x76\xfb\x83\x1c\xf7\x26\x7e"
FOOTER_MAGIC = b"\xf8\x5a\x8c\x6a\xde\xf5\xd9\x7e\xec\xe9\x0c\xe3\x75\x8f\x29\x0b"

COMPRESSION_THRESHOLD = 128  # bytes; smaller arrays are stored raw

BINARY_SEPARATOR = "\x00\x01"
NAME_SEPARATOR = "::"

_SCALAR_FORMATS = {
    PropertyType.INT16: "<h",
    PropertyType.BOOL: "<B",
    PropertyType.INT32: "<i",
    PropertyType.FLOAT32: "<f",
    PropertyType.FLOAT64: "<d",
    PropertyType.INT64: "<q",
}

_WIRE_DTYPES = {
    PropertyType.FLOAT32_ARRAY: "<f4",
    PropertyType.FLOAT64_ARRAY: "<f8",
    PropertyType.INT32_ARRAY: "<i4",
    PropertyType.INT64_ARRAY: "<i8",
    PropertyType.BOOL_ARRAY: "u1",
}


def _record_header(wide: bool) -> str:
    return "<QQQ" if wide else "<III"


def _null_record(wide: bool) -> bytes:
    return b"\x00" * (struct.calcsize(_record_header(wide)) + 1)


def _from_binary_name(text: str) -> str:
    if BINARY_SEPARATOR in text:
        name, cls = text.split(BINARY_SEPARATOR, 1)
        return f"{cls}{NAME_SEPARATOR}{name}"
    return text


def _to_binary_name(text: str) -> str:
    if NAME_SEPARATOR in text:
        cls, name = text.split(NAME_SEPARATOR, 1)
        return f"{name}{BINARY_SEPARATOR}{cls}"
    return text


# ============================================================
# Reading
# ============================================================

def parse(data: bytes) -> FbxDocument:
    """Parse binary FBX bytes into a document.

    Raises:
        FbxFormatError: If the data is not a readable binary FBX file.
    """
    data = bytes(data)
    if len(data) < HEADER_SIZE or not data.startswith(MAGIC):
        raise FbxFormatError("Not a valid binary FBX file")

    version = struct.unpack_from("<I", data, len(MAGIC))[0]
    wide = version >= WIDE_OFFSET_VERSION
    try:
        children, _ = _read_node_list(data, HEADER_SIZE, len(data), wide)
    except (struct.error, zlib.error, IndexError, UnicodeDecodeError, ValueError) as exc:
        raise FbxFormatError(f"Corrupt FBX data: {exc}") from exc

    logger.debug("Parsed FBX %d document with %d top-level nodes", version, len(children))
    return FbxDocument(children=children, version=version)


def read(path: Union[str, os.PathLike]) -> FbxDocument:
    """Read and parse a binary FBX file.

    Raises:
        FileNotFoundError: If the file does not exist.
        FbxFormatError: If the file is not a readable binary FBX file.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"FBX file not found: {path}")
    return parse(path.read_bytes())


def _read_node_list(data: bytes, offset: int, end_offset: int, wide: bool):
    nodes = []
    while offset < end_offset:
        node, offset = _read_node(data, offset, wide)
        if node is None:
            break
        nodes.append(node)
    return nodes, offset


def _read_node(data: bytes, offset: int, wide: bool):
    header = _record_header(wide)
    end_offset, num_props, props_len = struct.unpack_from(header, data, offset)
    offset += struct.calcsize(header)
    name_len = data[offset]
    offset += 1

    if end_offset == 0:
        return None, offset
    if end_offset > len(data) or end_offset < offset + name_len + props_len:
        raise FbxFormatError(f"Node record at {offset} has invalid end offset {end_offset}")

    name = data[offset:offset + name_len].decode("ascii")
    offset += name_len

    props_end = offset + props_len
    properties = []
    for _ in range(num_props):
        prop, offset = _read_property(data, offset)
        properties.append(prop)
    if offset != props_end:
        raise FbxFormatError(f"Property list of {name} has wrong length")

    children = []
    if offset < end_offset:
        children, _ = _read_node_list(data, offset, end_offset, wide)

    return FbxNode(name, properties, children), end_offset


def _read_property(data: bytes, offset: int):
    ptype = PropertyType(chr(data[offset]))
    offset += 1

    if ptype in _SCALAR_FORMATS:
        fmt = _SCALAR_FORMATS[ptype]
        value = struct.unpack_from(fmt, data, offset)[0]
        return PropertyValue(ptype, value), offset + struct.calcsize(fmt)

    if ptype in (PropertyType.STRING, PropertyType.RAW):
        length = struct.unpack_from("<I", data, offset)[0]
        offset += 4
        raw = data[offset:offset + length]
        if len(raw) != length:
            raise FbxFormatError("Truncated string property")
        if ptype is PropertyType.RAW:
            return PropertyValue(ptype, raw), offset + length
        text = _from_binary_name(raw.decode("utf-8", errors="surrogateescape"))
        return PropertyValue(ptype, text), offset + length

    return _read_array_property(data, offset, ptype)


def _read_array_property(data: bytes, offset: int, ptype: PropertyType):
    array_len, encoding, stored_len = struct.unpack_from("<III", data, offset)
    offset += 12
    raw = data[offset:offset + stored_len]
    offset += stored_len

    if encoding == 1:
        raw = zlib.decompress(raw)
    elif encoding != 0:
        raise FbxFormatError(f"Unknown array encoding: {encoding}")

    if array_len == 0:
        return PropertyValue(ptype, np.zeros(0, dtype=_WIRE_DTYPES[ptype])), offset
    values = np.frombuffer(raw, dtype=_WIRE_DTYPES[ptype], count=array_len)
    return PropertyValue(ptype, values), offset


# ============================================================
# Writing
# ============================================================

def serialize_bytes(document: FbxDocument) -> bytes:
    """Encode a document as binary FBX.

    Raises:
        FbxFormatError: If a node or property cannot be encoded.
    """
    wide = document.version >= WIDE_OFFSET_VERSION
    buffer = io.BytesIO()
    buffer.write(MAGIC)
    buffer.write(struct.pack("<I", document.version))
    try:
        for node in document.children:
            _write_node(buffer, node, wide)
    except (struct.error, UnicodeEncodeError, ValueError, TypeError) as exc:
        raise FbxFormatError(f"Cannot encode FBX document: {exc}") from exc
    buffer.write(_null_record(wide))
    _write_footer(buffer, document.version)
    return buffer.getvalue()


def serialize(document: FbxDocument, path: Union[str, os.PathLike]) -> Path:
    """Encode a document and write it to path.

    Returns:
        The written path.
    """
    path = Path(path)
    payload = serialize_bytes(document)
    path.write_bytes(payload)
    logger.info("Wrote %s (%d bytes)", path, len(payload))
    return path


def _write_node(buffer: io.BytesIO, node: FbxNode, wide: bool) -> None:
    header = _record_header(wide)
    start = buffer.tell()
    buffer.write(b"\x00" * struct.calcsize(header))

    name = node.name.encode("ascii")
    if len(name) > 255:
        raise FbxFormatError(f"Node name too long: {node.name[:32]}...")
    buffer.write(struct.pack("<B", len(name)))
    buffer.write(name)

    props_start = buffer.tell()
    for prop in node.properties:
        _write_property(buffer, prop)
    props_len = buffer.tell() - props_start

    # nested lists (and property-less nodes) close with a null record
    if node.children or not node.properties:
        for child in node.children:
            _write_node(buffer, child, wide)
        buffer.write(_null_record(wide))

    end = buffer.tell()
    buffer.seek(start)
    buffer.write(struct.pack(header, end, len(node.properties), props_len))
    buffer.seek(end)


def _write_property(buffer: io.BytesIO, prop: PropertyValue) -> None:
    ptype = prop.type
    buffer.write(ptype.code.encode("ascii"))

    if ptype in _SCALAR_FORMATS:
        buffer.write(struct.pack(_SCALAR_FORMATS[ptype], prop.value))
    elif ptype in (PropertyType.STRING, PropertyType.RAW):
        if ptype is PropertyType.RAW:
            raw = prop.value
        else:
            raw = _to_binary_name(prop.value).encode("utf-8", errors="surrogateescape")
        buffer.write(struct.pack("<I", len(raw)))
        buffer.write(raw)
    else:
        raw = np.asarray(prop.value).astype(_WIRE_DTYPES[ptype]).tobytes()
        encoding = 0
        if len(raw) >= COMPRESSION_THRESHOLD:
            raw = zlib.compress(raw)
            encoding = 1
        buffer.write(struct.pack("<III", len(prop.value), encoding, len(raw)))
        buffer.write(raw)


def _write_footer(buffer: io.BytesIO, version: int) -> None:
    buffer.write(FOOTER_ID)
    buffer.write(b"\x00" * 4)
    # pad to a 16-byte boundary; an aligned offset gets a full 16 bytes
    offset = buffer.tell()
    pad = ((offset + 15) & ~15) - offset
    buffer.write(b"\x00" * (pad or 16))
    buffer.write(struct.pack("<I", version))
    buffer.write(b"\x00" * 120)
    buffer.write(FOOTER_MAGIC)

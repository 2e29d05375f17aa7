"""
Type-checked replacement of node property slots.

A replacement must carry the same type tag as the value it replaces. A
mismatch, or an absent value, leaves the node untouched and is reported
as a diagnostic instead of raising, so one bad field never stops the rest
of an export.
"""

import logging
from typing import Any, Optional

from .diagnostics import Diagnostics, emit
from .errors import ConversionInputError, FbxExportError, MalformedTemplateError, TypeMismatchError
from .nodes import FbxNode, PropertyValue


logger = logging.getLogger(__name__)


def check_type(node: FbxNode, index: int, current: Optional[PropertyValue], new: PropertyValue) -> None:
    """Raise TypeMismatchError if new cannot replace current in node.

    An empty slot (current is None) accepts any type.
    """
    if current is not None and current.type is not new.type:
        raise TypeMismatchError(
            f"Value being assigned does not match the previous value's type in "
            f"{node.name}[{index}]! Required: {current.type.name} ({current.type.code}), "
            f"Got: {new.type.name} ({new.type.code})"
        )


def _coerce(node: FbxNode, index: int, value: Any) -> PropertyValue:
    if value is None:
        raise ConversionInputError(f"Value being assigned to {node.name}[{index}] is None")
    try:
        return PropertyValue.from_python(value)
    except TypeError as exc:
        raise TypeMismatchError(f"Value being assigned to {node.name}[{index}] is unsupported: {exc}") from exc


def set_payload(node: FbxNode, value: Any, diagnostics: Optional[Diagnostics] = None) -> bool:
    """Replace the node payload (property slot 0).

    Args:
        node: Node to patch in place.
        value: PropertyValue or plain value (numpy array, str, number).
        diagnostics: Collection receiving skipped-patch reports.

    Returns:
        True if the payload was replaced, False if the patch was skipped.
    """
    try:
        new = _coerce(node, 0, value)
        check_type(node, 0, node.value, new)
    except FbxExportError as exc:
        emit(diagnostics, exc.kind, str(exc), logger)
        return False
    node.value = new
    logger.debug("Patched %s payload with %r", node.name, new)
    return True


def set_property(node: FbxNode, index: int, value: Any, diagnostics: Optional[Diagnostics] = None) -> bool:
    """Replace an existing property slot of node.

    Slots are never appended; an index past the node's properties is a
    skipped patch.

    Returns:
        True if the slot was replaced, False if the patch was skipped.
    """
    current = node.get_property(index)
    try:
        if current is None:
            raise MalformedTemplateError(f"{node.name} has no property slot {index} to replace")
        new = _coerce(node, index, value)
        check_type(node, index, current, new)
    except FbxExportError as exc:
        emit(diagnostics, exc.kind, str(exc), logger)
        return False
    node.replace_property(index, new)
    logger.debug("Patched %s[%d] with %r", node.name, index, new)
    return True

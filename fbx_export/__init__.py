"""
FBX Template Export Module

This module patches a pre-built binary FBX template with mesh geometry
(vertices, per-corner normals, termination-encoded polygon indices) and
creator/application metadata, then writes the result as binary FBX.
"""

from .nodes import FbxDocument, FbxNode, PropertyType, PropertyValue
from .search import NodeLink, find_all, find_first
from .patcher import set_payload, set_property
from .geometry import ConvertedGeometry, GeometryConverter, MeshData
from .identity import ExportIdentity, HostDefaults
from .diagnostics import Diagnostic, DiagnosticKind, Diagnostics
from .errors import (
    ConversionInputError,
    FbxExportError,
    FbxFormatError,
    MalformedTemplateError,
    MissingInputError,
    TypeMismatchError,
)
from .exporter import Exporter, ExportReport
from .mesh_loader import MeshLoader
from .template import build_template, load_template

__all__ = [
    "FbxDocument",
    "FbxNode",
    "PropertyType",
    "PropertyValue",
    "NodeLink",
    "find_all",
    "find_first",
    "set_payload",
    "set_property",
    "ConvertedGeometry",
    "GeometryConverter",
    "MeshData",
    "ExportIdentity",
    "HostDefaults",
    "Diagnostic",
    "DiagnosticKind",
    "Diagnostics",
    "ConversionInputError",
    "FbxExportError",
    "FbxFormatError",
    "MalformedTemplateError",
    "MissingInputError",
    "TypeMismatchError",
    "Exporter",
    "ExportReport",
    "MeshLoader",
    "build_template",
    "load_template",
]

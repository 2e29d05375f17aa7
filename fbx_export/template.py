"""
Template documents for the exporter.

build_template() produces a minimal single-mesh FBX 7.4 skeleton with the
node shape the exporter patches: header metadata, one Geometry holding
Vertices / PolygonVertexIndex / LayerElementNormal.Normals, and one Model
connected to it.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import numpy as np

from . import fbx_io
from .nodes import FbxDocument, FbxNode, PropertyValue


logger = logging.getLogger(__name__)

GEOMETRY_ID = 1000000001
MODEL_ID = 1000000002
TEMPLATE_CREATOR = "fbx_export template"


def _p(name: str, type_name: str, label: str, flags: str, *values) -> FbxNode:
    """A Properties70 row: name, type, label, flags, then value slots."""
    return FbxNode("P", [name, type_name, label, flags, *values])


def _int(number: int) -> PropertyValue:
    return PropertyValue.int32(number)


def _header_extension(version: int) -> FbxNode:
    application_rows = []
    for prefix in ("Original", "LastSaved"):
        application_rows += [
            _p(f"{prefix}|ApplicationVendor", "KString", "", "", ""),
            _p(f"{prefix}|ApplicationName", "KString", "", "", ""),
            _p(f"{prefix}|ApplicationVersion", "KString", "", "", ""),
        ]
    scene_info = FbxNode(
        "SceneInfo",
        ["GlobalInfo::SceneInfo", "UserData"],
        [
            FbxNode("Type", ["UserData"]),
            FbxNode("Version", [_int(100)]),
            FbxNode("Properties70", children=[
                _p("DocumentUrl", "KString", "Url", "", "template.fbx"),
                _p("SrcDocumentUrl", "KString", "Url", "", "template.fbx"),
                _p("Original", "Compound", "", ""),
                *application_rows[:3],
                _p("LastSaved", "Compound", "", ""),
                *application_rows[3:],
            ]),
        ],
    )
    return FbxNode("FBXHeaderExtension", children=[
        FbxNode("FBXHeaderVersion", [_int(1003)]),
        FbxNode("FBXVersion", [_int(version)]),
        FbxNode("EncryptionType", [_int(0)]),
        FbxNode("Creator", [TEMPLATE_CREATOR]),
        scene_info,
    ])


def _global_settings() -> FbxNode:
    return FbxNode("GlobalSettings", children=[
        FbxNode("Version", [_int(1000)]),
        FbxNode("Properties70", children=[
            _p("UpAxis", "int", "Integer", "", _int(1)),
            _p("UpAxisSign", "int", "Integer", "", _int(1)),
            _p("FrontAxis", "int", "Integer", "", _int(2)),
            _p("FrontAxisSign", "int", "Integer", "", _int(1)),
            _p("CoordAxis", "int", "Integer", "", _int(0)),
            _p("CoordAxisSign", "int", "Integer", "", _int(1)),
            _p("UnitScaleFactor", "double", "Number", "", PropertyValue.float64(1.0)),
        ]),
    ])


def _geometry() -> FbxNode:
    normals_layer = FbxNode("LayerElementNormal", [_int(0)], [
        FbxNode("Version", [_int(101)]),
        FbxNode("Name", [""]),
        FbxNode("MappingInformationType", ["ByPolygonVertex"]),
        FbxNode("ReferenceInformationType", ["Direct"]),
        FbxNode("Normals", [np.zeros(0, dtype=np.float64)]),
    ])
    layer = FbxNode("Layer", [_int(0)], [
        FbxNode("Version", [_int(100)]),
        FbxNode("LayerElement", children=[
            FbxNode("Type", ["LayerElementNormal"]),
            FbxNode("TypedIndex", [_int(0)]),
        ]),
    ])
    return FbxNode(
        "Geometry",
        [PropertyValue.int64(GEOMETRY_ID), "Geometry::Template", "Mesh"],
        [
            FbxNode("GeometryVersion", [_int(124)]),
            FbxNode("Vertices", [np.zeros(0, dtype=np.float64)]),
            FbxNode("PolygonVertexIndex", [np.zeros(0, dtype=np.int32)]),
            normals_layer,
            layer,
        ],
    )


def _model() -> FbxNode:
    return FbxNode(
        "Model",
        [PropertyValue.int64(MODEL_ID), "Model::Template", "Mesh"],
        [
            FbxNode("Version", [_int(232)]),
            FbxNode("Properties70", children=[
                _p("DefaultAttributeIndex", "int", "Integer", "", _int(0)),
            ]),
            FbxNode("Shading", [True]),
            FbxNode("Culling", ["CullingOff"]),
        ],
    )


def build_template(version: int = 7400) -> FbxDocument:
    """Build a fresh single-mesh template document.

    Args:
        version: Binary format version stored in the document.

    Returns:
        A new FbxDocument; callers own and may mutate it.
    """
    return FbxDocument(
        children=[
            _header_extension(version),
            FbxNode("CreationTime", ["1970-01-01 00:00:00:000"]),
            FbxNode("Creator", [TEMPLATE_CREATOR]),
            _global_settings(),
            FbxNode("Objects", children=[_geometry(), _model()]),
            FbxNode("Connections", children=[
                FbxNode("C", ["OO", PropertyValue.int64(MODEL_ID), PropertyValue.int64(0)]),
                FbxNode("C", ["OO", PropertyValue.int64(GEOMETRY_ID), PropertyValue.int64(MODEL_ID)]),
            ]),
        ],
        version=version,
    )


def load_template(path: Optional[Union[str, os.PathLike]] = None) -> FbxDocument:
    """Load a template from a binary FBX file, or build the default one.

    Raises:
        FileNotFoundError: If path is given and does not exist.
        FbxFormatError: If the file is not a readable binary FBX file.
    """
    if path is None:
        return build_template()
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"FBX template not found: {path}")
    logger.info("Loading template %s", path)
    return fbx_io.read(path)

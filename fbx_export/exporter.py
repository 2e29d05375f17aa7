"""
Exporter component: patch an FBX template with a mesh and write it out.

Structural failures (missing mesh or template, missing required nodes)
abort the export before anything is mutated or written. Payload failures
(type mismatches, absent arrays) only skip the affected field. Nothing is
raised past Exporter.export; every failure lands in the returned report.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from . import fbx_io
from .diagnostics import DiagnosticKind, Diagnostics
from .errors import FbxExportError, MalformedTemplateError, MissingInputError
from .geometry import GeometryConverter, MeshData
from .identity import ExportIdentity, HostDefaults
from .nodes import FbxDocument
from .patcher import set_payload, set_property
from .search import NodeLink, find_all, find_first


logger = logging.getLogger(__name__)

NODE_VERTICES = "Vertices"
NODE_NORMALS = "Normals"
NODE_POLYGON_VERTEX_INDEX = "PolygonVertexIndex"
NODE_GEOMETRY = "Geometry"
NODE_MODEL = "Model"
NODE_CREATOR = "Creator"
NODE_PROPERTIES70 = "Properties70"
NODE_P = "P"
KEY_APPLICATION_VENDOR = "ApplicationVendor"
KEY_APPLICATION_NAME = "ApplicationName"
KEY_APPLICATION_VERSION = "ApplicationVersion"

REQUIRED_NODES = (
    NODE_VERTICES,
    NODE_NORMALS,
    NODE_POLYGON_VERTEX_INDEX,
    NODE_GEOMETRY,
    NODE_MODEL,
)

METADATA_VALUE_SLOT = 4
NAME_SLOT = 1


@dataclass
class RequiredNodes:
    """Links to the five nodes every template must provide."""
    vertices: NodeLink
    normals: NodeLink
    polygons: NodeLink
    geometry: NodeLink
    model: NodeLink


@dataclass
class ExportReport:
    """Outcome of one export."""
    output_path: Path
    written: bool = False
    document: Optional[FbxDocument] = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def complete(self) -> bool:
        """True when the file was written with every field patched."""
        return self.written and not self.diagnostics


class Exporter:
    """Patches template documents with mesh geometry and identity metadata."""

    @staticmethod
    def locate_required_nodes(document: FbxDocument) -> RequiredNodes:
        """Find the first node for each required name.

        Raises:
            MalformedTemplateError: If any required node is missing.
        """
        links = {name: find_first(document, name) for name in REQUIRED_NODES}
        missing = [name for name, link in links.items() if link is None]
        if missing:
            raise MalformedTemplateError(
                f"Invalid template: missing required node(s) {', '.join(missing)}"
            )
        return RequiredNodes(
            vertices=links[NODE_VERTICES],
            normals=links[NODE_NORMALS],
            polygons=links[NODE_POLYGON_VERTEX_INDEX],
            geometry=links[NODE_GEOMETRY],
            model=links[NODE_MODEL],
        )

    @staticmethod
    def patch_identity(document: FbxDocument, identity: ExportIdentity, diagnostics: Diagnostics) -> None:
        """Write creator and application metadata into the document."""
        for link in find_all(document, NODE_CREATOR):
            set_payload(link.node, identity.creator_name, diagnostics)

        container = find_first(document, NODE_PROPERTIES70)
        if container is None:
            diagnostics.warn(
                DiagnosticKind.MALFORMED_TEMPLATE,
                f"Template has no {NODE_PROPERTIES70} node; application metadata not written",
                logger,
            )
            return

        keyed_values = (
            (KEY_APPLICATION_VENDOR, identity.vendor),
            (KEY_APPLICATION_NAME, identity.application_name),
            (KEY_APPLICATION_VERSION, identity.version),
        )
        for link in find_all(container.node, NODE_P):
            key = link.node.value
            if key is None:
                continue
            for substring, value in keyed_values:
                if substring in str(key.value):
                    set_property(link.node, METADATA_VALUE_SLOT, value, diagnostics)

    @staticmethod
    def patch_names(nodes: RequiredNodes, scene_name: str, diagnostics: Diagnostics) -> None:
        set_property(nodes.geometry.node, NAME_SLOT, f"{NODE_GEOMETRY}::{scene_name}", diagnostics)
        set_property(nodes.model.node, NAME_SLOT, f"{NODE_MODEL}::{scene_name}", diagnostics)

    @staticmethod
    def patch_geometry(nodes: RequiredNodes, mesh: MeshData, diagnostics: Diagnostics) -> None:
        converted = GeometryConverter.convert(mesh, diagnostics)
        set_payload(nodes.vertices.node, converted.flat_vertices, diagnostics)
        set_payload(nodes.normals.node, converted.flat_normals, diagnostics)
        set_payload(nodes.polygons.node, converted.polygon_indices, diagnostics)

    @staticmethod
    def prepare(
        scene_name: str,
        mesh: Optional[MeshData],
        template: Union[FbxDocument, bytes, None],
        identity: Optional[ExportIdentity] = None,
        host: Optional[HostDefaults] = None,
        codec: Any = fbx_io,
        diagnostics: Optional[Diagnostics] = None,
    ) -> FbxDocument:
        """Patch a template in memory without writing it.

        Args:
            scene_name: Name of the exported scene object.
            mesh: Mesh snapshot to install.
            template: Parsed template document, or raw template bytes.
            identity: Identity overrides; unset fields come from host.
            host: Host-provided identity defaults.
            codec: Object whose parse(bytes) reads raw templates.
            diagnostics: Collection receiving skipped-patch reports.

        Returns:
            The patched document (the template itself when one was passed).

        Raises:
            MissingInputError: If mesh or template is absent or empty.
            MalformedTemplateError: If the template cannot be parsed or lacks
                a required node.
        """
        diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        if mesh is None:
            raise MissingInputError("No mesh data supplied to export")
        if template is None:
            raise MissingInputError("No template supplied to export")

        if isinstance(template, (bytes, bytearray, memoryview)):
            if not template:
                raise MissingInputError("Template data is empty")
            try:
                document = codec.parse(bytes(template))
            except Exception as exc:  # codecs may be caller-supplied
                raise MalformedTemplateError(f"Template could not be parsed: {exc}") from exc
        else:
            document = template
        if not document.children:
            raise MissingInputError("Template document is empty")

        identity = (identity or ExportIdentity()).resolve(host or HostDefaults())
        nodes = Exporter.locate_required_nodes(document)

        Exporter.patch_identity(document, identity, diagnostics)
        Exporter.patch_names(nodes, scene_name, diagnostics)
        Exporter.patch_geometry(nodes, mesh, diagnostics)
        return document

    @staticmethod
    def export(
        scene_name: str,
        mesh: Optional[MeshData],
        template: Union[FbxDocument, bytes, None],
        identity: Optional[ExportIdentity],
        output_path: Union[str, os.PathLike],
        host: Optional[HostDefaults] = None,
        codec: Any = None,
    ) -> ExportReport:
        """Patch a template with mesh and identity data, then serialize it.

        Args:
            scene_name: Name of the exported scene object.
            mesh: Mesh snapshot to install.
            template: Parsed template document, or raw template bytes.
            identity: Identity overrides; unset fields come from host.
            output_path: Destination file.
            host: Host-provided identity defaults.
            codec: Object providing parse(bytes) and serialize(document, path);
                defaults to the bundled binary FBX codec.

        Returns:
            ExportReport. written is False when the export aborted.
        """
        codec = codec or fbx_io
        report = ExportReport(output_path=Path(output_path))
        try:
            report.document = Exporter.prepare(
                scene_name, mesh, template, identity, host, codec, report.diagnostics
            )
        except FbxExportError as exc:
            report.diagnostics.warn(exc.kind, str(exc), logger)
            return report

        try:
            codec.serialize(report.document, report.output_path)
        except Exception as exc:  # codecs may be caller-supplied
            report.diagnostics.warn(
                DiagnosticKind.WRITE_FAILED, f"Failed to write {report.output_path}: {exc}", logger
            )
            return report

        report.written = True
        if report.diagnostics:
            logger.warning(
                "Exported %s to %s with %d skipped field(s)",
                scene_name, report.output_path, len(report.diagnostics),
            )
        else:
            logger.info("Exported %s to %s", scene_name, report.output_path)
        return report

    @staticmethod
    def export_trimesh(
        scene_name: str,
        mesh,
        template: Union[FbxDocument, bytes, None],
        output_path: Union[str, os.PathLike],
        identity: Optional[ExportIdentity] = None,
        host: Optional[HostDefaults] = None,
        codec: Any = None,
    ) -> ExportReport:
        """Export a trimesh.Trimesh; see export()."""
        mesh_data = MeshData.from_trimesh(mesh) if mesh is not None else None
        return Exporter.export(scene_name, mesh_data, template, identity, output_path, host, codec)

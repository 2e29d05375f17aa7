"""
GeometryConverter component: mesh arrays to FBX geometry payloads.

The source mesh uses a left-handed convention with the opposite triangle
winding. FBX stores positions per vertex, normals per polygon corner
(ByPolygonVertex / Direct) and polygon vertex indices where the last index
of every polygon is stored as its one's complement.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .diagnostics import DiagnosticKind, Diagnostics, emit


logger = logging.getLogger(__name__)


@dataclass
class MeshData:
    """Read-only snapshot of a triangulated mesh."""
    positions: np.ndarray               # (N, 3) float64 vertex positions
    normals: Optional[np.ndarray]       # (N, 3) float64 per-vertex normals, or None
    triangle_indices: np.ndarray        # (3 * T,) int32, one triple per triangle

    def __post_init__(self):
        positions = np.asarray(self.positions, dtype=np.float64)
        if positions.size % 3 != 0:
            raise ValueError(f"Positions must be 3D vectors, got {positions.size} scalars")
        self.positions = positions.reshape(-1, 3)

        if self.normals is not None:
            normals = np.asarray(self.normals, dtype=np.float64)
            if normals.size % 3 != 0:
                raise ValueError(f"Normals must be 3D vectors, got {normals.size} scalars")
            self.normals = normals.reshape(-1, 3)
            if len(self.normals) != len(self.positions):
                raise ValueError(
                    f"Normal count {len(self.normals)} does not match vertex count {len(self.positions)}"
                )

        indices = np.asarray(self.triangle_indices, dtype=np.int64).ravel()
        if indices.size % 3 != 0:
            raise ValueError(f"Triangle index count {indices.size} is not a multiple of 3")
        if indices.size and (indices.min() < 0 or indices.max() >= len(self.positions)):
            raise ValueError(f"Triangle indices out of range for {len(self.positions)} vertices")
        self.triangle_indices = indices.astype(np.int32)

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.triangle_indices) // 3

    @classmethod
    def from_trimesh(cls, mesh) -> "MeshData":
        """Snapshot a trimesh.Trimesh (vertices, vertex normals, faces)."""
        return cls(
            positions=np.asarray(mesh.vertices),
            normals=np.asarray(mesh.vertex_normals),
            triangle_indices=np.asarray(mesh.faces).ravel(),
        )


@dataclass
class ConvertedGeometry:
    """Flat arrays ready to be installed into the template."""
    flat_vertices: np.ndarray               # (3 * N,) float64
    flat_normals: Optional[np.ndarray]      # (9 * T,) float64, None if the mesh has no normals
    polygon_indices: np.ndarray             # (3 * T,) int32, termination encoded


class GeometryConverter:
    """Converts MeshData into FBX geometry arrays."""

    @staticmethod
    def to_flat_doubles(
        vectors: Optional[np.ndarray],
        diagnostics: Optional[Diagnostics] = None,
    ) -> Optional[np.ndarray]:
        """Flatten 3D vectors to float64 scalars with the x axis negated.

        Args:
            vectors: Array of shape (K, 3).
            diagnostics: Collection receiving a report when vectors is None.

        Returns:
            Array of shape (3 * K,), or None when vectors is None.
        """
        if vectors is None:
            emit(diagnostics, DiagnosticKind.CONVERSION_INPUT_INVALID, "Array being converted is None", logger)
            return None
        flat = np.array(vectors, dtype=np.float64).reshape(-1, 3)
        flat[:, 0] = -flat[:, 0]
        return flat.ravel()

    @staticmethod
    def corner_normals(normals: Optional[np.ndarray], triangle_indices: np.ndarray) -> Optional[np.ndarray]:
        """Expand per-vertex normals to one normal per triangle corner.

        Corners are taken as (i0, i2, i1) to follow the winding swap.
        """
        if normals is None:
            return None
        triangles = np.asarray(triangle_indices).reshape(-1, 3)
        return np.asarray(normals)[triangles[:, [0, 2, 1]]].reshape(-1, 3)

    @staticmethod
    def encode_polygon_indices(triangle_indices: np.ndarray) -> np.ndarray:
        """Swap the 2nd and 3rd index of every triangle, then complement the new 3rd."""
        triangles = np.array(triangle_indices, dtype=np.int32).reshape(-1, 3)
        triangles[:, [1, 2]] = triangles[:, [2, 1]]
        # the swap must come first so the terminator lands on the new last corner
        triangles[:, 2] = np.invert(triangles[:, 2])
        return triangles.ravel()

    @staticmethod
    def decode_polygon_indices(polygon_indices: np.ndarray) -> list[list[int]]:
        """Split a termination-encoded index stream back into polygons.

        Raises:
            ValueError: If the stream does not end with a terminated polygon.
        """
        polygons = []
        current = []
        for index in np.asarray(polygon_indices).tolist():
            if index < 0:
                current.append(~index)
                polygons.append(current)
                current = []
            else:
                current.append(index)
        if current:
            raise ValueError("Polygon index stream ends without a terminator")
        return polygons

    @staticmethod
    def convert(mesh: MeshData, diagnostics: Optional[Diagnostics] = None) -> ConvertedGeometry:
        """Convert a mesh into FBX vertex, normal and polygon index arrays.

        Args:
            mesh: Triangulated mesh snapshot.
            diagnostics: Collection receiving conversion reports.

        Returns:
            ConvertedGeometry. An empty mesh yields empty arrays.
        """
        corners = GeometryConverter.corner_normals(mesh.normals, mesh.triangle_indices)
        result = ConvertedGeometry(
            flat_vertices=GeometryConverter.to_flat_doubles(mesh.positions, diagnostics),
            flat_normals=GeometryConverter.to_flat_doubles(corners, diagnostics),
            polygon_indices=GeometryConverter.encode_polygon_indices(mesh.triangle_indices),
        )
        logger.debug(
            "Converted %d vertices and %d triangles", mesh.vertex_count, mesh.triangle_count
        )
        return result

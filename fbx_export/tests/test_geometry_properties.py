"""
Property-based tests for GeometryConverter.

Uses Hypothesis to generate arbitrary triangulated meshes.
"""

import os
import sys

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from hypothesis.extra.numpy import arrays

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from fbx_export.diagnostics import DiagnosticKind, Diagnostics
from fbx_export.geometry import GeometryConverter, MeshData


coordinates = st.floats(min_value=-100.0, max_value=100.0, allow_nan=False, allow_infinity=False)


@st.composite
def mesh_strategy(draw, max_vertices=30, max_triangles=20):
    """Generate a mesh with in-range triangle indices and per-vertex normals."""
    n = draw(st.integers(min_value=1, max_value=max_vertices))
    t = draw(st.integers(min_value=0, max_value=max_triangles))

    positions = draw(arrays(dtype=np.float64, shape=(n, 3), elements=coordinates))
    normals = draw(arrays(dtype=np.float64, shape=(n, 3), elements=coordinates))
    indices = draw(arrays(
        dtype=np.int32,
        shape=(3 * t,),
        elements=st.integers(min_value=0, max_value=n - 1),
    ))
    return MeshData(positions=positions, normals=normals, triangle_indices=indices)


@given(mesh=mesh_strategy())
@settings(max_examples=100, deadline=None)
def test_polygon_indices_are_swapped_and_terminated(mesh):
    """Each (a, b, c) triangle becomes (a, c, ~b); every third entry is negative."""
    result = GeometryConverter.convert(mesh)
    original = mesh.triangle_indices.reshape(-1, 3)

    assert result.polygon_indices.dtype == np.int32
    assert len(result.polygon_indices) == 3 * mesh.triangle_count

    encoded = result.polygon_indices.reshape(-1, 3)
    np.testing.assert_array_equal(encoded[:, 0], original[:, 0])
    np.testing.assert_array_equal(encoded[:, 1], original[:, 2])
    np.testing.assert_array_equal(encoded[:, 2], ~original[:, 1])
    assert np.all(encoded[:, 2] < 0)
    assert np.all(encoded[:, :2] >= 0)


@given(mesh=mesh_strategy())
@settings(max_examples=100, deadline=None)
def test_vertices_are_flattened_with_x_negated(mesh):
    result = GeometryConverter.convert(mesh)

    assert result.flat_vertices.dtype == np.float64
    assert len(result.flat_vertices) == 3 * mesh.vertex_count
    np.testing.assert_array_equal(result.flat_vertices[0::3], -mesh.positions[:, 0])
    np.testing.assert_array_equal(result.flat_vertices[1::3], mesh.positions[:, 1])
    np.testing.assert_array_equal(result.flat_vertices[2::3], mesh.positions[:, 2])


@given(mesh=mesh_strategy())
@settings(max_examples=100, deadline=None)
def test_normals_follow_corner_order(mesh):
    """Corner normals are (n[a], n[c], n[b]) per triangle, x negated."""
    result = GeometryConverter.convert(mesh)
    corners = result.flat_normals.reshape(-1, 3, 3)

    assert len(result.flat_normals) == 9 * mesh.triangle_count
    for k, (a, b, c) in enumerate(mesh.triangle_indices.reshape(-1, 3)):
        for corner, vertex in enumerate((a, c, b)):
            expected = mesh.normals[vertex] * np.array([-1.0, 1.0, 1.0])
            np.testing.assert_array_equal(corners[k, corner], expected)


@given(mesh=mesh_strategy())
@settings(max_examples=50, deadline=None)
def test_terminator_is_recoverable_by_recomplement(mesh):
    """~~x == x restores the terminated index, and decoding yields the rewound triangles."""
    polygon_indices = GeometryConverter.convert(mesh).polygon_indices
    terminated = polygon_indices[2::3]

    np.testing.assert_array_equal(np.invert(np.invert(terminated)), terminated)
    np.testing.assert_array_equal(np.invert(terminated), mesh.triangle_indices[1::3])

    decoded = GeometryConverter.decode_polygon_indices(polygon_indices)
    expected = mesh.triangle_indices.reshape(-1, 3)[:, [0, 2, 1]].tolist()
    assert decoded == expected


@given(mesh=mesh_strategy(max_triangles=10).filter(lambda m: m.triangle_count > 0))
@settings(max_examples=50, deadline=None)
def test_encoding_is_not_idempotent(mesh):
    once = GeometryConverter.encode_polygon_indices(mesh.triangle_indices)
    twice = GeometryConverter.encode_polygon_indices(once)

    assert not np.array_equal(twice, once)
    assert not np.array_equal(twice, mesh.triangle_indices)


def test_single_triangle_end_to_end(single_triangle):
    result = GeometryConverter.convert(single_triangle)

    np.testing.assert_array_equal(result.polygon_indices, [0, 2, -2])
    np.testing.assert_array_equal(result.flat_vertices, [-1, 0, 0, 0, 1, 0, 0, 0, 1])
    np.testing.assert_array_equal(result.flat_normals, [-0.0, 0, 1] * 3)


def test_quad_corner_normals(quad):
    result = GeometryConverter.convert(quad)

    np.testing.assert_array_equal(result.polygon_indices, [0, 2, ~1, 0, 3, ~2])
    np.testing.assert_allclose(result.flat_normals[0::3], [-0.1, -0.3, -0.2, -0.1, -0.4, -0.3])


def test_empty_mesh_yields_empty_arrays():
    mesh = MeshData(positions=[], normals=[], triangle_indices=[])
    result = GeometryConverter.convert(mesh)

    assert result.flat_vertices.shape == (0,)
    assert result.flat_normals.shape == (0,)
    assert result.polygon_indices.shape == (0,)
    assert result.polygon_indices.dtype == np.int32


def test_missing_normals_reported_and_absent(single_triangle):
    mesh = MeshData(single_triangle.positions, None, single_triangle.triangle_indices)
    diagnostics = Diagnostics()

    result = GeometryConverter.convert(mesh, diagnostics)

    assert result.flat_normals is None
    assert len(result.flat_vertices) == 9
    assert [d.kind for d in diagnostics] == [DiagnosticKind.CONVERSION_INPUT_INVALID]


def test_convert_does_not_mutate_mesh(quad):
    indices_before = quad.triangle_indices.copy()
    positions_before = quad.positions.copy()

    GeometryConverter.convert(quad)

    np.testing.assert_array_equal(quad.triangle_indices, indices_before)
    np.testing.assert_array_equal(quad.positions, positions_before)


@pytest.mark.parametrize("kwargs, message", [
    (dict(positions=[(0, 0, 0)] * 3, normals=None, triangle_indices=[0, 1]), "multiple of 3"),
    (dict(positions=[(0, 0, 0)] * 3, normals=None, triangle_indices=[0, 1, 3]), "out of range"),
    (dict(positions=[(0, 0, 0)] * 3, normals=[(0, 0, 1)] * 2, triangle_indices=[0, 1, 2]), "Normal count"),
    (dict(positions=[0.0, 1.0], normals=None, triangle_indices=[]), "3D vectors"),
])
def test_mesh_data_rejects_invalid_input(kwargs, message):
    with pytest.raises(ValueError, match=message):
        MeshData(**kwargs)


def test_decode_rejects_unterminated_stream():
    with pytest.raises(ValueError):
        GeometryConverter.decode_polygon_indices(np.array([0, 1, 2], dtype=np.int32))

"""
Property-based tests for MeshLoader component.

Uses Hypothesis to write random triangulated meshes to disk and read them
back as MeshData.
"""

import os
import sys
import tempfile

import numpy as np
import pytest
import trimesh
from hypothesis import HealthCheck, assume, given, settings
from hypothesis import strategies as st
from hypothesis.extra.numpy import arrays

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from fbx_export.mesh_loader import MeshLoader


@st.composite
def valid_mesh_strategy(draw):
    """Generate valid mesh with vertices and faces.
    
    STL stores single precision, so coordinates are drawn as float32.
    """
    n = draw(st.integers(min_value=3, max_value=50))

    vertices = draw(arrays(
        dtype=np.float32,
        shape=(n, 3),
        elements=st.floats(
            min_value=-10.0,
            max_value=10.0,
            allow_nan=False,
            allow_infinity=False,
            width=32
        )
    ))
    vertices = vertices.astype(np.float64)

    num_faces = draw(st.integers(min_value=1, max_value=min(20, n)))
    faces = []
    for _ in range(num_faces):
        indices = draw(st.lists(
            st.integers(min_value=0, max_value=n-1),
            min_size=3,
            max_size=3,
            unique=True
        ))
        faces.append(indices)

    faces = np.array(faces, dtype=np.int32)
    return vertices, faces


@given(mesh_data=valid_mesh_strategy())
@settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.filter_too_much])
def test_loaded_mesh_data_is_consistent(mesh_data):
    """
    Loading any valid STL yields MeshData whose arrays agree with each other:
    float64 (N, 3) positions and normals, int32 indices in range, stride 3.
    """
    vertices, faces = mesh_data

    mesh = trimesh.Trimesh(vertices=vertices, faces=faces)
    if len(mesh.faces) == 0:
        assume(False)

    with tempfile.NamedTemporaryFile(suffix='.stl', delete=False) as f:
        temp_path = f.name

    try:
        mesh.export(temp_path, file_type='stl')
        loaded = MeshLoader.load_mesh(temp_path)

        assert loaded.positions.dtype == np.float64
        assert loaded.normals.shape == loaded.positions.shape
        assert loaded.triangle_indices.dtype == np.int32
        assert loaded.triangle_count == len(mesh.faces)
        assert loaded.triangle_indices.max() < loaded.vertex_count

    finally:
        if os.path.exists(temp_path):
            os.unlink(temp_path)


def test_box_round_trip(tmp_path):
    path = tmp_path / "box.ply"
    trimesh.creation.box(extents=(2, 2, 2)).export(str(path))

    loaded = MeshLoader.load_mesh(str(path))

    assert loaded.vertex_count == 8
    assert loaded.triangle_count == 12
    np.testing.assert_allclose(np.abs(loaded.positions), 1.0)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError, match="Mesh file not found"):
        MeshLoader.load_mesh(str(tmp_path / "missing.stl"))


def test_invalid_file_raises(tmp_path):
    path = tmp_path / "broken.stl"
    path.write_bytes(b"\x00\x01 not a mesh")

    with pytest.raises(ValueError):
        MeshLoader.load_mesh(str(path))

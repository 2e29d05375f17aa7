import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from fbx_export.geometry import MeshData
from fbx_export.template import build_template


@pytest.fixture
def template():
    return build_template()


@pytest.fixture
def single_triangle():
    return MeshData(
        positions=[(1, 0, 0), (0, 1, 0), (0, 0, 1)],
        normals=[(0, 0, 1)] * 3,
        triangle_indices=[0, 1, 2],
    )


@pytest.fixture
def quad():
    """Two triangles sharing an edge, with distinct normals per vertex."""
    return MeshData(
        positions=np.array([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]], dtype=np.float64),
        normals=np.array([[0.1, 0, 1], [0.2, 0, 1], [0.3, 0, 1], [0.4, 0, 1]], dtype=np.float64),
        triangle_indices=np.array([0, 1, 2, 0, 2, 3], dtype=np.int32),
    )

"""
MeshLoader component for reading host meshes from disk.
"""

import os

import trimesh

from .geometry import MeshData


class MeshLoader:
    """Handles loading mesh files into MeshData snapshots."""

    @staticmethod
    def validate_path(path: str) -> None:
        """Raise FileNotFoundError with descriptive message if invalid.
        
        Args:
            path: Path to validate.
            
        Raises:
            FileNotFoundError: If the path does not exist.
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"Mesh file not found: {path}")

    @staticmethod
    def load_trimesh(path: str) -> trimesh.Trimesh:
        """Load any trimesh-supported file as a single triangulated mesh.
        
        Scenes are concatenated into one mesh.
        
        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file cannot be read as a mesh.
        """
        MeshLoader.validate_path(path)

        try:
            mesh = trimesh.load(path, force="mesh")
        except Exception as e:
            raise ValueError(f"Invalid mesh format in file: {path}") from e

        if not isinstance(mesh, trimesh.Trimesh) or len(mesh.faces) == 0:
            raise ValueError(f"No triangle mesh found in file: {path}")
        return mesh

    @staticmethod
    def load_mesh(path: str) -> MeshData:
        """Load a mesh file, return its MeshData.
        
        Args:
            path: Path to an STL, OBJ, PLY or other trimesh-readable file.
            
        Returns:
            MeshData with float64 positions and vertex normals and int32
            triangle indices.
        """
        return MeshData.from_trimesh(MeshLoader.load_trimesh(path))

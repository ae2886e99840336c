"""
Geometry interop for meshkernel.

Converts between the kernel ``Mesh`` and trimesh / COMPAS meshes, and loads
or saves files through trimesh's codecs. Polygon faces survive the COMPAS
round trip; trimesh only stores triangles, so faces are triangulated on the
way out.
"""

from pathlib import Path
from typing import Any

import trimesh
from compas.datastructures import Mesh as CompasMesh

from meshkernel.core.exceptions import GeometryError
from meshkernel.core.mesh import Mesh


class GeometryConverter:
    """
    Converter between the kernel mesh and other geometry representations.

    Handles conversion to and from trimesh and COMPAS meshes.
    """

    @staticmethod
    def from_trimesh(mesh: trimesh.Trimesh, name: str = "Mesh") -> Mesh:
        """
        Convert a trimesh mesh to a kernel Mesh.

        Raises:
            GeometryError: If conversion fails
        """
        try:
            return Mesh.from_vertices_and_faces(
                mesh.vertices.tolist(), mesh.faces.tolist(), name=name
            )
        except Exception as e:
            raise GeometryError(f"Failed to convert Trimesh to Mesh: {e}") from e

    @staticmethod
    def to_trimesh(mesh: Mesh) -> trimesh.Trimesh:
        """
        Convert a kernel Mesh to a (triangulated) trimesh mesh.

        Raises:
            GeometryError: If conversion fails
        """
        # meshkernel.geometry imports this module
        from meshkernel.geometry.triangulation import triangle_array

        try:
            triangles, _ = triangle_array(mesh)
            return trimesh.Trimesh(
                vertices=mesh.vertex_positions(), faces=triangles, process=False
            )
        except Exception as e:
            raise GeometryError(f"Failed to convert Mesh to Trimesh: {e}") from e

    @staticmethod
    def from_compas(mesh: CompasMesh, name: str = "Mesh") -> Mesh:
        """
        Convert a COMPAS mesh to a kernel Mesh, keeping polygon faces.

        Raises:
            GeometryError: If conversion fails
        """
        try:
            index = mesh.vertex_index()
            vertices = [mesh.vertex_coordinates(v) for v in mesh.vertices()]
            faces = [[index[v] for v in mesh.face_vertices(f)] for f in mesh.faces()]
            return Mesh.from_vertices_and_faces(vertices, faces, name=name)
        except Exception as e:
            raise GeometryError(f"Failed to convert COMPAS to Mesh: {e}") from e

    @staticmethod
    def to_compas(mesh: Mesh) -> CompasMesh:
        """
        Convert a kernel Mesh to a COMPAS mesh.

        Raises:
            GeometryError: If conversion fails
        """
        try:
            vertices = mesh.vertex_positions().tolist()
            faces = [list(face.vertices) for face in mesh.faces]
            return CompasMesh.from_vertices_and_faces(vertices, faces)
        except Exception as e:
            raise GeometryError(f"Failed to convert Mesh to COMPAS: {e}") from e


class GeometryLoader:
    """
    Loads and saves meshes through trimesh's file codecs.
    """

    SUPPORTED_FORMATS = {".stl", ".obj", ".ply", ".off"}

    @classmethod
    def load(cls, file_path: str | Path, **kwargs: Any) -> Mesh:
        """
        Load geometry from file.

        Args:
            file_path: Path to geometry file
            **kwargs: Additional arguments passed to trimesh.load

        Returns:
            Kernel Mesh named after the file stem

        Raises:
            GeometryError: If file format is unsupported or loading fails
        """
        path = Path(file_path)

        if not path.exists():
            raise GeometryError(f"File not found: {path}")

        if path.suffix.lower() not in cls.SUPPORTED_FORMATS:
            raise GeometryError(
                f"Unsupported format: {path.suffix}. "
                f"Supported formats: {sorted(cls.SUPPORTED_FORMATS)}"
            )

        try:
            loaded = trimesh.load(str(path), **kwargs)

            # Handle Scene vs Mesh
            if isinstance(loaded, trimesh.Scene):
                mesh = trimesh.util.concatenate(
                    [geom for geom in loaded.geometry.values()
                     if isinstance(geom, trimesh.Trimesh)]
                )
            elif isinstance(loaded, trimesh.Trimesh):
                mesh = loaded
            else:
                raise GeometryError(f"Unexpected geometry type: {type(loaded)}")

            return GeometryConverter.from_trimesh(mesh, name=path.stem)

        except GeometryError:
            raise
        except Exception as e:
            raise GeometryError(f"Failed to load geometry from {path}: {e}") from e

    @classmethod
    def save(cls, mesh: Mesh, file_path: str | Path, **kwargs: Any) -> None:
        """
        Save a kernel Mesh to file (faces are triangulated).

        Raises:
            GeometryError: If the format is unsupported or saving fails
        """
        path = Path(file_path)
        if path.suffix.lower() not in cls.SUPPORTED_FORMATS:
            raise GeometryError(
                f"Unsupported format: {path.suffix}. "
                f"Supported formats: {sorted(cls.SUPPORTED_FORMATS)}"
            )

        tmesh = GeometryConverter.to_trimesh(mesh)
        try:
            tmesh.export(str(path), **kwargs)
        except Exception as e:
            raise GeometryError(f"Failed to save geometry to {path}: {e}") from e

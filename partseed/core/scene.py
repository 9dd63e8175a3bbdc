from __future__ import annotations
from pathlib import Path
from typing import Optional, Sequence
import numpy as np
import trimesh

from .errors import NoUsableGeometry
from .geometry import AABB, as_triangle_array
from .utils import get_logger

_log = get_logger()


class MeshSource:
    """Triangle list in the emitter's local space.

    Either load a mesh file (anything ``trimesh`` reads) or wrap vertex/face
    arrays. An optional 4x4 affine ``transform`` maps mesh coordinates into
    emitter space before sampling.
    """
    def __init__(
        self,
        mesh_path: str | Path | None = None,
        vertices: Optional[np.ndarray] = None,
        faces: Optional[np.ndarray] = None,
        transform: Optional[Sequence[Sequence[float]] | np.ndarray] = None,
    ) -> None:
        self.mesh_path = Path(mesh_path) if mesh_path is not None else None
        if vertices is not None and faces is not None:
            verts = np.asarray(vertices, dtype=np.float64)
            tri_idx = np.asarray(faces, dtype=np.int64)
        elif self.mesh_path is not None:
            verts, tri_idx = self._load_from_path(self.mesh_path)
        else:
            raise ValueError("Provide either mesh_path or vertices and faces.")

        if tri_idx.size == 0:
            raise NoUsableGeometry(f"'{self.mesh_path or 'mesh'}' doesn't contain face geometry.")
        if tri_idx.ndim != 2 or tri_idx.shape[1] != 3:
            raise NoUsableGeometry(f"Faces must be triangles, got shape {tri_idx.shape}.")

        tris = verts[tri_idx]
        if transform is not None:
            tris = self._apply_transform(tris, np.asarray(transform, dtype=np.float64))
        self._triangles = as_triangle_array(tris)

    # -- IO helpers --
    @staticmethod
    def _load_from_path(path: Path) -> tuple[np.ndarray, np.ndarray]:
        # process=False keeps degenerate faces so sampling sees the file as written.
        mesh = trimesh.load(str(path), force="mesh", process=False)
        verts = np.asarray(mesh.vertices, dtype=np.float64)
        faces = np.asarray(mesh.faces, dtype=np.int64)
        _log.debug("Loaded %s: %d vertices, %d faces.", path, len(verts), len(faces))
        return verts, faces

    @staticmethod
    def _apply_transform(tris: np.ndarray, transform: np.ndarray) -> np.ndarray:
        if transform.shape != (4, 4):
            raise ValueError(f"transform must be 4x4, got {transform.shape}")
        flat = tris.reshape(-1, 3)
        out = flat @ transform[:3, :3].T + transform[:3, 3]
        return out.reshape(tris.shape)

    # -- API --
    @property
    def triangles(self) -> np.ndarray:
        return self._triangles

    def __len__(self) -> int:
        return len(self._triangles)

    def bounds(self) -> AABB:
        return AABB.from_triangles(self._triangles)

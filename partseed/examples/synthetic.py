from __future__ import annotations

from pathlib import Path
from typing import Iterable, Tuple

import numpy as np

# Every preset is wound counter-clockwise seen from outside, so face normals point outward.


def _grid_plane(size: float, divisions: int, z: float) -> Tuple[np.ndarray, np.ndarray]:
    lin = np.linspace(-size / 2.0, size / 2.0, divisions + 1, dtype=np.float32)
    xv, yv = np.meshgrid(lin, lin, indexing="ij")
    vertices = np.column_stack([xv.ravel(), yv.ravel(), np.full_like(xv.ravel(), z)])

    faces = []
    for i in range(divisions):
        for j in range(divisions):
            idx0 = i * (divisions + 1) + j
            idx1 = idx0 + 1
            idx2 = idx0 + (divisions + 1)
            idx3 = idx2 + 1
            faces.append([idx0, idx2, idx3])
            faces.append([idx0, idx3, idx1])
    return vertices.astype(np.float32), np.asarray(faces, dtype=np.int64)


def _box(center: Tuple[float, float, float], size: Tuple[float, float, float]) -> Tuple[np.ndarray, np.ndarray]:
    cx, cy, cz = center
    hx, hy, hz = size[0] / 2.0, size[1] / 2.0, size[2] / 2.0
    vertices = np.array([
        [cx - hx, cy - hy, cz - hz],
        [cx + hx, cy - hy, cz - hz],
        [cx + hx, cy + hy, cz - hz],
        [cx - hx, cy + hy, cz - hz],
        [cx - hx, cy - hy, cz + hz],
        [cx + hx, cy - hy, cz + hz],
        [cx + hx, cy + hy, cz + hz],
        [cx - hx, cy + hy, cz + hz],
    ], dtype=np.float32)
    faces = np.array([
        [0, 2, 1], [0, 3, 2],  # bottom
        [4, 5, 6], [4, 6, 7],  # top
        [0, 1, 5], [0, 5, 4],  # front
        [1, 2, 6], [1, 6, 5],  # right
        [2, 3, 7], [2, 7, 6],  # back
        [3, 0, 4], [3, 4, 7],  # left
    ], dtype=np.int64)
    return vertices, faces


def _tetra(origin: Tuple[float, float, float], edge: float) -> Tuple[np.ndarray, np.ndarray]:
    vertices = np.array([
        [0.0, 0.0, 0.0],
        [edge, 0.0, 0.0],
        [0.0, edge, 0.0],
        [0.0, 0.0, edge],
    ], dtype=np.float32) + np.asarray(origin, dtype=np.float32)
    faces = np.array([[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]], dtype=np.int64)
    return vertices, faces


def _merge_parts(parts: Iterable[Tuple[np.ndarray, np.ndarray]]) -> Tuple[np.ndarray, np.ndarray]:
    vertices: list[np.ndarray] = []
    faces: list[np.ndarray] = []
    offset = 0
    for verts, tri in parts:
        vertices.append(verts)
        faces.append(tri + offset)
        offset += verts.shape[0]
    return np.vstack(vertices).astype(np.float32, copy=False), np.vstack(faces).astype(np.int64, copy=False)


def write_ascii_ply(path: Path, vertices: np.ndarray, faces: np.ndarray) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("ply\n")
        f.write("format ascii 1.0\n")
        f.write(f"element vertex {len(vertices)}\n")
        f.write("property float x\nproperty float y\nproperty float z\n")
        f.write(f"element face {len(faces)}\n")
        f.write("property list uchar int vertex_indices\n")
        f.write("end_header\n")
        for x, y, z in vertices:
            f.write(f"{x:.6f} {y:.6f} {z:.6f}\n")
        for tri in faces:
            f.write(f"3 {tri[0]} {tri[1]} {tri[2]}\n")


def build_mesh(preset: str, size: float) -> Tuple[np.ndarray, np.ndarray]:
    preset = preset.lower()
    if preset == "cube":
        return _box(center=(0.0, 0.0, 0.0), size=(size, size, size))
    if preset == "tetra":
        return _tetra(origin=(0.0, 0.0, 0.0), edge=size)
    if preset == "plane":
        return _grid_plane(size=size, divisions=8, z=0.0)
    if preset == "demo":
        box = _box(center=(-size * 0.3, 0.0, size * 0.25), size=(size * 0.4, size * 0.4, size * 0.5))
        tetra = _tetra(origin=(size * 0.1, -size * 0.2, 0.0), edge=size * 0.4)
        return _merge_parts([box, tetra])
    raise ValueError(f"Unknown synthetic mesh preset '{preset}'.")


def generate_mesh(preset: str, size: float, path: Path) -> None:
    vertices, faces = build_mesh(preset, size)
    write_ascii_ply(path, vertices, faces)

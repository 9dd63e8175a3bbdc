from __future__ import annotations
from typing import Protocol
import numpy as np


class Intersector(Protocol):
    def intersect_segment(self, tris: np.ndarray, start: np.ndarray, end: np.ndarray) -> np.ndarray: ...


class NumpyIntersector:
    """Vectorised Möller-Trumbore segment test against every triangle.

    Both faces count as hits; triangles parallel to the segment never do.
    """

    def __init__(self, epsilon: float = 1e-8) -> None:
        self.epsilon = float(epsilon)

    def intersect_segment(self, tris: np.ndarray, start: np.ndarray, end: np.ndarray) -> np.ndarray:
        """Return the (K, 3) points where the segment ``start``→``end`` crosses ``tris``."""
        if len(tris) == 0:
            return np.zeros((0, 3), dtype=np.float64)
        start = np.asarray(start, dtype=np.float64)
        seg = np.asarray(end, dtype=np.float64) - start

        v0 = tris[:, 0]
        edge1 = tris[:, 1] - v0
        edge2 = tris[:, 2] - v0
        pvec = np.cross(seg, edge2)
        det = np.einsum("ij,ij->i", edge1, pvec)
        valid = np.abs(det) > self.epsilon
        inv_det = np.divide(1.0, det, out=np.zeros_like(det), where=valid)

        tvec = start - v0
        u = np.einsum("ij,ij->i", tvec, pvec) * inv_det
        qvec = np.cross(tvec, edge1)
        v = (qvec @ seg) * inv_det
        t = np.einsum("ij,ij->i", edge2, qvec) * inv_det

        hit = valid & (u >= 0.0) & (u <= 1.0) & (v >= 0.0) & (u + v <= 1.0) & (t >= 0.0) & (t <= 1.0)
        return start + t[hit, None] * seg

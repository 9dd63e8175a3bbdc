from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import numpy as np

from .emission import EmissionPoints
from .errors import NoUsableGeometry
from .geometry import (
    AREA_EPSILON,
    TriangleInput,
    as_triangle_array,
    barycentric_points,
    triangle_areas,
    triangle_normals,
)
from .utils import get_logger

_log = get_logger()


@dataclass(frozen=True)
class CumulativeAreaMap:
    """Prefix sums of triangle areas mapped to triangle indices.

    ``keys[i]`` is the running area *before* triangle ``indices[i]`` was added,
    so keys are strictly increasing and ``keys[0] == 0``.
    """
    keys: np.ndarray      # (K,) float64
    indices: np.ndarray   # (K,) int64
    total: float

    @classmethod
    def build(cls, tris: np.ndarray, epsilon: float = AREA_EPSILON) -> "CumulativeAreaMap":
        areas = triangle_areas(tris) if len(tris) else np.zeros((0,), dtype=np.float64)
        keep = np.flatnonzero(areas >= epsilon)
        skipped = len(tris) - len(keep)
        if skipped:
            _log.debug("Skipping %d degenerate triangles (area < %g).", skipped, epsilon)
        kept_areas = areas[keep]
        sums = np.cumsum(kept_areas)
        keys = np.concatenate([[0.0], sums[:-1]]) if len(sums) else np.zeros((0,), dtype=np.float64)
        total = float(sums[-1]) if len(sums) else 0.0
        return cls(keys=keys, indices=keep.astype(np.int64), total=total)

    def __len__(self) -> int:
        return len(self.keys)

    def lookup(self, areapos: np.ndarray) -> np.ndarray:
        """Triangle index of the entry with the greatest key <= ``areapos``."""
        slot = np.searchsorted(self.keys, areapos, side="right") - 1
        return self.indices[np.clip(slot, 0, len(self.keys) - 1)]


class MeshAreaSampler:
    """Area-weighted random points on a triangle surface."""

    def __init__(self, include_normals: bool = False, epsilon: float = AREA_EPSILON) -> None:
        self.include_normals = bool(include_normals)
        self.epsilon = float(epsilon)

    def sample(
        self,
        triangles: TriangleInput,
        count: int,
        rng: Optional[np.random.Generator] = None,
    ) -> EmissionPoints:
        if count <= 0:
            raise ValueError("count must be positive.")
        rng = rng if rng is not None else np.random.default_rng()
        tris = as_triangle_array(triangles)

        area_map = CumulativeAreaMap.build(tris, self.epsilon)
        if len(area_map) == 0 or area_map.total == 0.0:
            raise NoUsableGeometry("The geometry's faces don't contain any area.")

        areapos = rng.uniform(0.0, area_map.total, size=count)
        picked = area_map.lookup(areapos)
        chosen = tris[picked]

        r = rng.random((count, 2))
        flip = r.sum(axis=1) > 1.0
        r[flip] = 1.0 - r[flip]
        points = barycentric_points(chosen, r)

        normals = triangle_normals(chosen) if self.include_normals else None
        _log.info(
            "Surface sampler: %d points over %d triangles (total area %.6g).",
            count, len(area_map), area_map.total,
        )
        return EmissionPoints(positions=points, normals=normals, requested=count)

"""Volume fill of a triangle mesh by axis-aligned ray rejection sampling.

Each sample casts a segment along a random principal axis through the mesh
bounds, intersects it with every triangle and picks a uniform point between
the nearest and farthest hit. Samples whose rays miss ``attempts`` times are
dropped, so a call may return fewer points than requested.
"""

from __future__ import annotations
from typing import Optional
import numpy as np

from .emission import EmissionPoints
from .errors import NoUsableGeometry
from .geometry import AABB, AREA_EPSILON, TriangleInput, as_triangle_array, triangle_areas
from .intersector import Intersector, NumpyIntersector
from .utils import get_logger

_log = get_logger()


class MeshVolumeSampler:
    def __init__(
        self,
        attempts: int = 5,
        ray_margin: float = 1.0,
        intersector: Optional[Intersector] = None,
    ) -> None:
        if attempts <= 0:
            raise ValueError("attempts must be positive.")
        self.attempts = int(attempts)
        self.ray_margin = float(ray_margin)
        self.intersector = intersector if intersector is not None else NumpyIntersector()

    def _cast(self, tris: np.ndarray, aabb: AABB, rng: np.random.Generator) -> Optional[np.ndarray]:
        axis = int(rng.integers(0, 3))
        direction = np.zeros(3, dtype=np.float64)
        direction[axis] = 1.0

        start = (1.0 - direction) * rng.random(3) * aabb.size + aabb.position
        end = start + aabb.size * direction
        start = start - direction * self.ray_margin
        end = end + direction * self.ray_margin

        hits = self.intersector.intersect_segment(tris, start, end)
        if len(hits) == 0:
            return None
        proj = (hits - start) @ direction
        lo, hi = float(proj.min()), float(proj.max())
        val = lo + (hi - lo) * float(rng.random())
        return start + direction * val

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
        aabb = AABB.from_triangles(tris)
        if not np.any(triangle_areas(tris) >= AREA_EPSILON):
            raise NoUsableGeometry("The geometry's faces don't contain any area.")

        points: list[np.ndarray] = []
        for index in range(count):
            for _attempt in range(self.attempts):
                point = self._cast(tris, aabb, rng)
                if point is not None:
                    points.append(point)
                    break
            else:
                _log.debug("Volume sample %d: no hit in %d attempts, dropped.", index, self.attempts)

        missed = count - len(points)
        if missed:
            _log.warning("Volume sampler: %d of %d samples missed the mesh after %d attempts.",
                         missed, count, self.attempts)
        _log.info("Volume sampler: %d points inside %d triangles.", len(points), len(tris))
        positions = np.vstack(points) if points else np.zeros((0, 3), dtype=np.float64)
        return EmissionPoints(positions=positions, requested=count)

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Sequence, Union
import numpy as np

from .errors import FormatError, NoUsableGeometry
from .utils import normalize_or_zero

# Triangles smaller than this are treated as degenerate by the area sampler.
AREA_EPSILON = 1e-5

# Pixels with alpha strictly above this value are solid.
ALPHA_THRESHOLD = 128


def triangle_areas(tris: np.ndarray) -> np.ndarray:
    """Areas of an (M, 3, 3) triangle array."""
    cross = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
    return 0.5 * np.linalg.norm(cross, axis=1)


def barycentric_points(tris: np.ndarray, r: np.ndarray) -> np.ndarray:
    """Points ``v0 + r1*(v1-v0) + r2*(v2-v0)`` for (M, 3, 3) triangles and (M, 2) weights."""
    v0 = tris[:, 0]
    return v0 + r[:, :1] * (tris[:, 1] - v0) + r[:, 1:] * (tris[:, 2] - v0)


def triangle_normals(tris: np.ndarray) -> np.ndarray:
    """Unit plane normals (counter-clockwise winding); zero for degenerate rows."""
    cross = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
    return normalize_or_zero(cross)


@dataclass(frozen=True)
class Triangle:
    v0: tuple[float, float, float]
    v1: tuple[float, float, float]
    v2: tuple[float, float, float]

    def as_array(self) -> np.ndarray:
        return np.array([self.v0, self.v1, self.v2], dtype=np.float64)

    @property
    def area(self) -> float:
        return float(triangle_areas(self.as_array()[None])[0])

    @property
    def normal(self) -> np.ndarray:
        return triangle_normals(self.as_array()[None])[0]

    def plane(self) -> tuple[np.ndarray, float]:
        """Return ``(normal, d)`` with ``dot(normal, p) == d`` on the plane."""
        n = self.normal
        return n, float(np.dot(n, self.as_array()[0]))

    def point_at(self, r1: float, r2: float) -> np.ndarray:
        """Point ``v0 + r1*(v1-v0) + r2*(v2-v0)``; callers keep ``r1 + r2 <= 1``."""
        return barycentric_points(self.as_array()[None], np.array([[r1, r2]], dtype=np.float64))[0]


TriangleInput = Union[np.ndarray, Sequence[Triangle], Iterable[Sequence[Sequence[float]]]]


def as_triangle_array(triangles: TriangleInput) -> np.ndarray:
    """Coerce triangles (``Triangle`` objects or nested sequences) to a float64 (M, 3, 3) array."""
    if isinstance(triangles, np.ndarray):
        arr = triangles.astype(np.float64, copy=False)
    else:
        rows = [t.as_array() if isinstance(t, Triangle) else np.asarray(t, dtype=np.float64) for t in triangles]
        arr = np.asarray(rows, dtype=np.float64) if rows else np.zeros((0, 3, 3), dtype=np.float64)
    if arr.size == 0:
        return np.zeros((0, 3, 3), dtype=np.float64)
    if arr.ndim != 3 or arr.shape[1:] != (3, 3):
        raise NoUsableGeometry(f"Triangles must have shape (M, 3, 3), got {arr.shape}.")
    return arr


@dataclass(frozen=True)
class AABB:
    position: np.ndarray   # (3,) min corner
    size: np.ndarray       # (3,) extent

    @property
    def end(self) -> np.ndarray:
        return self.position + self.size

    @classmethod
    def from_triangles(cls, tris: np.ndarray) -> "AABB":
        if len(tris) == 0:
            raise NoUsableGeometry("The geometry doesn't contain any faces.")
        pts = tris.reshape(-1, 3)
        mn = pts.min(axis=0)
        mx = pts.max(axis=0)
        return cls(position=mn, size=mx - mn)

    def grow(self, margin: float) -> "AABB":
        return AABB(position=self.position - margin, size=self.size + 2.0 * margin)

    def contains(self, points: np.ndarray, tol: float = 1e-6) -> np.ndarray:
        points = np.asarray(points, dtype=np.float64)
        return np.all((points >= self.position - tol) & (points <= self.end + tol), axis=1)


class PixelGrid:
    """Read-only RGBA8 pixel buffer addressed by ``(x, y)``.

    The backing array is row-major with shape (H, W, 4); ``pixel(x, y)`` reads
    ``data[y, x]``.
    """

    def __init__(self, data: np.ndarray) -> None:
        self._data = self._normalize(data)
        self._data.flags.writeable = False

    @staticmethod
    def _normalize(data: np.ndarray) -> np.ndarray:
        arr = np.asarray(data)
        if arr.dtype == np.bool_:
            arr = arr.astype(np.uint8) * 255
        if not np.issubdtype(arr.dtype, np.integer):
            raise FormatError(f"Pixel data must be 8-bit integers, got dtype {arr.dtype}.")
        if arr.size and (arr.min() < 0 or arr.max() > 255):
            raise FormatError("Pixel values must lie in [0, 255].")
        arr = arr.astype(np.uint8)
        if arr.ndim == 2:
            arr = arr[:, :, None]
        if arr.ndim != 3:
            raise FormatError(f"Pixel data must be (H, W) or (H, W, C), got shape {arr.shape}.")
        h, w, c = arr.shape
        if h == 0 or w == 0:
            raise FormatError("Pixel grid must have non-zero width and height.")
        if c == 4:
            return np.array(arr, copy=True)
        opaque = np.full((h, w, 1), 255, dtype=np.uint8)
        if c == 1:
            return np.concatenate([arr, arr, arr, opaque], axis=2)
        if c == 2:
            return np.concatenate([arr[:, :, :1], arr[:, :, :1], arr[:, :, :1], arr[:, :, 1:]], axis=2)
        if c == 3:
            return np.concatenate([arr, opaque], axis=2)
        raise FormatError(f"Unsupported channel count {c}.")

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def width(self) -> int:
        return int(self._data.shape[1])

    @property
    def height(self) -> int:
        return int(self._data.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def alpha(self) -> np.ndarray:
        return self._data[:, :, 3]

    def pixel(self, x: int, y: int) -> np.ndarray:
        return self._data[y, x]

    def solid_mask(self) -> np.ndarray:
        """(H, W) boolean mask of solid pixels."""
        return self.alpha > ALPHA_THRESHOLD

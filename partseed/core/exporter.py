from __future__ import annotations
from typing import Dict, List, Optional, Protocol
import numpy as np
import pathlib

from .emission import EmissionPoints
from .utils import get_logger

_log = get_logger()


class EmissionSink(Protocol):
    def write(self, points: EmissionPoints) -> None: ...
    def close(self) -> None: ...


def _as_xyz(values: np.ndarray, dims: int) -> np.ndarray:
    if dims == 3:
        return values
    xyz = np.zeros((len(values), 3), dtype=np.float32)
    xyz[:, :dims] = values
    return xyz


class PlySink:
    """ASCII PLY writer; 2D points get z = 0."""
    def __init__(self, path: str) -> None:
        self.path = path
        self._points: Optional[EmissionPoints] = None

    def write(self, points: EmissionPoints) -> None:
        self._points = points

    def close(self) -> None:
        if self._points is None:
            return
        pts = self._points
        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        xyz = _as_xyz(pts.positions, pts.dimensions)
        cols: List[np.ndarray] = [xyz]
        with open(path, "w", encoding="utf-8") as f:
            f.write("ply\nformat ascii 1.0\n")
            f.write(f"element vertex {len(xyz)}\n")
            f.write("property float x\nproperty float y\nproperty float z\n")
            if pts.normals is not None:
                f.write("property float nx\nproperty float ny\nproperty float nz\n")
                cols.append(_as_xyz(pts.normals, pts.dimensions))
            if pts.colors is not None:
                f.write("property uchar red\nproperty uchar green\nproperty uchar blue\nproperty uchar alpha\n")
                cols.append(pts.colors.astype(np.float32))
            f.write("end_header\n")
            n_float = 6 if pts.normals is not None else 3
            for row in np.hstack(cols):
                floats = " ".join(f"{float(v):.6f}" for v in row[:n_float])
                ints = " ".join(str(int(v)) for v in row[n_float:])
                f.write(f"{floats} {ints}\n" if ints else f"{floats}\n")
        _log.debug("Wrote %d points to %s", len(xyz), path)
        self._points = None


class NpzSink:
    def __init__(self, path: str) -> None:
        self.path = path
        self._points: Optional[EmissionPoints] = None

    def write(self, points: EmissionPoints) -> None:
        self._points = points

    def close(self) -> None:
        if self._points is None:
            return
        pts = self._points
        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        out: Dict[str, np.ndarray] = {"positions": pts.positions}
        if pts.normals is not None:
            out["normals"] = pts.normals
        if pts.colors is not None:
            out["colors"] = pts.colors
        if pts.requested is not None:
            out["requested"] = np.asarray(pts.requested, dtype=np.int64)
        np.savez(path, **out)
        _log.debug("Wrote %d points to %s", len(pts), path)
        self._points = None

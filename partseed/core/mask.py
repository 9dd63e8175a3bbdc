"""Emission points from a 2D image mask.

Pixels are visited x-major (outer loop over x, inner loop over y) so the
output order is reproducible: a 2x2 opaque mask yields (0,0), (0,1), (1,0), (1,1).
"""

from __future__ import annotations
from enum import Enum
from typing import Optional, Union
import numpy as np

from .emission import EmissionPoints
from .errors import EmptyResult, InputError, SizeMismatch
from .geometry import PixelGrid
from .utils import get_logger, normalize_or_zero

_log = get_logger()

# Offsets of the 5x5 window used to estimate outward border normals.
_NORMAL_WINDOW = [(dx, dy) for dx in range(-2, 3) for dy in range(-2, 3) if (dx, dy) != (0, 0)]


class MaskMode(str, Enum):
    SOLID = "solid"
    BORDER = "border"


class DirectionMode(str, Enum):
    NONE = "none"
    GENERATE = "generate"
    TEXTURE = "texture"


def _as_grid(grid: Union[PixelGrid, np.ndarray]) -> PixelGrid:
    return grid if isinstance(grid, PixelGrid) else PixelGrid(grid)


def _border_mask(solid: np.ndarray) -> np.ndarray:
    """Solid pixels with at least one non-solid 8-neighbour; outside the grid is non-solid."""
    h, w = solid.shape
    padded = np.pad(solid, 1, constant_values=False)
    interior = np.ones_like(solid)
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            interior &= padded[1 + dy:1 + dy + h, 1 + dx:1 + dx + w]
    return solid & ~interior


def _generate_normals(solid: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    padded = np.pad(solid, 2, constant_values=False)
    acc = np.zeros((len(xs), 2), dtype=np.float64)
    for dx, dy in _NORMAL_WINDOW:
        open_ = ~padded[ys + 2 + dy, xs + 2 + dx]
        step = np.array([dx, dy], dtype=np.float64) / np.hypot(dx, dy)
        acc[open_] += step
    return normalize_or_zero(acc)


def _texture_normals(direction: PixelGrid, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    rg = direction.data[ys, xs, :2].astype(np.float64)
    return normalize_or_zero(rg / 255.0 - 0.5)


class ImageMaskSampler:
    """Turns an RGBA mask into emission positions, optional normals and colors."""

    def __init__(
        self,
        mode: Union[MaskMode, str] = MaskMode.SOLID,
        direction_mode: Union[DirectionMode, str] = DirectionMode.NONE,
        capture_colors: bool = False,
    ) -> None:
        self.mode = MaskMode(mode)
        self.direction_mode = DirectionMode(direction_mode)
        self.capture_colors = bool(capture_colors)

    def sample(
        self,
        mask: Union[PixelGrid, np.ndarray],
        direction: Optional[Union[PixelGrid, np.ndarray]] = None,
    ) -> EmissionPoints:
        mask = _as_grid(mask)
        direction_grid: Optional[PixelGrid] = None
        if self.direction_mode is DirectionMode.TEXTURE:
            if direction is None:
                raise InputError("Direction mode 'texture' requires a direction image.")
            direction_grid = _as_grid(direction)
            if direction_grid.size != mask.size:
                raise SizeMismatch(
                    f"Mask and direction texture must have the same size: "
                    f"{mask.size} != {direction_grid.size}."
                )
        elif direction is not None:
            _log.warning(
                "Direction image ignored: direction mode is '%s', not 'texture'.", self.direction_mode.value
            )

        solid = mask.solid_mask()
        selected = solid if self.mode is MaskMode.SOLID else _border_mask(solid)

        # Transposing makes argwhere enumerate x-major, y-minor.
        xy = np.argwhere(selected.T)
        if len(xy) == 0:
            raise EmptyResult("No pixels with alpha > 128 in image.")
        xs, ys = xy[:, 0], xy[:, 1]

        normals: Optional[np.ndarray] = None
        if self.direction_mode is DirectionMode.GENERATE:
            if self.mode is MaskMode.BORDER:
                normals = _generate_normals(solid, xs, ys)
            else:
                _log.warning("Generated directions need border mode; solid-mode normals are zero.")
                normals = np.zeros((len(xy), 2), dtype=np.float64)
        elif direction_grid is not None:
            normals = _texture_normals(direction_grid, xs, ys)

        colors = mask.data[ys, xs].copy() if self.capture_colors else None

        _log.info(
            "Mask sampler: %d of %d pixels emitted (%s, directions=%s).",
            len(xy), mask.width * mask.height, self.mode.value, self.direction_mode.value,
        )
        return EmissionPoints(positions=xy.astype(np.float32), normals=normals, colors=colors)


def sample_image_mask(
    mask: Union[PixelGrid, np.ndarray],
    mode: Union[MaskMode, str] = MaskMode.SOLID,
    direction_mode: Union[DirectionMode, str] = DirectionMode.NONE,
    direction: Optional[Union[PixelGrid, np.ndarray]] = None,
    capture_colors: bool = False,
) -> EmissionPoints:
    sampler = ImageMaskSampler(mode=mode, direction_mode=direction_mode, capture_colors=capture_colors)
    return sampler.sample(mask, direction)

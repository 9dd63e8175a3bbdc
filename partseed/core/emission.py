from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Optional
import numpy as np


@dataclass(frozen=True)
class EmissionPoints:
    """Index-aligned emission data.

    ``positions`` is (N, D) with D = 2 for image masks and 3 for meshes.
    ``normals`` has the same shape when present; ``colors`` is (N, 4) uint8.
    ``requested`` is the sample count asked for, when the sampler had one.
    """
    positions: np.ndarray
    normals: Optional[np.ndarray] = None
    colors: Optional[np.ndarray] = None
    requested: Optional[int] = None

    def __post_init__(self) -> None:
        pos = np.asarray(self.positions, dtype=np.float32)
        if pos.ndim != 2:
            raise ValueError(f"positions must be 2D, got shape {pos.shape}")
        object.__setattr__(self, "positions", pos)
        n = len(pos)
        if self.normals is not None:
            nrm = np.asarray(self.normals, dtype=np.float32)
            if nrm.shape != pos.shape:
                raise ValueError(f"normals shape {nrm.shape} != positions shape {pos.shape}")
            object.__setattr__(self, "normals", nrm)
        if self.colors is not None:
            col = np.asarray(self.colors, dtype=np.uint8)
            if col.shape != (n, 4):
                raise ValueError(f"colors shape {col.shape} != ({n}, 4)")
            object.__setattr__(self, "colors", col)

    def __len__(self) -> int:
        return len(self.positions)

    @property
    def dimensions(self) -> int:
        return int(self.positions.shape[1])

    @property
    def is_partial(self) -> bool:
        return self.requested is not None and len(self) < self.requested

    def colors_unit(self) -> Optional[np.ndarray]:
        """Colors as float32 RGBA in [0, 1]."""
        if self.colors is None:
            return None
        return self.colors.astype(np.float32) / 255.0

    def translated(self, offset: np.ndarray) -> "EmissionPoints":
        offset = np.asarray(offset, dtype=np.float32)
        return replace(self, positions=self.positions + offset)

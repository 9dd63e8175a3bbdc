from __future__ import annotations
from pathlib import Path
import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import ImageLoadError
from .geometry import PixelGrid


def load_pixel_grid(path: str | Path) -> PixelGrid:
    """Decode an image file into an RGBA8 :class:`PixelGrid`."""
    path = Path(path)
    try:
        with Image.open(path) as img:
            rgba = img.convert("RGBA")
            data = np.asarray(rgba, dtype=np.uint8)
    except (OSError, UnidentifiedImageError) as exc:
        raise ImageLoadError(f"Error loading image '{path}': {exc}") from exc
    return PixelGrid(data)

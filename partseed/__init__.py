"""partseed – particle emission points from image masks and triangle meshes.

This package contains the emission core and the thin layers around it:
- Geometry primitives: Triangle, AABB, PixelGrid (core.geometry)
- ImageMaskSampler: solid/border pixels with optional normals and colors (core.mask)
- MeshAreaSampler: area-weighted surface points (core.surface)
- MeshVolumeSampler: ray rejection-sampled volume points (core.volume)
- EmissionPoints result container (core.emission)
- Output sinks for NPZ / PLY (core.exporter)

Samplers take explicit inputs and an explicit ``numpy.random.Generator`` and
return complete ``EmissionPoints``; they keep no state between calls.
"""

from .core.errors import (EmissionError, InputError, ImageLoadError, FormatError,
                          SizeMismatch, NoUsableGeometry, EmptyResult)
from .core.geometry import Triangle, AABB, PixelGrid
from .core.emission import EmissionPoints
from .core.mask import MaskMode, DirectionMode, ImageMaskSampler, sample_image_mask
from .core.surface import CumulativeAreaMap, MeshAreaSampler
from .core.volume import MeshVolumeSampler
from .core.intersector import Intersector, NumpyIntersector
from .core.scene import MeshSource
from .core.imageio import load_pixel_grid
from .core.exporter import EmissionSink, NpzSink, PlySink

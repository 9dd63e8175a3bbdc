"""Configuration loading utilities for partseed."""

from .schema import (
    EmissionConfig,
    MaskJobConfig,
    SurfaceJobConfig,
    VolumeJobConfig,
    load_config,
)

__all__ = ["EmissionConfig", "MaskJobConfig", "SurfaceJobConfig", "VolumeJobConfig", "load_config"]

from __future__ import annotations

from typing import Union

import numpy as np

from ..config import EmissionConfig, MaskJobConfig, SurfaceJobConfig, VolumeJobConfig
from ..core.emission import EmissionPoints
from ..core.exporter import EmissionSink, NpzSink, PlySink
from ..core.imageio import load_pixel_grid
from ..core.mask import ImageMaskSampler
from ..core.scene import MeshSource
from ..core.surface import MeshAreaSampler
from ..core.volume import MeshVolumeSampler


def build_sink(cfg: EmissionConfig) -> EmissionSink:
    out_cfg = cfg.output
    if out_cfg.format == "npz":
        return NpzSink(str(out_cfg.path))
    if out_cfg.format == "ply":
        return PlySink(str(out_cfg.path))
    raise ValueError(f"Unsupported output format: {out_cfg.format}")


def build_sampler(job: Union[MaskJobConfig, SurfaceJobConfig, VolumeJobConfig]):
    if job.kind == "mask":
        return ImageMaskSampler(mode=job.mode, direction_mode=job.direction, capture_colors=job.capture_colors)
    if job.kind == "surface":
        return MeshAreaSampler(include_normals=job.normals)
    if job.kind == "volume":
        return MeshVolumeSampler(attempts=job.attempts, ray_margin=job.ray_margin)
    raise ValueError(f"Unsupported job kind: {job.kind}")


def run_job(
    job: Union[MaskJobConfig, SurfaceJobConfig, VolumeJobConfig],
    rng: np.random.Generator,
) -> EmissionPoints:
    sampler = build_sampler(job)
    if isinstance(job, MaskJobConfig):
        mask = load_pixel_grid(job.image)
        direction = load_pixel_grid(job.direction_image) if job.direction == "texture" else None
        points = sampler.sample(mask, direction)
        if job.centered:
            points = points.translated(np.array([-mask.width * 0.5, -mask.height * 0.5]))
        return points

    source = MeshSource(job.mesh, transform=job.transform)
    return sampler.sample(source.triangles, job.amount, rng=rng)

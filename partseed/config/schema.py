from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal, Optional, Union, List

import yaml
from pydantic import BaseModel, Field, model_validator


class MaskJobConfig(BaseModel):
    kind: Literal["mask"]
    image: Path
    mode: Literal["solid", "border"] = "solid"
    direction: Literal["none", "generate", "texture"] = "none"
    direction_image: Optional[Path] = None
    capture_colors: bool = False
    centered: bool = True

    @model_validator(mode="after")
    def _check_direction_image(self) -> "MaskJobConfig":
        if self.direction == "texture" and self.direction_image is None:
            raise ValueError("direction 'texture' requires direction_image")
        return self


class SurfaceJobConfig(BaseModel):
    kind: Literal["surface"]
    mesh: Path
    amount: int = Field(512, ge=1, le=100_000)
    normals: bool = False
    transform: Optional[List[List[float]]] = None


class VolumeJobConfig(BaseModel):
    kind: Literal["volume"]
    mesh: Path
    amount: int = Field(512, ge=1, le=100_000)
    attempts: int = Field(5, ge=1)
    ray_margin: float = Field(1.0, ge=0.0)
    transform: Optional[List[List[float]]] = None


JobConfig = Annotated[
    Union[MaskJobConfig, SurfaceJobConfig, VolumeJobConfig],
    Field(discriminator="kind"),
]


class OutputConfig(BaseModel):
    path: Path
    format: Literal["npz", "ply"] = "npz"


class EmissionConfig(BaseModel):
    job: JobConfig
    output: OutputConfig
    seed: Optional[int] = None

    @model_validator(mode="after")
    def _check_transform(self) -> "EmissionConfig":
        transform = getattr(self.job, "transform", None)
        if transform is not None and (len(transform) != 4 or any(len(row) != 4 for row in transform)):
            raise ValueError("transform must be a 4x4 matrix")
        return self


def _resolve(base: Path, path: Optional[Path]) -> Optional[Path]:
    if path is None or path.is_absolute():
        return path
    return (base / path).resolve()


def load_config(path: str | Path) -> EmissionConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    cfg = EmissionConfig.model_validate(data)
    base = path.parent
    cfg.output.path = _resolve(base, cfg.output.path)
    job = cfg.job
    if isinstance(job, MaskJobConfig):
        job.image = _resolve(base, job.image)
        job.direction_image = _resolve(base, job.direction_image)
    else:
        job.mesh = _resolve(base, job.mesh)
    return cfg

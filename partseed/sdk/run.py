from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np

from ..config import EmissionConfig, load_config
from ..core.utils import get_logger
from ..runtime.builders import build_sink, run_job

_log = get_logger()

_FORMATS = {".npz": "npz", ".ply": "ply"}


@dataclass(frozen=True)
class EmitRunResult:
    """Summary of an emission run driven by a configuration file."""

    points: int
    requested: Optional[int]
    output_path: Path
    config: EmissionConfig


def emit_from_config(
    config: Union[str, Path, EmissionConfig],
    *,
    output: Optional[Path] = None,
    seed: Optional[int] = None,
) -> EmitRunResult:
    """Run an emission job described by a configuration file or object.

    Parameters
    ----------
    config:
        Path to a YAML file or a pre-loaded :class:`~partseed.config.schema.EmissionConfig`.
    output:
        Optional override for the output file. The extension drives the
        format (``.npz`` or ``.ply``).
    seed:
        Optional RNG seed. Falls back to the value in the config, and to a
        fresh entropy-seeded generator when neither is set.

    Returns
    -------
    EmitRunResult
        Emitted and requested counts, the resolved output path, and the
        configuration object used for the run.
    """

    cfg = load_config(config) if not isinstance(config, EmissionConfig) else config.model_copy(deep=True)

    if output is not None:
        out_path = Path(output).resolve()
        ext = out_path.suffix.lower()
        if ext not in _FORMATS:
            raise ValueError(f"Unsupported output extension '{ext}'")
        cfg.output.path = out_path
        cfg.output.format = _FORMATS[ext]

    run_seed = seed if seed is not None else cfg.seed
    rng = np.random.default_rng(run_seed)

    points = run_job(cfg.job, rng)
    sink = build_sink(cfg)
    try:
        sink.write(points)
    finally:
        sink.close()

    _log.info("Emission job '%s' finished: %d points → %s", cfg.job.kind, len(points), cfg.output.path)
    return EmitRunResult(
        points=len(points),
        requested=points.requested,
        output_path=Path(cfg.output.path),
        config=cfg,
    )

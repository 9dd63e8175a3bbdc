"""Programmatic entry points for running emission jobs."""

from .run import EmitRunResult, emit_from_config

__all__ = ["EmitRunResult", "emit_from_config"]

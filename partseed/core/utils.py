from __future__ import annotations
import numpy as np
import logging

def get_logger(name: str = "partseed") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("[%(levelname)s] %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger

def normalize_or_zero(v: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    """Row-wise unit vectors; rows shorter than ``eps`` come back as zero."""
    v = np.asarray(v, dtype=np.float64)
    norms = np.linalg.norm(v, axis=-1, keepdims=True)
    return np.divide(v, norms, out=np.zeros_like(v), where=norms > eps)

"""Exceptions raised by the emission samplers."""

from __future__ import annotations


class EmissionError(Exception):
    """Base class for every failure raised by ``partseed``."""


class InputError(EmissionError, ValueError):
    """Malformed or empty input (bad pixel format, no geometry, size mismatch)."""


class ImageLoadError(InputError):
    """An image file could not be read or decoded."""


class FormatError(InputError):
    """A pixel buffer cannot be normalised to an (H, W, 4) uint8 layout."""


class SizeMismatch(InputError):
    """The direction grid does not have the mask grid's width and height."""


class NoUsableGeometry(InputError):
    """The triangle list is empty or has no area to sample."""


class EmptyResult(EmissionError):
    """Input was valid but no sample qualified."""

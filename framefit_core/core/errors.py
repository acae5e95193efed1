from __future__ import annotations


class FramefitError(Exception):
    """Base class for errors raised by the editing core."""


class ValidationError(FramefitError, ValueError):
    """Uploaded file was rejected before any decoding took place."""


class DecodeError(FramefitError, ValueError):
    """Source bytes could not be decoded into an image."""


class ConfigurationError(FramefitError, ValueError):
    """A gradient or frame definition violates its invariants."""


class ExportError(FramefitError, RuntimeError):
    """Output surface could not be produced or encoded."""

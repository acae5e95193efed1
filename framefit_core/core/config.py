from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os

from .frame_catalog import DEFAULT_FRAME_SIZES, load_frame_catalog
from .geometry import FrameSize, Size


LOGGER = logging.getLogger(__name__)

DEFAULT_VIEWPORT = Size(800, 600)
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_ACCEPTED_TYPES = ("image/jpeg", "image/png", "image/webp")


@dataclass(frozen=True)
class EditorConfig:
    viewport_size: Size = DEFAULT_VIEWPORT
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    accepted_types: tuple[str, ...] = DEFAULT_ACCEPTED_TYPES
    frame_sizes: tuple[FrameSize, ...] = field(default_factory=lambda: DEFAULT_FRAME_SIZES)

    @classmethod
    def from_env(
        cls,
        *,
        width_env_var: str = "FRAMEFIT_VIEWPORT_WIDTH",
        height_env_var: str = "FRAMEFIT_VIEWPORT_HEIGHT",
        max_size_env_var: str = "FRAMEFIT_MAX_FILE_SIZE",
        types_env_var: str = "FRAMEFIT_ACCEPTED_TYPES",
        catalog_env_var: str = "FRAMEFIT_FRAME_CATALOG",
    ) -> "EditorConfig":
        width = _parse_positive_int(width_env_var, int(DEFAULT_VIEWPORT.width))
        height = _parse_positive_int(height_env_var, int(DEFAULT_VIEWPORT.height))
        max_size = _parse_positive_int(max_size_env_var, DEFAULT_MAX_FILE_SIZE)
        raw_types = os.getenv(types_env_var, "").strip()
        if raw_types:
            accepted = tuple(t.strip().lower() for t in raw_types.split(",") if t.strip())
        else:
            accepted = DEFAULT_ACCEPTED_TYPES
        frames = DEFAULT_FRAME_SIZES
        catalog_path = os.getenv(catalog_env_var, "").strip()
        if catalog_path:
            frames = load_frame_catalog(catalog_path)
        return cls(
            viewport_size=Size(width, height),
            max_file_size=max_size,
            accepted_types=accepted or DEFAULT_ACCEPTED_TYPES,
            frame_sizes=frames,
        )


def _parse_positive_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var, "").strip()
    if raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        LOGGER.warning("ignoring non-integer %s=%r; using %d", env_var, raw, default)
        return default
    if value <= 0:
        LOGGER.warning("ignoring non-positive %s=%d; using %d", env_var, value, default)
        return default
    return value

from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
import logging
import mimetypes
from pathlib import Path

import numpy as np
import torch
from PIL import Image, ImageOps, UnidentifiedImageError

from .config import DEFAULT_ACCEPTED_TYPES, DEFAULT_MAX_FILE_SIZE
from .errors import DecodeError, ValidationError
from .geometry import Size


LOGGER = logging.getLogger(__name__)
PREVIEW_MAX_EDGE = 256


@dataclass
class SourceImage:
    """Decoded RGBA pixels plus the metadata the editor needs.

    ``pixels`` is ``None`` once the image has been released; renderers treat that
    the same as an image that has not finished decoding.
    """

    name: str
    mime_type: str
    original_size: Size
    pixels: torch.Tensor | None
    preview: Image.Image | None = None
    size_bytes: int | None = None
    _released: bool = field(default=False, repr=False)

    @property
    def is_decoded(self) -> bool:
        return self.pixels is not None and not self._released

    @property
    def width(self) -> int:
        return int(self.original_size.width)

    @property
    def height(self) -> int:
        return int(self.original_size.height)

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self.pixels = None
        if self.preview is not None:
            self.preview.close()
            self.preview = None


@dataclass(frozen=True)
class ImageSource:
    """Validates uploads and decodes them with PIL."""

    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    accepted_types: tuple[str, ...] = DEFAULT_ACCEPTED_TYPES

    def validate(self, name: str, mime_type: str | None, size_bytes: int) -> str:
        resolved = _resolve_mime_type(name, mime_type)
        if resolved not in self.accepted_types:
            raise ValidationError(
                f"Unsupported file type. Please use: {', '.join(self.accepted_types)}"
            )
        if size_bytes > self.max_file_size:
            raise ValidationError(
                f"File too large. Maximum size: {round(self.max_file_size / 1024 / 1024)}MB"
            )
        return resolved

    def load_bytes(self, data: bytes, name: str, mime_type: str | None = None) -> SourceImage:
        resolved = self.validate(name, mime_type, len(data))
        pixels, preview = decode_rgba(data, name)
        height, width, _ = pixels.shape
        return SourceImage(
            name=name,
            mime_type=resolved,
            original_size=Size(width, height),
            pixels=pixels,
            preview=preview,
            size_bytes=len(data),
        )

    def load_file(self, file_path: str | Path) -> SourceImage:
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"image file not found: {path}")
        return self.load_bytes(path.read_bytes(), path.name)


def decode_rgba(data: bytes, name: str = "<bytes>") -> tuple[torch.Tensor, Image.Image]:
    """Decodes ``data`` to an HxWx4 uint8 tensor and a small preview thumbnail."""
    try:
        with Image.open(BytesIO(data)) as img:
            rgba = ImageOps.exif_transpose(img).convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Failed to load image: {name}") from exc
    except OSError as exc:
        raise DecodeError(f"Failed to load image: {name} ({exc})") from exc
    if rgba.width <= 0 or rgba.height <= 0:
        raise DecodeError(f"Failed to load image: {name} has no pixels")
    pixels = torch.from_numpy(np.array(rgba, dtype=np.uint8, copy=True))
    preview = rgba.copy()
    preview.thumbnail((PREVIEW_MAX_EDGE, PREVIEW_MAX_EDGE))
    rgba.close()
    return pixels, preview


def image_from_tensor(pixels: torch.Tensor, name: str = "generated.png") -> SourceImage:
    """Wraps an in-memory RGBA tensor as a source image, bypassing upload checks."""
    if pixels.dim() != 3 or pixels.shape[2] != 4:
        raise ValueError(f"pixels must have shape (H, W, 4), got {tuple(pixels.shape)}")
    height, width, _ = pixels.shape
    if height <= 0 or width <= 0:
        raise ValueError("pixels must be non-empty")
    return SourceImage(
        name=name,
        mime_type="image/png",
        original_size=Size(int(width), int(height)),
        pixels=pixels.to(torch.uint8).contiguous(),
    )


def _resolve_mime_type(name: str, mime_type: str | None) -> str:
    if mime_type:
        return mime_type.strip().lower()
    guessed, _ = mimetypes.guess_type(name)
    if guessed is None:
        LOGGER.warning("could not infer a MIME type for %s", name)
        return ""
    return guessed.lower()

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
import logging
from typing import Literal

import numpy as np
import torch
from PIL import Image

from framefit_core.core.geometry import FrameSize
from framefit_core.core.image_source import SourceImage

from .canvas import composite_over, new_canvas, resize_rgba_bilinear
from .colors import WHITE
from .gradient import GradientPaint, GradientSpec, build_gradient_paint, rasterize_paint


LOGGER = logging.getLogger(__name__)

ExportFormat = Literal["png", "jpeg", "webp"]
DEFAULT_FILENAME = "edited-image"

_MIME_TYPES = {"png": "image/png", "jpeg": "image/jpeg", "webp": "image/webp"}
_PIL_FORMATS = {"png": "PNG", "jpeg": "JPEG", "webp": "WEBP"}
_EXTENSIONS = {"png": (".png",), "jpeg": (".jpg", ".jpeg"), "webp": (".webp",)}


@dataclass(frozen=True)
class ExportOptions:
    format: ExportFormat = "png"
    quality: int = 100
    filename: str = f"{DEFAULT_FILENAME}.png"
    gradient: GradientSpec | None = None

    @classmethod
    def create(
        cls,
        filename: str = "",
        *,
        format: ExportFormat = "png",
        quality: float = 100,
        gradient: GradientSpec | None = None,
    ) -> "ExportOptions":
        if format not in _MIME_TYPES:
            raise ValueError(f"unsupported export format: {format}")
        base = filename.strip() or DEFAULT_FILENAME
        if not base.lower().endswith(_EXTENSIONS[format]):
            base = f"{base}{_EXTENSIONS[format][0]}"
        return cls(
            format=format,
            quality=int(round(max(0.0, min(100.0, float(quality))))),
            filename=base,
            gradient=gradient,
        )

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self.format]


@dataclass(frozen=True)
class ExportResult:
    data: bytes
    mime_type: str
    filename: str
    width: int
    height: int


def compute_blit_rect(*, src_w: int, src_h: int, dst_w: int, dst_h: int) -> tuple[int, int, int, int]:
    """Aspect-preserving, centred placement of ``src`` inside ``dst`` as ``(x0, y0, x1, y1)``."""
    if src_w <= 0 or src_h <= 0 or dst_w <= 0 or dst_h <= 0:
        return (0, 0, 0, 0)
    scale = min(float(dst_w) / float(src_w), float(dst_h) / float(src_h))
    blit_w = min(dst_w, max(1, int(round(src_w * scale))))
    blit_h = min(dst_h, max(1, int(round(src_h * scale))))
    x0 = (dst_w - blit_w) // 2
    y0 = (dst_h - blit_h) // 2
    return (x0, y0, x0 + blit_w, y0 + blit_h)


def compose_frame(
    pixels: torch.Tensor,
    frame: FrameSize,
    paint: GradientPaint | None = None,
) -> torch.Tensor:
    """Flattens ``pixels`` onto a ``frame``-sized background, fitted and centred."""
    if paint is None:
        canvas = new_canvas(frame.width, frame.height, WHITE)
    else:
        canvas = rasterize_paint(paint, frame.width, frame.height)
    src_h, src_w, _ = pixels.shape
    x0, y0, x1, y1 = compute_blit_rect(src_w=src_w, src_h=src_h, dst_w=frame.width, dst_h=frame.height)
    if x1 > x0 and y1 > y0:
        scaled = resize_rgba_bilinear(pixels, target_h=y1 - y0, target_w=x1 - x0)
        composite_over(canvas, scaled, x0, y0)
    return canvas


def encode_rgba(rgba: torch.Tensor, format: ExportFormat, quality: int) -> bytes:
    arr = np.ascontiguousarray(rgba.to(torch.uint8).cpu().numpy())
    img = Image.fromarray(arr)
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    params: dict[str, object] = {}
    if format == "jpeg":
        flattened = Image.new("RGB", img.size, WHITE[:3])
        flattened.paste(img, mask=img.getchannel("A"))
        img = flattened
        params["quality"] = int(quality)
    elif format == "webp":
        params["quality"] = int(quality)
    buf = BytesIO()
    img.save(buf, format=_PIL_FORMATS[format], **params)
    return buf.getvalue()


@dataclass(frozen=True)
class ExportCompositor:
    """Renders export bitmaps; framed exports ignore the interactive pan/zoom state."""

    def compose(
        self,
        image: SourceImage,
        frame: FrameSize,
        gradient: GradientSpec | None = None,
    ) -> torch.Tensor:
        if image.pixels is None:
            raise ValueError(f"image `{image.name}` has no decoded pixels")
        paint = build_gradient_paint(gradient, frame.size) if gradient is not None else None
        return compose_frame(image.pixels, frame, paint)

    def export(
        self,
        image: SourceImage | None,
        selected_frame: FrameSize | None,
        options: ExportOptions,
        viewport_pixels: torch.Tensor | None = None,
    ) -> ExportResult | None:
        """Returns the encoded bitmap, or ``None`` when no output could be produced.

        An invalid gradient raises ``ConfigurationError`` instead of returning ``None``.
        """
        if image is None or not image.is_decoded or image.pixels is None:
            LOGGER.warning("export requested without a decoded image")
            return None
        if selected_frame is None:
            if viewport_pixels is None:
                LOGGER.warning("export without a frame needs the current viewport pixels")
                return None
            surface = viewport_pixels
        else:
            paint = None
            if options.gradient is not None:
                paint = build_gradient_paint(options.gradient, selected_frame.size)
            try:
                surface = compose_frame(image.pixels, selected_frame, paint)
            except (RuntimeError, MemoryError, ValueError) as exc:
                LOGGER.exception("export surface allocation failed for frame %s: %s", selected_frame.id, exc)
                return None
        height, width, _ = surface.shape
        try:
            data = encode_rgba(surface, options.format, options.quality)
        except (OSError, ValueError, KeyError) as exc:
            LOGGER.exception("export encoding failed (%s): %s", options.format, exc)
            return None
        return ExportResult(
            data=data,
            mime_type=options.mime_type,
            filename=options.filename,
            width=int(width),
            height=int(height),
        )

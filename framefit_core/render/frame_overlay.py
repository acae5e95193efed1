from __future__ import annotations

from dataclasses import dataclass

import torch

from framefit_core.core.geometry import FrameSize, Rect, Size, centered_rect, fit_scale

from .canvas import fill_rect, stroke_dashed_rect
from .colors import RGBA, parse_color


OVERLAY_PADDING = 0.9
MASK_COLOR: RGBA = parse_color("rgba(0, 0, 0, 0.3)")
BORDER_COLOR: RGBA = parse_color("#3b82f6")
BORDER_WIDTH = 2.0
BORDER_DASH = (5.0, 5.0)


@dataclass(frozen=True)
class FrameOverlay:
    """On-screen preview of a frame: the frame rectangle and the dimmed bands around it."""

    display_rect: Rect
    mask_rects: tuple[Rect, Rect, Rect, Rect]
    display_scale: float


def compute_frame_overlay(frame: FrameSize, viewport: Size) -> FrameOverlay:
    frame_size = frame.size
    scale = 1.0
    if frame.width > viewport.width or frame.height > viewport.height:
        scale = fit_scale(frame_size, viewport) * OVERLAY_PADDING
    display = centered_rect(frame_size.scaled(scale), viewport)
    top = Rect(0.0, 0.0, viewport.width, display.y)
    bottom = Rect(0.0, display.bottom, viewport.width, viewport.height - display.bottom)
    left = Rect(0.0, display.y, display.x, display.height)
    right = Rect(display.right, display.y, viewport.width - display.right, display.height)
    return FrameOverlay(display_rect=display, mask_rects=(top, bottom, left, right), display_scale=scale)


def paint_frame_overlay(canvas: torch.Tensor, overlay: FrameOverlay) -> None:
    stroke_dashed_rect(
        canvas,
        overlay.display_rect,
        BORDER_COLOR,
        line_width=BORDER_WIDTH,
        dash=BORDER_DASH,
    )
    for band in overlay.mask_rects:
        fill_rect(canvas, band, MASK_COLOR)

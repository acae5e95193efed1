from __future__ import annotations

from dataclasses import dataclass
import logging

import torch

from framefit_core.core.geometry import CanvasTransform, FrameSize, Size
from framefit_core.core.image_source import SourceImage
from framefit_core.core.surface import FullRewrite, ViewportSurface, WriteBatch

from .canvas import composite_over, new_canvas, sample_transformed
from .colors import RGBA
from .frame_overlay import compute_frame_overlay, paint_frame_overlay


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewportCompositor:
    """Projects editor state onto viewport pixels; holds no state of its own."""

    clear_color: RGBA = (0, 0, 0, 0)

    def render(
        self,
        image: SourceImage | None,
        viewport_size: Size,
        transform: CanvasTransform,
        selected_frame: FrameSize | None = None,
    ) -> torch.Tensor:
        width, height = viewport_size.as_pixels()
        canvas = new_canvas(width, height, self.clear_color)
        if image is not None and image.is_decoded and image.pixels is not None:
            layer = sample_transformed(image.pixels, transform, width, height)
            composite_over(canvas, layer)
        if selected_frame is not None:
            paint_frame_overlay(canvas, compute_frame_overlay(selected_frame, viewport_size))
        return canvas

    def render_into(
        self,
        surface: ViewportSurface,
        image: SourceImage | None,
        transform: CanvasTransform,
        selected_frame: FrameSize | None = None,
    ) -> torch.Tensor:
        frame = self.render(image, Size(surface.width, surface.height), transform, selected_frame)
        revision = surface.submit_write_batch(WriteBatch([FullRewrite(frame)]))
        LOGGER.debug("viewport rendered; revision=%d", revision)
        return frame

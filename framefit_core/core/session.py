from __future__ import annotations

from dataclasses import dataclass
import logging

import torch

from framefit_core.render.export import ExportCompositor, ExportOptions, ExportResult
from framefit_core.render.viewport import ViewportCompositor

from .config import EditorConfig
from .errors import ConfigurationError, DecodeError, ExportError, ValidationError
from .frame_catalog import find_frame
from .geometry import CanvasTransform, FrameSize, Point, Size
from .image_source import ImageSource, SourceImage
from .surface import ViewportSurface
from .transform import TransformController


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadToken:
    sequence: int


class EditorSession:
    """Session-scoped editor state: one image, one transform, zero-or-one selected frame.

    Every failing action records ``error`` and re-raises; the image and transform that
    were current before the call stay intact.
    """

    def __init__(
        self,
        config: EditorConfig | None = None,
        *,
        image_source: ImageSource | None = None,
        viewport_compositor: ViewportCompositor | None = None,
        export_compositor: ExportCompositor | None = None,
    ) -> None:
        self.config = config or EditorConfig()
        self.image_source = image_source or ImageSource(
            max_file_size=self.config.max_file_size,
            accepted_types=self.config.accepted_types,
        )
        self.viewport_compositor = viewport_compositor or ViewportCompositor()
        self.export_compositor = export_compositor or ExportCompositor()
        self.viewport_size = self.config.viewport_size
        width, height = self.viewport_size.as_pixels()
        self.surface = ViewportSurface(height=height, width=width)
        self._controller = TransformController()
        self.image: SourceImage | None = None
        self.selected_frame: FrameSize | None = None
        self.is_loading = False
        self.error: str | None = None
        self._load_sequence = 0

    @property
    def transform(self) -> CanvasTransform:
        return self._controller.transform

    @property
    def frame_sizes(self) -> tuple[FrameSize, ...]:
        return self.config.frame_sizes

    @property
    def has_image(self) -> bool:
        return self.image is not None

    # image lifecycle

    def load_image(self, data: bytes, name: str, mime_type: str | None = None) -> SourceImage:
        try:
            self.image_source.validate(name, mime_type, len(data))
            token = self.begin_load()
            image = self.image_source.load_bytes(data, name, mime_type)
        except (ValidationError, DecodeError) as exc:
            self.error = str(exc)
            LOGGER.warning("image load rejected: %s", exc)
            raise
        self.complete_load(token, image)
        return image

    def begin_load(self) -> LoadToken:
        self._load_sequence += 1
        return LoadToken(self._load_sequence)

    def complete_load(self, token: LoadToken, image: SourceImage) -> bool:
        """Installs ``image`` unless a newer load has started since ``token`` was issued."""
        if token.sequence != self._load_sequence:
            LOGGER.debug("discarding superseded decode of %s", image.name)
            image.release()
            return False
        self.set_image(image)
        return True

    def set_image(self, image: SourceImage) -> None:
        previous = self.image
        self.image = image
        self.error = None
        if previous is not None and previous is not image:
            previous.release()
        self._controller.restore_initial()
        self._controller.reset(self.viewport_size)

    def reset(self) -> None:
        if self.image is not None:
            self.image.release()
        self.image = None
        self.selected_frame = None
        self.is_loading = False
        self.error = None
        self._load_sequence += 1
        self._controller.restore_initial()

    def close(self) -> None:
        self.reset()

    def set_viewport_size(self, size: Size) -> None:
        width, height = size.as_pixels()
        if width <= 0 or height <= 0:
            raise ValueError("viewport dimensions must be > 0")
        self.viewport_size = size
        self.surface.resize(height=height, width=width)

    # frames

    def select_frame(self, frame: FrameSize | None) -> None:
        self.selected_frame = frame

    def toggle_frame(self, frame: FrameSize) -> FrameSize | None:
        if self.selected_frame is not None and self.selected_frame.id == frame.id:
            self.selected_frame = None
        else:
            self.selected_frame = frame
        return self.selected_frame

    def clear_frame(self) -> None:
        self.selected_frame = None

    def select_frame_by_id(self, frame_id: str) -> FrameSize:
        frame = find_frame(self.frame_sizes, frame_id)
        if frame is None:
            raise KeyError(f"unknown frame id: {frame_id}")
        self.selected_frame = frame
        return frame

    # transform

    def pan(self, delta_x: float, delta_y: float) -> CanvasTransform:
        return self._controller.pan(delta_x, delta_y)

    def zoom(self, factor: float, anchor: Point | None = None) -> CanvasTransform:
        return self._controller.zoom(factor, anchor=anchor)

    def wheel(self, delta_y: float, anchor: Point | None = None) -> CanvasTransform:
        return self._controller.wheel(delta_y, anchor=anchor)

    def zoom_in(self) -> CanvasTransform:
        return self._controller.zoom_in()

    def zoom_out(self) -> CanvasTransform:
        return self._controller.zoom_out()

    def reset_zoom(self) -> CanvasTransform:
        return self._controller.reset_zoom()

    def set_scale(self, value: float) -> CanvasTransform:
        return self._controller.set_scale(value)

    def zoom_to_fit(self) -> CanvasTransform:
        if self.image is None:
            return self.transform
        return self._controller.zoom_to_fit(self.image.original_size, self.viewport_size)

    def reset_transform(self) -> CanvasTransform:
        return self._controller.reset(self.viewport_size)

    # output

    def render(self) -> torch.Tensor:
        return self.viewport_compositor.render_into(
            self.surface,
            self.image,
            self.transform,
            self.selected_frame,
        )

    def export(self, options: ExportOptions) -> ExportResult:
        if self.image is None:
            raise ExportError("Upload an image first to enable export.")
        self.is_loading = True
        try:
            if options.gradient is not None:
                options.gradient.validate()
            viewport_pixels = None
            if self.selected_frame is None:
                viewport_pixels = self.render()
            result = self.export_compositor.export(
                self.image,
                self.selected_frame,
                options,
                viewport_pixels=viewport_pixels,
            )
            if result is None:
                raise ExportError(f"Export failed: could not produce {options.filename}")
            return result
        except (ConfigurationError, ExportError) as exc:
            self.error = str(exc)
            raise
        finally:
            self.is_loading = False

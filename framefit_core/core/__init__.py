from .errors import ConfigurationError, DecodeError, ExportError, FramefitError, ValidationError
from .geometry import (
    IDENTITY_TRANSFORM,
    CanvasTransform,
    FrameSize,
    Point,
    Rect,
    Size,
    centered_rect,
    fit_scale,
)
from .transform import (
    MAX_SCALE,
    MIN_SCALE,
    TransformController,
    clamp_scale,
    displayed_image_rect,
    local_to_viewport,
    viewport_to_local,
)
from .frame_catalog import DEFAULT_FRAME_SIZES, find_frame, load_frame_catalog, make_frame
from .config import EditorConfig
from .image_source import ImageSource, SourceImage, decode_rgba, image_from_tensor
from .surface import FullRewrite, ViewportSurface, WriteBatch

__all__ = [
    "CanvasTransform",
    "ConfigurationError",
    "DEFAULT_FRAME_SIZES",
    "DecodeError",
    "EditorConfig",
    "ExportError",
    "FrameSize",
    "FramefitError",
    "FullRewrite",
    "IDENTITY_TRANSFORM",
    "ImageSource",
    "MAX_SCALE",
    "MIN_SCALE",
    "Point",
    "Rect",
    "Size",
    "SourceImage",
    "TransformController",
    "ValidationError",
    "ViewportSurface",
    "WriteBatch",
    "centered_rect",
    "clamp_scale",
    "decode_rgba",
    "displayed_image_rect",
    "find_frame",
    "fit_scale",
    "image_from_tensor",
    "load_frame_catalog",
    "local_to_viewport",
    "make_frame",
    "viewport_to_local",
]

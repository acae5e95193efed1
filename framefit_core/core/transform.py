from __future__ import annotations

from dataclasses import dataclass, field, replace
import math

from .geometry import IDENTITY_TRANSFORM, CanvasTransform, Point, Rect, Size, fit_scale


MIN_SCALE = 0.1
MAX_SCALE = 5.0
FIT_PADDING = 0.8
ZOOM_IN_FACTOR = 1.2
ZOOM_OUT_FACTOR = 0.8
WHEEL_ZOOM_OUT = 0.9
WHEEL_ZOOM_IN = 1.1


def clamp_scale(value: float, current: float = 1.0) -> float:
    """Coerces ``value`` into ``[MIN_SCALE, MAX_SCALE]``; NaN keeps ``current``."""
    value = float(value)
    if math.isnan(value):
        value = float(current)
    return max(MIN_SCALE, min(MAX_SCALE, value))


def _finite_or_zero(value: float) -> float:
    value = float(value)
    return value if math.isfinite(value) else 0.0


def local_to_viewport(transform: CanvasTransform, point: Point) -> Point:
    return Point(
        transform.offset_x + transform.scale * point.x,
        transform.offset_y + transform.scale * point.y,
    )


def viewport_to_local(transform: CanvasTransform, point: Point) -> Point:
    return Point(
        (point.x - transform.offset_x) / transform.scale,
        (point.y - transform.offset_y) / transform.scale,
    )


def displayed_image_rect(transform: CanvasTransform, image_size: Size) -> Rect:
    """Viewport-space rectangle covered by an image centred on the local origin."""
    w = image_size.width * transform.scale
    h = image_size.height * transform.scale
    return Rect(
        x=transform.offset_x - w / 2.0,
        y=transform.offset_y - h / 2.0,
        width=w,
        height=h,
    )


@dataclass
class TransformController:
    """Owns the interactive pan/zoom state for one viewport."""

    transform: CanvasTransform = field(default_factory=lambda: IDENTITY_TRANSFORM)

    def __post_init__(self) -> None:
        self.transform = replace(self.transform, scale=clamp_scale(self.transform.scale))

    def pan(self, delta_x: float, delta_y: float) -> CanvasTransform:
        delta_x = _finite_or_zero(delta_x)
        delta_y = _finite_or_zero(delta_y)
        self.transform = replace(
            self.transform,
            offset_x=self.transform.offset_x + delta_x,
            offset_y=self.transform.offset_y + delta_y,
        )
        return self.transform

    def zoom(self, factor: float, anchor: Point | None = None) -> CanvasTransform:
        old = self.transform
        new_scale = clamp_scale(old.scale * float(factor), current=old.scale)
        if anchor is None:
            self.transform = replace(old, scale=new_scale)
            return self.transform
        local = viewport_to_local(old, anchor)
        self.transform = CanvasTransform(
            scale=new_scale,
            offset_x=anchor.x - new_scale * local.x,
            offset_y=anchor.y - new_scale * local.y,
        )
        return self.transform

    def set_scale(self, value: float) -> CanvasTransform:
        self.transform = replace(self.transform, scale=clamp_scale(value, current=self.transform.scale))
        return self.transform

    def zoom_in(self) -> CanvasTransform:
        return self.zoom(ZOOM_IN_FACTOR)

    def zoom_out(self) -> CanvasTransform:
        return self.zoom(ZOOM_OUT_FACTOR)

    def reset_zoom(self) -> CanvasTransform:
        return self.set_scale(1.0)

    def wheel(self, delta_y: float, anchor: Point | None = None) -> CanvasTransform:
        factor = WHEEL_ZOOM_OUT if delta_y > 0 else WHEEL_ZOOM_IN
        return self.zoom(factor, anchor=anchor)

    def zoom_to_fit(self, image_size: Size, viewport_size: Size) -> CanvasTransform:
        scale = fit_scale(image_size, viewport_size) * FIT_PADDING
        center = viewport_size.center()
        self.transform = CanvasTransform(
            scale=clamp_scale(scale),
            offset_x=center.x,
            offset_y=center.y,
        )
        return self.transform

    def reset(self, viewport_size: Size) -> CanvasTransform:
        center = viewport_size.center()
        self.transform = CanvasTransform(scale=1.0, offset_x=center.x, offset_y=center.y)
        return self.transform

    def restore_initial(self) -> CanvasTransform:
        self.transform = IDENTITY_TRANSFORM
        return self.transform

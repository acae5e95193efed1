from __future__ import annotations

from dataclasses import dataclass, replace
import math
from typing import Literal, TypeAlias

import torch

from framefit_core.core.errors import ConfigurationError
from framefit_core.core.geometry import Point, Size

from .colors import RGBA, parse_color


GradientType = Literal["linear", "radial"]
GRADIENT_TYPES = ("linear", "radial")
MIN_STOPS = 2
MAX_STOPS = 4
NEW_STOP_COLOR = "#ffffff"
NEW_STOP_STEP = 25.0


@dataclass(frozen=True)
class GradientStop:
    color: str
    position: float


@dataclass(frozen=True)
class GradientSpec:
    """Immutable gradient description; editing helpers return new specs."""

    type: GradientType = "linear"
    angle: float = 90.0
    stops: tuple[GradientStop, ...] = (
        GradientStop("#ffffff", 0.0),
        GradientStop("#000000", 100.0),
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "stops", tuple(self.stops))

    def validate(self) -> None:
        if self.type not in GRADIENT_TYPES:
            raise ConfigurationError(f"unknown gradient type `{self.type}`")
        if not MIN_STOPS <= len(self.stops) <= MAX_STOPS:
            raise ConfigurationError(
                f"gradient needs {MIN_STOPS}-{MAX_STOPS} stops, got {len(self.stops)}"
            )
        for stop in self.stops:
            if not 0.0 <= float(stop.position) <= 100.0:
                raise ConfigurationError(f"stop position must be within [0, 100], got {stop.position}")
            try:
                parse_color(stop.color)
            except ValueError as exc:
                raise ConfigurationError(str(exc)) from exc

    def sorted_stops(self) -> tuple[GradientStop, ...]:
        return tuple(sorted(self.stops, key=lambda s: s.position))

    def with_type(self, gradient_type: GradientType) -> "GradientSpec":
        return replace(self, type=gradient_type)

    def with_angle(self, angle: float) -> "GradientSpec":
        return replace(self, angle=float(angle))

    def with_stop(self, index: int, stop: GradientStop) -> "GradientSpec":
        stops = list(self.stops)
        stops[index] = stop
        return replace(self, stops=tuple(stops))

    def add_stop(self) -> "GradientSpec":
        if len(self.stops) >= MAX_STOPS or not self.stops:
            return self
        last = self.stops[-1]
        new_stop = GradientStop(NEW_STOP_COLOR, min(float(last.position) + NEW_STOP_STEP, 100.0))
        return replace(self, stops=self.stops + (new_stop,))

    def remove_stop(self, index: int) -> "GradientSpec":
        if len(self.stops) <= MIN_STOPS:
            return self
        return replace(self, stops=tuple(s for i, s in enumerate(self.stops) if i != index))

    def to_css(self) -> str:
        stops = ", ".join(f"{s.color} {_format_number(s.position)}%" for s in self.sorted_stops())
        if self.type == "linear":
            return f"linear-gradient({_format_number(self.angle)}deg, {stops})"
        return f"radial-gradient(circle, {stops})"


DEFAULT_GRADIENT = GradientSpec()


@dataclass(frozen=True)
class ColorStop:
    offset: float
    color: RGBA


@dataclass(frozen=True)
class LinearGradientPaint:
    start: Point
    end: Point
    stops: tuple[ColorStop, ...]


@dataclass(frozen=True)
class RadialGradientPaint:
    center: Point
    radius: float
    stops: tuple[ColorStop, ...]


GradientPaint: TypeAlias = LinearGradientPaint | RadialGradientPaint


def build_gradient_paint(spec: GradientSpec, target_size: Size) -> GradientPaint:
    if len(spec.stops) < MIN_STOPS:
        raise ConfigurationError(f"gradient needs at least {MIN_STOPS} stops, got {len(spec.stops)}")
    stops = tuple(_color_stop(s) for s in spec.sorted_stops())
    width = float(target_size.width)
    height = float(target_size.height)
    center = Point(width / 2.0, height / 2.0)
    if spec.type == "linear":
        theta = math.radians(float(spec.angle))
        half = math.sqrt(width * width + height * height) / 2.0
        dx = math.cos(theta) * half
        dy = math.sin(theta) * half
        return LinearGradientPaint(
            start=Point(center.x - dx, center.y - dy),
            end=Point(center.x + dx, center.y + dy),
            stops=stops,
        )
    if spec.type == "radial":
        return RadialGradientPaint(center=center, radius=min(width, height) / 2.0, stops=stops)
    raise ConfigurationError(f"unknown gradient type `{spec.type}`")


def rasterize_paint(paint: GradientPaint, width: int, height: int) -> torch.Tensor:
    """Evaluates ``paint`` at every pixel centre of a ``width x height`` surface."""
    if width <= 0 or height <= 0:
        raise ValueError("gradient target dimensions must be > 0")
    xs = torch.arange(width, dtype=torch.float32).unsqueeze(0).expand(height, width) + 0.5
    ys = torch.arange(height, dtype=torch.float32).unsqueeze(1).expand(height, width) + 0.5
    if isinstance(paint, LinearGradientPaint):
        ax = paint.end.x - paint.start.x
        ay = paint.end.y - paint.start.y
        length_sq = ax * ax + ay * ay
        if length_sq <= 1e-12:
            t = torch.ones((height, width), dtype=torch.float32)
        else:
            t = ((xs - paint.start.x) * ax + (ys - paint.start.y) * ay) / length_sq
    else:
        dist = torch.sqrt((xs - paint.center.x) ** 2 + (ys - paint.center.y) ** 2)
        if paint.radius <= 1e-12:
            t = torch.ones((height, width), dtype=torch.float32)
        else:
            t = dist / paint.radius
    return _sample_stops(paint.stops, torch.clamp(t, 0.0, 1.0))


def _sample_stops(stops: tuple[ColorStop, ...], t: torch.Tensor) -> torch.Tensor:
    colors = torch.tensor([s.color for s in stops], dtype=torch.float32)
    out = colors[0].expand(*t.shape, 4).clone()
    for i in range(1, len(stops)):
        lo = stops[i - 1]
        hi = stops[i]
        span = hi.offset - lo.offset
        if span <= 1e-9:
            frac = (t >= hi.offset).to(torch.float32)
        else:
            frac = torch.clamp((t - lo.offset) / span, 0.0, 1.0)
        seg = colors[i - 1] + (colors[i] - colors[i - 1]) * frac.unsqueeze(-1)
        out = torch.where((t >= lo.offset).unsqueeze(-1), seg, out)
    return torch.clamp(torch.round(out), 0, 255).to(torch.uint8)


def _color_stop(stop: GradientStop) -> ColorStop:
    try:
        color = parse_color(stop.color)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
    offset = max(0.0, min(1.0, float(stop.position) / 100.0))
    return ColorStop(offset=offset, color=color)


def _format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{value:g}"

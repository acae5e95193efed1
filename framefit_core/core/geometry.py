from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Size:
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def scaled(self, factor: float) -> "Size":
        return Size(self.width * factor, self.height * factor)

    def center(self) -> "Point":
        return Point(self.width / 2.0, self.height / 2.0)

    def as_pixels(self) -> tuple[int, int]:
        return (int(round(self.width)), int(round(self.height)))


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class CanvasTransform:
    """Maps image-centred local space to viewport pixels: ``offset + scale * local``."""

    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0


IDENTITY_TRANSFORM = CanvasTransform(scale=1.0, offset_x=0.0, offset_y=0.0)


@dataclass(frozen=True)
class FrameSize:
    id: str
    name: str
    width: int
    height: int
    description: str = ""

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)


def fit_scale(content: Size, bounds: Size) -> float:
    """Uniform scale that fits ``content`` inside ``bounds`` without cropping."""
    if content.is_empty or bounds.is_empty:
        raise ValueError("fit_scale requires non-empty sizes")
    return min(float(bounds.width) / float(content.width), float(bounds.height) / float(content.height))


def centered_rect(content: Size, bounds: Size) -> Rect:
    return Rect(
        x=(bounds.width - content.width) / 2.0,
        y=(bounds.height - content.height) / 2.0,
        width=content.width,
        height=content.height,
    )

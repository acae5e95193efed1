from __future__ import annotations

from dataclasses import dataclass
import logging
import threading

import torch


LOGGER = logging.getLogger(__name__)
MAGENTA = torch.tensor([255, 0, 255, 255], dtype=torch.uint8)
TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True)
class FullRewrite:
    tensor_h_w_4: torch.Tensor


@dataclass(frozen=True)
class WriteBatch:
    operations: list[FullRewrite]


class ViewportSurface:
    """Fixed-size RGBA255 drawing surface the page renderer reads from."""

    def __init__(self, height: int, width: int, background: tuple[int, int, int, int] = TRANSPARENT) -> None:
        if height <= 0 or width <= 0:
            raise ValueError("height and width must be > 0")
        self.height = height
        self.width = width
        self.background = background
        self._write_lock = threading.Lock()
        self._revision = 0
        self._matrix = _solid(height, width, background)

    @property
    def revision(self) -> int:
        return self._revision

    def read_snapshot(self) -> torch.Tensor:
        with self._write_lock:
            return self._matrix.clone()

    def resize(self, height: int, width: int) -> None:
        if height <= 0 or width <= 0:
            raise ValueError("height and width must be > 0")
        with self._write_lock:
            self.height = height
            self.width = width
            self._matrix = _solid(height, width, self.background)
            self._revision += 1

    def submit_write_batch(self, batch: WriteBatch) -> int:
        if not batch.operations:
            raise ValueError("write batch must include at least one operation")
        with self._write_lock:
            staged = self._matrix
            offending_pixels = 0
            for op in batch.operations:
                staged, op_offending = self._apply_operation(op)
                offending_pixels += op_offending
            if offending_pixels > 0:
                LOGGER.warning(
                    "ViewportSurface write batch sanitized invalid RGBA channels; offending_pixels=%d",
                    offending_pixels,
                )
            self._matrix = staged
            self._revision += 1
            return self._revision

    def _apply_operation(self, op: FullRewrite) -> tuple[torch.Tensor, int]:
        if not isinstance(op, FullRewrite):
            raise TypeError(f"Unsupported write op: {type(op)!r}")
        return _sanitize_rgba_tensor(op.tensor_h_w_4, (self.height, self.width, 4))


def _solid(height: int, width: int, color: tuple[int, int, int, int]) -> torch.Tensor:
    bg = torch.tensor(color, dtype=torch.uint8).view(1, 1, 4)
    return bg.expand(height, width, 4).clone()


def _sanitize_rgba_tensor(value: torch.Tensor, expected_shape: tuple[int, ...]) -> tuple[torch.Tensor, int]:
    if not torch.is_tensor(value):
        raise ValueError("rgba tensor must be a torch.Tensor")
    if tuple(value.shape) != expected_shape:
        raise ValueError(f"rgba tensor has invalid shape: {tuple(value.shape)} expected {expected_shape}")
    if value.dtype == torch.uint8:
        return value.clone(), 0
    raw = value.to(torch.float32)
    invalid = ~torch.isfinite(raw) | (raw < 0) | (raw > 255)
    invalid_pixels = int(torch.any(invalid, dim=-1).sum().item())
    clamped = torch.clamp(torch.nan_to_num(raw, nan=0.0), 0, 255).to(torch.uint8)
    if invalid_pixels > 0:
        clamped[torch.any(invalid, dim=-1)] = MAGENTA
    return clamped, invalid_pixels

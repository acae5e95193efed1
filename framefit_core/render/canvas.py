from __future__ import annotations

import torch
import torch.nn.functional as F

from framefit_core.core.geometry import CanvasTransform, Rect

from .colors import RGBA


def new_canvas(width: int, height: int, color: RGBA = (0, 0, 0, 0)) -> torch.Tensor:
    if width <= 0 or height <= 0:
        raise ValueError("canvas dimensions must be > 0")
    canvas = torch.zeros((height, width, 4), dtype=torch.uint8)
    canvas[:, :, 0] = color[0]
    canvas[:, :, 1] = color[1]
    canvas[:, :, 2] = color[2]
    canvas[:, :, 3] = color[3]
    return canvas


def pixel_rect(rect: Rect, width: int, height: int) -> tuple[int, int, int, int]:
    """Rounds ``rect`` edges independently and clips to the canvas; returns ``(x0, y0, x1, y1)``."""
    x0 = max(0, min(width, int(round(rect.x))))
    y0 = max(0, min(height, int(round(rect.y))))
    x1 = max(0, min(width, int(round(rect.x + rect.width))))
    y1 = max(0, min(height, int(round(rect.y + rect.height))))
    return (x0, y0, x1, y1)


def composite_over(dst: torch.Tensor, src: torch.Tensor, x: int = 0, y: int = 0) -> None:
    """Source-over blends ``src`` (straight alpha) onto ``dst`` in place at ``(x, y)``."""
    h, w, _ = src.shape
    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(dst.shape[1], x + w)
    y1 = min(dst.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return
    patch = src[y0 - y : y1 - y, x0 - x : x1 - x].to(torch.float32)
    view = dst[y0:y1, x0:x1]
    dst_f = view.to(torch.float32)

    src_alpha = patch[:, :, 3:4] / 255.0
    dst_alpha = dst_f[:, :, 3:4] / 255.0
    out_alpha = src_alpha + dst_alpha * (1.0 - src_alpha)
    out_rgb = patch[:, :, :3] * src_alpha + dst_f[:, :, :3] * dst_alpha * (1.0 - src_alpha)
    safe = torch.where(out_alpha > 1e-6, out_alpha, torch.ones_like(out_alpha))
    out_rgb = out_rgb / safe

    view[:, :, :3] = torch.clamp(torch.round(out_rgb), 0, 255).to(torch.uint8)
    view[:, :, 3:4] = torch.clamp(torch.round(out_alpha * 255.0), 0, 255).to(torch.uint8)


def blend_mask(dst: torch.Tensor, mask: torch.Tensor, color: RGBA) -> None:
    """Blends a solid ``color`` onto every pixel where the boolean ``mask`` is set."""
    if not bool(mask.any()):
        return
    layer = torch.zeros_like(dst)
    layer[mask] = torch.tensor(color, dtype=torch.uint8)
    composite_over(dst, layer)


def fill_rect(dst: torch.Tensor, rect: Rect, color: RGBA) -> None:
    x0, y0, x1, y1 = pixel_rect(rect, dst.shape[1], dst.shape[0])
    if x1 <= x0 or y1 <= y0 or color[3] <= 0:
        return
    patch = new_canvas(x1 - x0, y1 - y0, color)
    composite_over(dst, patch, x0, y0)


def stroke_dashed_rect(
    dst: torch.Tensor,
    rect: Rect,
    color: RGBA,
    *,
    line_width: float = 2.0,
    dash: tuple[float, float] = (5.0, 5.0),
) -> None:
    """Strokes ``rect`` centred on its edges with a dash pattern running clockwise from the top-left."""
    height, width, _ = dst.shape
    if rect.is_empty or line_width <= 0:
        return
    half = line_width / 2.0
    cx = torch.arange(width, dtype=torch.float32).unsqueeze(0).expand(height, width) + 0.5
    cy = torch.arange(height, dtype=torch.float32).unsqueeze(1).expand(height, width) + 0.5

    left, top = rect.x, rect.y
    right, bottom = rect.right, rect.bottom
    w, h = rect.width, rect.height
    in_x = (cx >= left - half) & (cx <= right + half)
    in_y = (cy >= top - half) & (cy <= bottom + half)

    on_top = ((cy - top).abs() <= half) & in_x
    on_right = ((cx - right).abs() <= half) & in_y
    on_bottom = ((cy - bottom).abs() <= half) & in_x
    on_left = ((cx - left).abs() <= half) & in_y

    t_top = torch.clamp(cx - left, 0.0, w)
    t_right = w + torch.clamp(cy - top, 0.0, h)
    t_bottom = w + h + torch.clamp(right - cx, 0.0, w)
    t_left = 2.0 * w + h + torch.clamp(bottom - cy, 0.0, h)

    t = torch.where(
        on_top,
        t_top,
        torch.where(on_right, t_right, torch.where(on_bottom, t_bottom, t_left)),
    )
    band = on_top | on_right | on_bottom | on_left
    period = dash[0] + dash[1]
    if period > 0 and dash[1] > 0:
        band = band & (torch.remainder(t, period) < dash[0])
    blend_mask(dst, band, color)


def resize_rgba_bilinear(rgba: torch.Tensor, target_h: int, target_w: int) -> torch.Tensor:
    if target_h <= 0 or target_w <= 0:
        raise ValueError("target dimensions must be > 0")
    src_h, src_w, _ = rgba.shape
    if src_h == target_h and src_w == target_w:
        return rgba.clone()
    premul = _premultiply(rgba).permute(2, 0, 1).unsqueeze(0)
    downscaling = target_h < src_h or target_w < src_w
    out = F.interpolate(
        premul,
        size=(target_h, target_w),
        mode="bilinear",
        align_corners=False,
        antialias=downscaling,
    )
    return _unpremultiply(out.squeeze(0).permute(1, 2, 0))


def sample_transformed(
    rgba: torch.Tensor,
    transform: CanvasTransform,
    out_w: int,
    out_h: int,
) -> torch.Tensor:
    """Renders ``rgba`` centred on the local origin through ``transform`` into an ``out_h x out_w`` layer.

    Pixels outside the image come back fully transparent.
    """
    src_h, src_w, _ = rgba.shape
    xs = (torch.arange(out_w, dtype=torch.float32) + 0.5 - transform.offset_x) / transform.scale + src_w / 2.0
    ys = (torch.arange(out_h, dtype=torch.float32) + 0.5 - transform.offset_y) / transform.scale + src_h / 2.0
    grid_x = (2.0 * xs / src_w - 1.0).unsqueeze(0).expand(out_h, out_w)
    grid_y = (2.0 * ys / src_h - 1.0).unsqueeze(1).expand(out_h, out_w)
    grid = torch.stack((grid_x, grid_y), dim=-1).unsqueeze(0)
    premul = _premultiply(rgba).permute(2, 0, 1).unsqueeze(0)
    out = F.grid_sample(premul, grid, mode="bilinear", padding_mode="zeros", align_corners=False)
    return _unpremultiply(out.squeeze(0).permute(1, 2, 0))


def _premultiply(rgba: torch.Tensor) -> torch.Tensor:
    out = rgba.to(torch.float32)
    alpha = out[:, :, 3:4] / 255.0
    return torch.cat((out[:, :, :3] * alpha, out[:, :, 3:4]), dim=-1)


def _unpremultiply(premul: torch.Tensor) -> torch.Tensor:
    alpha = premul[:, :, 3:4]
    safe = torch.where(alpha > 1e-3, alpha / 255.0, torch.ones_like(alpha))
    rgb = torch.where(alpha > 1e-3, premul[:, :, :3] / safe, torch.zeros_like(premul[:, :, :3]))
    out = torch.cat((rgb, alpha), dim=-1)
    return torch.clamp(torch.round(out), 0, 255).to(torch.uint8).contiguous()

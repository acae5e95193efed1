from __future__ import annotations

import unittest

import torch

from framefit_core.core.frame_catalog import DEFAULT_FRAME_SIZES, find_frame
from framefit_core.core.geometry import Rect, Size
from framefit_core.render.canvas import new_canvas
from framefit_core.render.frame_overlay import (
    BORDER_COLOR,
    MASK_COLOR,
    compute_frame_overlay,
    paint_frame_overlay,
)


VIEWPORT = Size(800, 600)


class FrameOverlayTests(unittest.TestCase):
    def test_frame_smaller_than_viewport_is_shown_one_to_one(self) -> None:
        frame = find_frame(DEFAULT_FRAME_SIZES, "small-tile")
        assert frame is not None
        overlay = compute_frame_overlay(frame, VIEWPORT)
        self.assertEqual(overlay.display_scale, 1.0)
        self.assertEqual(overlay.display_rect, Rect(180.0, 160.0, 440, 280))
        top, bottom, left, right = overlay.mask_rects
        self.assertEqual(top, Rect(0.0, 0.0, 800, 160.0))
        self.assertEqual(bottom, Rect(0.0, 440.0, 800, 160.0))
        self.assertEqual(left, Rect(0.0, 160.0, 180.0, 280))
        self.assertEqual(right, Rect(620.0, 160.0, 180.0, 280))

    def test_oversized_frame_is_scaled_with_padding(self) -> None:
        frame = find_frame(DEFAULT_FRAME_SIZES, "large-tile")
        assert frame is not None
        overlay = compute_frame_overlay(frame, VIEWPORT)
        expected_scale = min(800 / 1400, 600 / 560) * 0.9
        self.assertAlmostEqual(overlay.display_scale, expected_scale)
        rect = overlay.display_rect
        self.assertAlmostEqual(rect.width, 720.0)
        self.assertAlmostEqual(rect.height, 288.0)
        self.assertAlmostEqual(rect.x, 40.0)
        self.assertAlmostEqual(rect.y, 156.0)

    def test_mask_bands_cover_viewport_minus_frame(self) -> None:
        for frame in DEFAULT_FRAME_SIZES:
            overlay = compute_frame_overlay(frame, VIEWPORT)
            band_area = sum(r.width * r.height for r in overlay.mask_rects)
            frame_area = overlay.display_rect.width * overlay.display_rect.height
            self.assertAlmostEqual(band_area + frame_area, VIEWPORT.width * VIEWPORT.height, places=6)

    def test_paint_dims_outside_and_draws_dashed_border(self) -> None:
        frame = find_frame(DEFAULT_FRAME_SIZES, "small-tile")
        assert frame is not None
        canvas = new_canvas(800, 600)
        paint_frame_overlay(canvas, compute_frame_overlay(frame, VIEWPORT))

        self.assertEqual(int(canvas[10, 10, 3]), MASK_COLOR[3])
        self.assertEqual(canvas[10, 10, :3].tolist(), [0, 0, 0])
        # interior of the frame stays untouched
        self.assertTrue(torch.all(canvas[300, 400] == 0))
        # dash on at the start of the top edge, off after five pixels
        self.assertEqual(canvas[160, 182].tolist(), list(BORDER_COLOR))
        self.assertEqual(int(canvas[160, 187, 3]), 0)


if __name__ == "__main__":
    unittest.main()

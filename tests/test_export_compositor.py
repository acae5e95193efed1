from __future__ import annotations

from io import BytesIO
import unittest
from unittest import mock

import torch
from PIL import Image

from framefit_core.core.errors import ConfigurationError
from framefit_core.core.frame_catalog import DEFAULT_FRAME_SIZES, find_frame, make_frame
from framefit_core.core.image_source import image_from_tensor
from framefit_core.render.export import (
    ExportCompositor,
    ExportOptions,
    compose_frame,
    compute_blit_rect,
)
from framefit_core.render.gradient import GradientSpec, GradientStop


def _solid(width: int, height: int, color: tuple[int, int, int, int]) -> torch.Tensor:
    out = torch.zeros((height, width, 4), dtype=torch.uint8)
    out[:, :] = torch.tensor(color, dtype=torch.uint8)
    return out


RED = (255, 0, 0, 255)
WHITE = [255, 255, 255, 255]


class ExportCompositorTests(unittest.TestCase):
    def test_blit_rect_for_reference_scenarios(self) -> None:
        self.assertEqual(compute_blit_rect(src_w=2000, src_h=1000, dst_w=1400, dst_h=560), (140, 0, 1260, 560))
        self.assertEqual(compute_blit_rect(src_w=2000, src_h=1000, dst_w=440, dst_h=280), (0, 30, 440, 250))
        self.assertEqual(compute_blit_rect(src_w=0, src_h=10, dst_w=10, dst_h=10), (0, 0, 0, 0))

    def test_large_tile_without_gradient_is_white_behind_image(self) -> None:
        frame = find_frame(DEFAULT_FRAME_SIZES, "large-tile")
        assert frame is not None
        out = compose_frame(_solid(2000, 1000, RED), frame)
        self.assertEqual(tuple(out.shape), (560, 1400, 4))
        self.assertEqual(out[280, 100].tolist(), WHITE)
        self.assertEqual(out[280, 139].tolist(), WHITE)
        self.assertEqual(out[280, 140].tolist(), list(RED))
        self.assertEqual(out[0, 700].tolist(), list(RED))
        self.assertEqual(out[559, 1259].tolist(), list(RED))
        self.assertEqual(out[280, 1260].tolist(), WHITE)

    def test_small_tile_shows_gradient_bands_above_and_below(self) -> None:
        frame = find_frame(DEFAULT_FRAME_SIZES, "small-tile")
        assert frame is not None
        image = image_from_tensor(_solid(2000, 1000, RED))
        gradient = GradientSpec(
            type="linear",
            angle=90.0,
            stops=(GradientStop("#ffffff", 0.0), GradientStop("#000000", 100.0)),
        )
        out = ExportCompositor().compose(image, frame, gradient)
        self.assertEqual(tuple(out.shape), (280, 440, 4))
        top = out[0, 220].tolist()
        bottom = out[279, 220].tolist()
        # grey background rows, lighter at the top for a 90 degree gradient
        self.assertEqual(top[0], top[1])
        self.assertEqual(bottom[0], bottom[1])
        self.assertGreater(top[0], bottom[0])
        self.assertEqual(out[29, 220].tolist()[0], out[29, 220].tolist()[1])
        self.assertEqual(out[30, 220].tolist(), list(RED))
        self.assertEqual(out[249, 220].tolist(), list(RED))
        self.assertEqual(out[250, 220].tolist()[0], out[250, 220].tolist()[1])

    def test_export_dimensions_match_every_catalog_frame(self) -> None:
        image = image_from_tensor(_solid(64, 32, RED))
        compositor = ExportCompositor()
        options = ExportOptions.create("tile", gradient=GradientSpec())
        for frame in DEFAULT_FRAME_SIZES:
            result = compositor.export(image, frame, options)
            assert result is not None
            self.assertEqual((result.width, result.height), (frame.width, frame.height))
            with Image.open(BytesIO(result.data)) as decoded:
                self.assertEqual(decoded.size, (frame.width, frame.height))
                self.assertEqual(decoded.format, "PNG")
            self.assertEqual(result.mime_type, "image/png")
            self.assertEqual(result.filename, "tile.png")

    def test_export_without_frame_encodes_viewport_pixels(self) -> None:
        image = image_from_tensor(_solid(8, 8, RED))
        viewport = _solid(800, 600, (0, 0, 0, 0))
        result = ExportCompositor().export(image, None, ExportOptions.create(), viewport_pixels=viewport)
        assert result is not None
        self.assertEqual((result.width, result.height), (800, 600))
        self.assertIsNone(ExportCompositor().export(image, None, ExportOptions.create()))

    def test_export_returns_none_without_decoded_image(self) -> None:
        frame = make_frame("tiny", 10, 10)
        self.assertIsNone(ExportCompositor().export(None, frame, ExportOptions.create()))
        image = image_from_tensor(_solid(4, 4, RED))
        image.release()
        self.assertIsNone(ExportCompositor().export(image, frame, ExportOptions.create()))

    def test_encoding_failure_returns_none(self) -> None:
        frame = make_frame("tiny", 10, 10)
        image = image_from_tensor(_solid(4, 4, RED))
        with mock.patch("framefit_core.render.export.encode_rgba", side_effect=OSError("disk full")):
            with self.assertLogs("framefit_core.render.export", level="ERROR"):
                result = ExportCompositor().export(image, frame, ExportOptions.create())
        self.assertIsNone(result)

    def test_invalid_gradient_raises(self) -> None:
        frame = make_frame("tiny", 10, 10)
        image = image_from_tensor(_solid(4, 4, RED))
        options = ExportOptions.create(gradient=GradientSpec(stops=(GradientStop("#fff", 0.0),)))
        with self.assertRaises(ConfigurationError):
            ExportCompositor().export(image, frame, options)

    def test_jpeg_and_webp_encoding(self) -> None:
        frame = make_frame("tiny", 16, 8)
        image = image_from_tensor(_solid(4, 4, RED))
        jpeg = ExportCompositor().export(image, frame, ExportOptions.create("shot", format="jpeg", quality=80))
        assert jpeg is not None
        self.assertTrue(jpeg.data.startswith(b"\xff\xd8"))
        self.assertEqual((jpeg.filename, jpeg.mime_type), ("shot.jpg", "image/jpeg"))
        webp = ExportCompositor().export(image, frame, ExportOptions.create("shot", format="webp", quality=90))
        assert webp is not None
        self.assertEqual(webp.data[:4], b"RIFF")
        self.assertEqual(webp.mime_type, "image/webp")


class ExportOptionsTests(unittest.TestCase):
    def test_filename_normalisation(self) -> None:
        self.assertEqual(ExportOptions.create("").filename, "edited-image.png")
        self.assertEqual(ExportOptions.create("   ").filename, "edited-image.png")
        self.assertEqual(ExportOptions.create("banner").filename, "banner.png")
        self.assertEqual(ExportOptions.create("banner.PNG").filename, "banner.PNG")
        self.assertEqual(ExportOptions.create("photo.jpeg", format="jpeg").filename, "photo.jpeg")

    def test_quality_clamped_and_format_checked(self) -> None:
        self.assertEqual(ExportOptions.create(quality=150).quality, 100)
        self.assertEqual(ExportOptions.create(quality=-4).quality, 0)
        with self.assertRaises(ValueError):
            ExportOptions.create(format="gif")  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()

from __future__ import annotations

import os
from pathlib import Path
import tempfile
import unittest
from unittest import mock

from framefit_core.core.config import DEFAULT_ACCEPTED_TYPES, EditorConfig
from framefit_core.core.errors import ConfigurationError
from framefit_core.core.frame_catalog import DEFAULT_FRAME_SIZES, find_frame, load_frame_catalog, make_frame
from framefit_core.core.geometry import Size


CATALOG = """
[[frames]]
id = "hero"
name = "Hero banner"
width = 1920
height = 600

[[frames]]
id = "icon"
width = 128
height = 128
description = "square icon"
"""


class EditorConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            cfg = EditorConfig.from_env()
        self.assertEqual(cfg.viewport_size, Size(800, 600))
        self.assertEqual(cfg.max_file_size, 10 * 1024 * 1024)
        self.assertEqual(cfg.accepted_types, DEFAULT_ACCEPTED_TYPES)
        self.assertEqual([f.id for f in cfg.frame_sizes], ["small-tile", "large-tile", "screenshot-1280", "screenshot-640"])

    def test_env_overrides(self) -> None:
        env = {
            "FRAMEFIT_VIEWPORT_WIDTH": "1024",
            "FRAMEFIT_VIEWPORT_HEIGHT": "768",
            "FRAMEFIT_MAX_FILE_SIZE": "2048",
            "FRAMEFIT_ACCEPTED_TYPES": "image/png, IMAGE/WEBP",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            cfg = EditorConfig.from_env()
        self.assertEqual(cfg.viewport_size, Size(1024, 768))
        self.assertEqual(cfg.max_file_size, 2048)
        self.assertEqual(cfg.accepted_types, ("image/png", "image/webp"))

    def test_invalid_values_fall_back_with_warning(self) -> None:
        env = {"FRAMEFIT_VIEWPORT_WIDTH": "wide", "FRAMEFIT_VIEWPORT_HEIGHT": "-5"}
        with mock.patch.dict(os.environ, env, clear=True):
            with self.assertLogs("framefit_core.core.config", level="WARNING") as logs:
                cfg = EditorConfig.from_env()
        self.assertEqual(cfg.viewport_size, Size(800, 600))
        self.assertEqual(len(logs.records), 2)

    def test_catalog_from_env(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "frames.toml"
            path.write_text(CATALOG, encoding="utf-8")
            with mock.patch.dict(os.environ, {"FRAMEFIT_FRAME_CATALOG": str(path)}, clear=True):
                cfg = EditorConfig.from_env()
        self.assertEqual([f.id for f in cfg.frame_sizes], ["hero", "icon"])


class FrameCatalogTests(unittest.TestCase):
    def test_default_catalog_entries(self) -> None:
        self.assertEqual(len(DEFAULT_FRAME_SIZES), 4)
        small = find_frame(DEFAULT_FRAME_SIZES, "small-tile")
        assert small is not None
        self.assertEqual((small.width, small.height), (440, 280))
        self.assertIsNone(find_frame(DEFAULT_FRAME_SIZES, "missing"))

    def test_load_catalog_preserves_order_and_fields(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "frames.toml"
            path.write_text(CATALOG, encoding="utf-8")
            frames = load_frame_catalog(path)
        self.assertEqual(frames[0].name, "Hero banner")
        self.assertEqual(frames[1].name, "icon")
        self.assertEqual(frames[1].description, "square icon")

    def test_catalog_requires_positive_dimensions(self) -> None:
        with self.assertRaises(ConfigurationError):
            make_frame("flat", 100, 0)
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "frames.toml"
            path.write_text('[[frames]]\nid = "bad"\nwidth = -1\nheight = 10\n', encoding="utf-8")
            with self.assertRaises(ConfigurationError):
                load_frame_catalog(path)
            path.write_text('[[frames]]\nid = "bad"\nwidth = 10\n', encoding="utf-8")
            with self.assertRaises(ConfigurationError):
                load_frame_catalog(path)
            with self.assertRaises(FileNotFoundError):
                load_frame_catalog(Path(tmp) / "missing.toml")


if __name__ == "__main__":
    unittest.main()

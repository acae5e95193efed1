from __future__ import annotations

from pathlib import Path
import tomllib

from .errors import ConfigurationError
from .geometry import FrameSize


# Microsoft Edge Add-ons store asset sizes.
DEFAULT_FRAME_SIZES: tuple[FrameSize, ...] = (
    FrameSize(
        id="small-tile",
        name="Small Promotional Tile",
        width=440,
        height=280,
        description="440x280px - Microsoft Edge Add-ons small promotional tile",
    ),
    FrameSize(
        id="large-tile",
        name="Large Promotional Tile",
        width=1400,
        height=560,
        description="1400x560px - Microsoft Edge Add-ons large promotional tile",
    ),
    FrameSize(
        id="screenshot-1280",
        name="Screenshot (1280x800)",
        width=1280,
        height=800,
        description="1280x800px - Microsoft Edge Add-ons screenshot",
    ),
    FrameSize(
        id="screenshot-640",
        name="Screenshot (640x400)",
        width=640,
        height=400,
        description="640x400px - Microsoft Edge Add-ons screenshot",
    ),
)


def make_frame(
    id: str,
    width: int,
    height: int,
    *,
    name: str | None = None,
    description: str = "",
) -> FrameSize:
    if int(width) <= 0 or int(height) <= 0:
        raise ConfigurationError(f"frame `{id}` must have positive width and height, got {width}x{height}")
    return FrameSize(
        id=str(id),
        name=name if name is not None else str(id),
        width=int(width),
        height=int(height),
        description=description,
    )


def load_frame_catalog(path: str | Path) -> tuple[FrameSize, ...]:
    """Reads ``[[frames]]`` tables from a TOML file, preserving their order."""
    catalog_path = Path(path)
    if not catalog_path.exists():
        raise FileNotFoundError(f"frame catalog not found: {catalog_path}")
    with catalog_path.open("rb") as f:
        raw = tomllib.load(f)
    entries = raw.get("frames", [])
    if not isinstance(entries, list) or not entries:
        raise ConfigurationError("frame catalog must define at least one [[frames]] entry")
    frames: list[FrameSize] = []
    for entry in entries:
        try:
            frame_id = str(entry["id"])
            width = int(entry["width"])
            height = int(entry["height"])
        except KeyError as exc:
            raise ConfigurationError(f"frame entry missing required field: {exc.args[0]}") from exc
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"frame entry has invalid dimensions: {entry!r}") from exc
        frames.append(
            make_frame(
                frame_id,
                width,
                height,
                name=str(entry.get("name", frame_id)),
                description=str(entry.get("description", "")),
            )
        )
    return tuple(frames)


def find_frame(frames: tuple[FrameSize, ...] | list[FrameSize], frame_id: str) -> FrameSize | None:
    for frame in frames:
        if frame.id == frame_id:
            return frame
    return None

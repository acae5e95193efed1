from __future__ import annotations

import re


RGBA = tuple[int, int, int, int]

WHITE: RGBA = (255, 255, 255, 255)

_FUNCTIONAL = re.compile(r"^rgba?\(\s*([^)]*)\)$", re.IGNORECASE)


def parse_color(value: str) -> RGBA:
    """Parses ``#rgb``, ``#rgba``, ``#rrggbb``, ``#rrggbbaa``, ``rgb()`` and ``rgba()``."""
    text = value.strip()
    if text.startswith("#"):
        return _parse_hex(text[1:], value)
    match = _FUNCTIONAL.match(text)
    if match:
        return _parse_functional(match.group(1), value)
    raise ValueError(f"unsupported color `{value}`")


def _parse_hex(raw: str, original: str) -> RGBA:
    if len(raw) in (3, 4):
        raw = "".join(ch * 2 for ch in raw)
    if len(raw) not in (6, 8):
        raise ValueError(f"color must be #RGB, #RRGGBB or #RRGGBBAA, got `{original}`")
    try:
        r = int(raw[0:2], 16)
        g = int(raw[2:4], 16)
        b = int(raw[4:6], 16)
        a = int(raw[6:8], 16) if len(raw) == 8 else 255
    except ValueError as exc:
        raise ValueError(f"invalid hex digits in color `{original}`") from exc
    return (r, g, b, a)


def _parse_functional(body: str, original: str) -> RGBA:
    parts = [p.strip() for p in body.split(",")]
    if len(parts) not in (3, 4):
        raise ValueError(f"rgb()/rgba() needs 3 or 4 components, got `{original}`")
    try:
        rgb = [int(round(float(p))) for p in parts[:3]]
        alpha = float(parts[3]) if len(parts) == 4 else 1.0
    except ValueError as exc:
        raise ValueError(f"invalid component in color `{original}`") from exc
    r, g, b = (max(0, min(255, c)) for c in rgb)
    a = int(round(max(0.0, min(1.0, alpha)) * 255.0))
    return (r, g, b, a)

"""Fixed letter -> color/pitch/loudness/position mapping.

Pitch and loudness are derived from each letter's color so the visual and
auditory cues stay correlated: brighter colors sound higher, more saturated
colors sound louder. Azimuth depends only on alphabet position, which makes
it a third cue independent of color.

Everything here is pure and recomputed on every call.
"""

from __future__ import annotations

import math
import string
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

LETTERS: tuple[str, ...] = tuple("abcdefghijklmnopqrstuvwxyz")

DEFAULT_COLOR = "#FFFFFF"
BASE_FREQUENCY_HZ = 220.0
OCTAVE_SPAN = 3

# Fallback for color strings of the wrong length: achromatic, full brightness.
FALLBACK_HSB = (0.0, 0.0, 1.0)

COLOR_TABLE: Mapping[str, str] = MappingProxyType(
    {
        "a": "#FFA3E2",
        "b": "#6699FF",
        "c": "#00EBEB",
        "d": "#FF6600",
        "e": "#A9E5A9",
        "f": "#ff24d3",
        "g": "#33FF33",
        "h": "#DD2782",
        "i": "#BAA3FF",
        "j": "#00CC66",
        "k": "#CCB300",
        "l": "#FF6B6B",
        "m": "#9005b3",
        "n": "#a6f2f2",
        "o": "#FFCB94",
        "p": "#c905ff",
        "q": "#2BAB8B",
        "r": "#FF0000",
        "s": "#de895e",
        "t": "#00FFCC",
        "u": "#3f4da6",
        "v": "#D557FF",
        "w": "#FFCC33",
        "x": "#B2DF2A",
        "y": "#FFFF00",
        "z": "#7898D9",
    }
)


@dataclass(frozen=True, slots=True)
class ColorEntry:
    red: int
    green: int
    blue: int

    @property
    def hex(self) -> str:
        return f"#{self.red:02X}{self.green:02X}{self.blue:02X}"

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.red, self.green, self.blue)


@dataclass(frozen=True, slots=True)
class Stimulus:
    """Everything needed to show and sound one letter."""

    letter: str
    color_hex: str
    hue: float
    saturation: float
    brightness: float
    frequency_hz: float
    volume_gain: float
    azimuth_rad: float


def _parse_channel(pair: str) -> int:
    # Anything but two hex digits (signs and spaces included) reads as a full channel.
    if len(pair) != 2 or not all(ch in string.hexdigits for ch in pair):
        return 255
    return int(pair, 16)


def parse_color(color_hex: str) -> ColorEntry | None:
    """Parse ``#RRGGBB`` (leading ``#`` optional). None when the length is wrong."""

    digits = color_hex[1:] if color_hex.startswith("#") else color_hex
    if len(digits) != 6:
        return None
    return ColorEntry(
        red=_parse_channel(digits[0:2]),
        green=_parse_channel(digits[2:4]),
        blue=_parse_channel(digits[4:6]),
    )


def color_of(letter: str) -> str:
    return COLOR_TABLE.get(letter, DEFAULT_COLOR)


def hsb_of(color_hex: str) -> tuple[float, float, float]:
    """Convert ``#RRGGBB`` to (hue, saturation, brightness), each a fraction.

    Hue is reported as a fraction of a full turn in [0, 1).
    """

    entry = parse_color(color_hex)
    if entry is None:
        return FALLBACK_HSB

    r = entry.red / 255.0
    g = entry.green / 255.0
    b = entry.blue / 255.0

    hi = max(r, g, b)
    lo = min(r, g, b)
    delta = hi - lo

    if delta == 0.0:
        sector = 0.0
    elif hi == r:
        sector = ((g - b) / delta) % 6.0
    elif hi == g:
        sector = ((b - r) / delta) + 2.0
    else:
        sector = ((r - g) / delta) + 4.0

    hue_deg = (sector * 60.0 + 360.0) % 360.0
    saturation = 0.0 if hi == 0.0 else delta / hi
    return hue_deg / 360.0, saturation, hi


def frequency_of(letter: str) -> float:
    """Tone pitch in Hz: 220 Hz scaled up by as much as three octaves with brightness."""

    _, _, brightness = hsb_of(color_of(letter))
    return BASE_FREQUENCY_HZ * (2.0**OCTAVE_SPAN) ** brightness


def volume_of(letter: str) -> float:
    _, saturation, _ = hsb_of(color_of(letter))
    return saturation


def letter_index(letter: str) -> int:
    """Alphabet position 0..25. Uppercase is folded; anything else raises ValueError."""

    folded = letter.lower()
    if len(folded) != 1 or folded not in COLOR_TABLE:
        raise ValueError(f"not a latin letter: {letter!r}")
    return ord(folded) - ord("a")


def azimuth_of(letter: str) -> float:
    """Horizontal angle in radians; the 26 letters sit evenly around a full circle."""

    return (letter_index(letter) / len(LETTERS)) * 2.0 * math.pi


def stimulus_for(letter: str) -> Stimulus:
    color_hex = color_of(letter)
    hue, saturation, brightness = hsb_of(color_hex)
    return Stimulus(
        letter=letter,
        color_hex=color_hex,
        hue=hue,
        saturation=saturation,
        brightness=brightness,
        frequency_hz=frequency_of(letter),
        volume_gain=volume_of(letter),
        azimuth_rad=azimuth_of(letter),
    )

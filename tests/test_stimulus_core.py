from __future__ import annotations

import math
import re

import pytest

from synesthesia_trainer.stimulus import (
    COLOR_TABLE,
    DEFAULT_COLOR,
    LETTERS,
    azimuth_of,
    color_of,
    frequency_of,
    hsb_of,
    letter_index,
    parse_color,
    stimulus_for,
    volume_of,
)

_HEX6 = re.compile(r"^#[0-9A-Fa-f]{6}$")


def test_color_table_covers_exactly_the_alphabet() -> None:
    assert len(LETTERS) == 26
    assert tuple(sorted(COLOR_TABLE)) == LETTERS


def test_color_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        COLOR_TABLE["a"] = "#000000"  # type: ignore[index]


@pytest.mark.parametrize("letter", LETTERS)
def test_every_letter_has_well_formed_color_and_hsb_in_range(letter: str) -> None:
    color = color_of(letter)
    assert _HEX6.match(color)

    hue, sat, bright = hsb_of(color)
    assert 0.0 <= hue < 1.0
    assert 0.0 <= sat <= 1.0
    assert 0.0 <= bright <= 1.0


@pytest.mark.parametrize("symbol", ["A", "?", "", "ab", "é"])
def test_symbols_outside_table_map_to_white(symbol: str) -> None:
    assert color_of(symbol) == DEFAULT_COLOR == "#FFFFFF"


def test_pure_red_is_exact() -> None:
    assert hsb_of("#FF0000") == (0.0, 1.0, 1.0)


def test_letter_b_golden_hsb() -> None:
    hue, sat, bright = hsb_of(color_of("b"))
    assert color_of("b") == "#6699FF"
    assert hue == pytest.approx(220.0 / 360.0)
    assert sat == pytest.approx(0.6)
    assert bright == 1.0


def test_hue_regions() -> None:
    green_hue, _, _ = hsb_of("#00FF00")
    blue_hue, _, _ = hsb_of("#0000FF")
    magenta_hue, _, _ = hsb_of("#FF0080")
    assert green_hue == pytest.approx(120.0 / 360.0)
    assert blue_hue == pytest.approx(240.0 / 360.0)
    # Red-max with blue above green wraps into the last sector.
    assert magenta_hue == pytest.approx((360.0 - 60.0 * 128.0 / 255.0) / 360.0)


def test_achromatic_colors_have_zero_hue_and_saturation() -> None:
    assert hsb_of("#FFFFFF") == (0.0, 0.0, 1.0)
    assert hsb_of("#000000") == (0.0, 0.0, 0.0)
    hue, sat, bright = hsb_of("#808080")
    assert (hue, sat) == (0.0, 0.0)
    assert bright == pytest.approx(128 / 255)


def test_hash_prefix_is_optional() -> None:
    assert hsb_of("6699FF") == hsb_of("#6699FF")


@pytest.mark.parametrize("bad", ["", "#", "#FFF", "#FFFFFFF", "12345"])
def test_wrong_length_returns_fallback(bad: str) -> None:
    assert parse_color(bad) is None
    assert hsb_of(bad) == (0.0, 0.0, 1.0)


def test_unreadable_hex_pair_reads_as_full_channel() -> None:
    entry = parse_color("#ZZ0000")
    assert entry is not None
    assert entry.as_tuple() == (255, 0, 0)
    assert hsb_of("#ZZ0000") == hsb_of("#FF0000")

    # Signs and padding are not hex digits either.
    signed = parse_color("#-10000")
    assert signed is not None
    assert signed.as_tuple() == (255, 0, 0)
    assert signed.hex == "#FF0000"
    assert hsb_of("#-10000") == (0.0, 1.0, 1.0)

    padded = parse_color("# F0000")
    assert padded is not None
    assert padded.red == 255
    assert hsb_of("#+F0000") == (0.0, 1.0, 1.0)


def test_color_entry_hex_is_uppercase() -> None:
    entry = parse_color("#ff24d3")
    assert entry is not None
    assert entry.hex == "#FF24D3"


@pytest.mark.parametrize("letter", LETTERS)
def test_frequency_within_three_octaves_of_a3(letter: str) -> None:
    freq = frequency_of(letter)
    assert 220.0 <= freq <= 1760.0
    _, _, bright = hsb_of(color_of(letter))
    assert freq == pytest.approx(220.0 * 8.0**bright)


def test_frequency_increases_with_brightness() -> None:
    by_brightness = sorted(LETTERS, key=lambda ch: hsb_of(color_of(ch))[2])
    freqs = [frequency_of(ch) for ch in by_brightness]
    assert freqs == sorted(freqs)

    # 'u' (#3f4da6) is dimmer than 'b' (#6699FF) and must sound lower.
    assert frequency_of("u") < frequency_of("b")
    assert frequency_of("b") == pytest.approx(1760.0)


def test_frequency_bounds_for_untracked_symbol() -> None:
    # White is full brightness.
    assert frequency_of("?") == pytest.approx(1760.0)


@pytest.mark.parametrize("letter", LETTERS)
def test_volume_is_saturation(letter: str) -> None:
    assert volume_of(letter) == hsb_of(color_of(letter))[1]
    assert 0.0 <= volume_of(letter) <= 1.0


def test_azimuth_is_evenly_spaced_and_injective() -> None:
    angles = [azimuth_of(ch) for ch in LETTERS]
    assert len(set(angles)) == 26
    assert angles[0] == 0.0
    step = 2.0 * math.pi / 26.0
    for prev, cur in zip(angles, angles[1:]):
        assert cur - prev == pytest.approx(step)
    # Wrap from 'z' back to 'a'.
    assert (angles[0] - angles[-1]) % (2.0 * math.pi) == pytest.approx(step)
    assert all(0.0 <= a < 2.0 * math.pi for a in angles)


def test_azimuth_folds_uppercase_and_rejects_other_symbols() -> None:
    assert azimuth_of("C") == azimuth_of("c")
    assert letter_index("Z") == 25
    with pytest.raises(ValueError):
        azimuth_of("1")
    with pytest.raises(ValueError):
        letter_index("ab")


def test_stimulus_bundles_all_parameters() -> None:
    stim = stimulus_for("r")
    assert stim.letter == "r"
    assert stim.color_hex == "#FF0000"
    assert (stim.hue, stim.saturation, stim.brightness) == (0.0, 1.0, 1.0)
    assert stim.frequency_hz == pytest.approx(1760.0)
    assert stim.volume_gain == 1.0
    assert stim.azimuth_rad == pytest.approx(17 * 2.0 * math.pi / 26.0)

    # Recomputed each time, always equal.
    assert stimulus_for("r") == stim

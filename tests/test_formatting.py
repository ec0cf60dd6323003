from __future__ import annotations

import pytest

from weather_widget.utils.formatting import (
    capitalize_first_letter,
    convert_pressure,
    format_clock_time,
    round_half_up,
    to_percent,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [("hello", "Hello"), ("", ""), (None, ""), ("a", "A"), ("Hello", "Hello")],
)
def test_capitalize_first_letter(text: str | None, expected: str) -> None:
    assert capitalize_first_letter(text) == expected


def test_convert_pressure_to_mmhg() -> None:
    assert convert_pressure(1013) == 760
    assert convert_pressure(1000) == 750


def test_round_half_up_differs_from_bankers_rounding() -> None:
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(-0.4) == 0
    assert round_half_up(-1.6) == -2


def test_to_percent() -> None:
    assert to_percent(0.42) == 42
    assert to_percent(0.29) == 29
    assert to_percent(1) == 100


def test_format_clock_time_uses_offset() -> None:
    # 2025-10-09 09:00:00 UTC
    assert format_clock_time(1_760_000_400) == "09:00"
    assert format_clock_time(1_760_000_400, 3 * 3600) == "12:00"

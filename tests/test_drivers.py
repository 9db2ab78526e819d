"""Driver roster lookups."""

from __future__ import annotations

from led_replay.drivers import DRIVERS, WHITE, driver_color, driver_numbers, get_driver, to_hex


def test_roster_has_twenty_unique_numbers():
    numbers = driver_numbers()
    assert len(numbers) == 20
    assert len(set(numbers)) == 20
    assert numbers == [d.number for d in DRIVERS]


def test_get_driver():
    driver = get_driver(44)
    assert driver is not None
    assert driver.name == "Lewis Hamilton"
    assert driver.team == "Mercedes"
    assert get_driver(99) is None


def test_driver_color_known_and_unknown():
    assert driver_color(16) == (220, 0, 0)
    assert driver_color(999) == WHITE


def test_teammates_share_colour():
    assert driver_color(1) == driver_color(11)
    assert driver_color(4) == driver_color(81)


def test_hex_color():
    assert to_hex((255, 135, 0)) == "#ff8700"
    assert get_driver(4).hex_color == "#ff8700"
    assert to_hex(WHITE) == "#ffffff"

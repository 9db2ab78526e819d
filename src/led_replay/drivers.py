"""Static driver roster: number, name, team and LED display colour."""

from __future__ import annotations

from dataclasses import dataclass

Color = tuple[int, int, int]

WHITE: Color = (255, 255, 255)


@dataclass(frozen=True)
class DriverInfo:
    number: int
    name: str
    team: str
    color: Color

    @property
    def hex_color(self) -> str:
        return to_hex(self.color)


DRIVERS: tuple[DriverInfo, ...] = (
    DriverInfo(1, "Max Verstappen", "Red Bull", (30, 65, 255)),
    DriverInfo(2, "Logan Sargeant", "Williams", (0, 82, 255)),
    DriverInfo(4, "Lando Norris", "McLaren", (255, 135, 0)),
    DriverInfo(10, "Pierre Gasly", "Alpine", (2, 144, 240)),
    DriverInfo(11, "Sergio Perez", "Red Bull", (30, 65, 255)),
    DriverInfo(14, "Fernando Alonso", "Aston Martin", (0, 110, 120)),
    DriverInfo(16, "Charles Leclerc", "Ferrari", (220, 0, 0)),
    DriverInfo(18, "Lance Stroll", "Aston Martin", (0, 110, 120)),
    DriverInfo(20, "Kevin Magnussen", "Haas", (160, 207, 205)),
    DriverInfo(22, "Yuki Tsunoda", "AlphaTauri", (60, 130, 200)),
    DriverInfo(23, "Alex Albon", "Williams", (0, 82, 255)),
    DriverInfo(24, "Zhou Guanyu", "Stake F1", (165, 160, 155)),
    DriverInfo(27, "Nico Hulkenberg", "Haas", (160, 207, 205)),
    DriverInfo(31, "Esteban Ocon", "Alpine", (2, 144, 240)),
    DriverInfo(40, "Liam Lawson", "AlphaTauri", (60, 130, 200)),
    DriverInfo(44, "Lewis Hamilton", "Mercedes", (0, 210, 190)),
    DriverInfo(55, "Carlos Sainz", "Ferrari", (220, 0, 0)),
    DriverInfo(63, "George Russell", "Mercedes", (0, 210, 190)),
    DriverInfo(77, "Valtteri Bottas", "Stake F1", (165, 160, 155)),
    DriverInfo(81, "Oscar Piastri", "McLaren", (255, 135, 0)),
)

_BY_NUMBER = {d.number: d for d in DRIVERS}


def get_driver(number: int) -> DriverInfo | None:
    return _BY_NUMBER.get(number)


def driver_color(number: int) -> Color:
    """Return the roster colour for *number*, white when unknown."""
    driver = _BY_NUMBER.get(number)
    return driver.color if driver else WHITE


def to_hex(color: Color) -> str:
    return "#{:02x}{:02x}{:02x}".format(*color)


def driver_numbers() -> list[int]:
    return [d.number for d in DRIVERS]

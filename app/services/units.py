"""Temperature unit conversion and display formatting.

Temperatures are stored in Celsius; the unit only matters when a value is
rendered for the user.
"""

from __future__ import annotations

from app.models.enums import TemperatureUnit


def c_to_display(value_c: float, unit: TemperatureUnit) -> float:
    if unit is TemperatureUnit.c:
        return value_c
    return value_c * 9 / 5 + 32


def display_to_c(value: float, unit: TemperatureUnit) -> float:
    if unit is TemperatureUnit.c:
        return value
    return (value - 32) * 5 / 9


def format_temp(
    value_c: float | None,
    unit: TemperatureUnit = TemperatureUnit.c,
) -> str:
    """Format a Celsius reading in *unit*, e.g. ``"38.2 C"`` or ``"100.8 F"``.

    ``None`` renders as ``"—"``.
    """
    if value_c is None:
        return "—"
    value = c_to_display(value_c, unit)
    return f"{value:.1f} {unit.value.upper()}"

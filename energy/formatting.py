"""Display formatting for energy, cost and emission figures."""

from __future__ import annotations

from .schema import CURRENCIES


def format_currency(amount: float, currency: str = "EUR") -> str:
    """Format *amount* with the currency symbol and two decimals.

    >>> format_currency(1234.5)
    '€1,234.50'
    """
    symbol = CURRENCIES.get(currency.upper(), currency.upper() + " ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_energy(kwh: float) -> str:
    """``"999.0 kWh"`` below 1000 kWh, ``"1.5 MWh"`` from 1000 upwards."""
    if kwh >= 1000:
        return f"{kwh / 1000:.1f} MWh"
    return f"{kwh:.1f} kWh"


def format_co2(kg: float) -> str:
    """``"kgCO₂e"`` below one tonne, ``"tCO₂e"`` from 1000 kg upwards."""
    if kg >= 1000:
        return f"{kg / 1000:.1f} tCO₂e"
    return f"{kg:.1f} kgCO₂e"


def format_change(pct: float) -> str:
    """Signed percentage with one decimal, e.g. ``"+4.2%"``."""
    return f"{'+' if pct > 0 else ''}{pct:.1f}%"

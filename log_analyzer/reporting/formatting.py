"""Display formatting helpers (tables, export, CLI output)."""

from datetime import datetime
from typing import Optional, Union

from log_analyzer.models.session import format_duration

__all__ = [
    "format_duration",
    "format_quantity",
    "format_number",
    "format_percent",
    "format_time",
    "format_file_size",
]


def _strip_zeros(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def format_quantity(qty: float) -> str:
    """
    Quantity with precision scaled to its size, trailing zeros removed.

    Below 0.001 keeps 6 decimals, below 1 keeps 4, otherwise 3.
    """
    if qty == 0:
        return "0"
    if qty < 0.001:
        text = f"{qty:.6f}"
    elif qty < 1:
        text = f"{qty:.4f}"
    else:
        text = f"{qty:.3f}"
    text = _strip_zeros(text)
    return "0" if text == "-0" else text


def format_number(value: Union[int, float]) -> str:
    """Integral floats lose their '.0' (42.0 -> '42')."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_percent(value: float) -> str:
    """One decimal percentage string: 66.666 -> '66.7%'."""
    return f"{value:.1f}%"


def format_time(moment: Optional[datetime]) -> str:
    """HH:MM:SS, or '-' when absent."""
    if moment is None:
        return "-"
    return moment.strftime("%H:%M:%S")


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"

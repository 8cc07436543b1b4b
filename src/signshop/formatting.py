"""
Currency and status formatting for the two supported locales.

- pt-BR: R$ 1.234,56 / Orçamento
- en:    $1,234.56  / Quote
"""
from decimal import Decimal
from typing import Union

from .config.settings import normalize_currency
from .engine.models import OrderStatus, STATUS_LABELS
from .engine.numbers import round_money, to_decimal

CURRENCY_SYMBOLS = {
    "BRL": "R$",
    "USD": "$",
}


def format_number(value: Union[int, float, Decimal], locale: str = "en") -> str:
    """Two-decimal number with locale grouping and decimal separators."""
    formatted = f"{round_money(to_decimal(value)):,.2f}"
    if locale.lower().startswith("pt"):
        # Swap separators: 1,234.56 -> 1.234,56
        formatted = formatted.replace(",", "_").replace(".", ",").replace("_", ".")
    return formatted


def format_currency(value: Union[int, float, Decimal], currency: str = "BRL", locale: str = "pt-BR") -> str:
    """
    Format a monetary amount.

    Examples:
        >>> format_currency(1234.5, 'BRL', 'pt-BR')
        'R$ 1.234,50'
        >>> format_currency(-3, 'USD', 'en')
        '-$3.00'
    """
    code = normalize_currency(currency, locale)
    symbol = CURRENCY_SYMBOLS.get(code, code)
    number = format_number(abs(to_decimal(value)), locale)
    sign = "-" if to_decimal(value) < 0 and number.strip("0.,") else ""
    if locale.lower().startswith("pt"):
        return f"{sign}{symbol} {number}"
    return f"{sign}{symbol}{number}"


def status_label(status, locale: str = "en") -> str:
    """Display label for an order status; unknown values are returned as given."""
    try:
        parsed = OrderStatus.parse(status)
    except ValueError:
        return str(status)
    labels = STATUS_LABELS[parsed]
    return labels.get(locale, labels["en"])

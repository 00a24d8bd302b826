"""
Formatting utilities.

The adjustment engine never rounds; rounding happens here, at display time.
"""


def format_currency(amount: float, currency: str = "USD") -> str:
    """
    Format an amount as whole-unit currency.

    Args:
        amount: The amount in whole units (e.g., dollars, not cents).
        currency: Currency code (default USD).

    Returns:
        Formatted currency string, e.g. "$422,500" or "-$5,000".
    """
    symbols = {
        "USD": "$",
        "GBP": "£",
        "EUR": "€",
    }
    symbol = symbols.get(currency, currency + " ")
    rounded = int(round(amount))
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,}"


def format_adjustment(amount: float, currency: str = "USD") -> str:
    """
    Format a signed adjustment, e.g. "+$20,000" or "-$7,500".

    Zero renders without a sign.
    """
    text = format_currency(amount, currency)
    if int(round(amount)) > 0:
        return "+" + text
    return text

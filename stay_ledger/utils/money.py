"""Integer minor-unit money helpers. No floating point anywhere."""


def format_money(amount_cents: int, currency: str) -> str:
    """
    Render an amount in minor units as ``<CUR> <major>.<minor>``.

    Example:
        >>> format_money(10000, "USD")
        'USD 100.00'
        >>> format_money(-5, "EUR")
        '-EUR 0.05'
    """
    sign = "-" if amount_cents < 0 else ""
    major, minor = divmod(abs(amount_cents), 100)
    return f"{sign}{currency} {major}.{minor:02d}"


def is_positive_cents(value: object) -> bool:
    """True for a positive ``int``; bools and floats are rejected."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0

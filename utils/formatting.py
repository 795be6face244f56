def usd(amount: float) -> str:
    """
    Standard 2-decimal USD currency format.
    Example: 1234.5 -> "$1,234.50"
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def price(amount: float) -> str:
    return f"${amount:.4f}"


def amount(value: float) -> str:
    """
    Human readable token amount. Display only, never round-tripped.

        0            -> "0"
        < 0.0001     -> "5.0000e-5"
        < 1          -> 4 significant digits, "0.5000"
        < 1000       -> 4 decimals, "123.4568"
        otherwise    -> grouped, at most 2 decimals, "1,234,567"
    """
    if value == 0:
        return "0"

    magnitude = abs(value)

    if magnitude < 0.0001:
        mantissa, exponent = f"{value:.4e}".split("e")
        return f"{mantissa}e{int(exponent):+d}"

    if magnitude < 1:
        return f"{value:#.4g}"

    if magnitude < 1000:
        return f"{value:.4f}"

    text = f"{value:,.2f}"
    return text.rstrip("0").rstrip(".")

import re

from utils.constants import CURRENCY_SYMBOL


def format_currency(amount: float, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format a float as pt-BR currency, e.g. 'R$ 1.234,56'."""
    sign = "-" if amount < 0 else ""
    body = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{symbol} {body}"


def format_signed(amount: float, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format with +/- sign."""
    sign = "+" if amount >= 0 else "-"
    return sign + format_currency(abs(amount), symbol)


def format_percentage(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%".replace(".", ",")


def parse_currency(text: str | float | int | None) -> float:
    """Parse user input like 'R$ 1.234,56', '1,234.56' or '12,5' into a float.

    The right-most separator is the decimal separator when it is followed by
    one or two digits; every other separator is a thousands separator.
    Raises ValueError when nothing numeric is left.
    """
    if text is None:
        raise ValueError("Valor vazio.")
    if isinstance(text, (int, float)):
        return round(float(text), 2)
    cleaned = re.sub(r"[^\d,.\-]", "", text.strip())
    negative = cleaned.startswith("-")
    cleaned = cleaned.replace("-", "")
    if not cleaned or not any(ch.isdigit() for ch in cleaned):
        raise ValueError(f"Valor inválido: '{text}'.")

    last_sep = max(cleaned.rfind(","), cleaned.rfind("."))
    if last_sep != -1 and 1 <= len(cleaned) - last_sep - 1 <= 2:
        integer = re.sub(r"[,.]", "", cleaned[:last_sep])
        fraction = cleaned[last_sep + 1:]
        value = float(f"{integer or '0'}.{fraction}")
    else:
        value = float(re.sub(r"[,.]", "", cleaned))
    return round(-value if negative else value, 2)


def split_in_cents(total: float, parts: int) -> list[float]:
    """Split total into `parts` amounts that sum exactly; remainder goes last."""
    if parts < 1:
        raise ValueError("parts must be at least 1.")
    total_cents = round(total * 100)
    base = total_cents // parts
    amounts = [base] * parts
    amounts[-1] += total_cents - base * parts
    return [c / 100 for c in amounts]

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def round_money(value: float) -> float:
    """
    Arredonda para centavos (meio para cima).

    Usa a representação decimal curta do float para que 2.675 vire 2.68,
    como o comprador espera ver.
    """
    return float(Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP))


def apply_percent_discount(price: float, percent: float) -> float:
    """Aplica desconto percentual (ex: 10 = 10%) sem arredondar"""
    return price * (1 - percent / 100)

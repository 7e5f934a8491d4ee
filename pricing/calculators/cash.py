from .base import apply_percent_discount, round_money

CASH_DISCOUNT_PERCENT = 5.0  # desconto à vista
CASH_FACTOR = 1 - CASH_DISCOUNT_PERCENT / 100


def calculate_display_price(price: float, pass_on_cash_discount: bool) -> float:
    """
    Calcula o preço de vitrine.

    Com repasse do desconto à vista, o preço anunciado já embute os 5%:
    preço_vitrine = preço_desejado / 0.95. Assim, após o desconto à vista,
    o lojista continua recebendo o preço desejado.

    Args:
        price: Preço desejado (líquido do lojista)
        pass_on_cash_discount: Se o desconto à vista é repassado ao preço

    Returns:
        Preço de vitrine
    """
    if not pass_on_cash_discount:
        return price
    return round_money(price / CASH_FACTOR)


def calculate_cash_discount(price: float) -> float:
    """Calcula o valor à vista com 5% de desconto"""
    return round_money(apply_percent_discount(price, CASH_DISCOUNT_PERCENT))


def calculate_cash_price_with_pass_on(display_price: float, pass_on_cash_discount: bool,
                                      desired_price: float) -> float:
    """
    Calcula o valor à vista considerando o repasse.

    Com repasse ativo, o valor à vista é o próprio preço desejado (o markup
    já absorveu o desconto); sem repasse, aplica 5% sobre o preço de vitrine.
    """
    if pass_on_cash_discount:
        return round_money(desired_price)
    return calculate_cash_discount(display_price)

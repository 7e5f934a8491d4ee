"""
Resolução do preço exibido ao comprador.

Prioridade (a primeira regra que casar vence):
    1. cupom + parcelamento  -> total parcelado sobre o preço com cupom
    2. cupom                 -> preço com cupom
    3. à vista               -> valor à vista (com ou sem repasse)
    4. parcelamento          -> total parcelado sobre o preço de vitrine
    5. nada selecionado      -> preço de vitrine

Cupom e desconto à vista não se acumulam: com cupom ativo a seleção
"à vista" é ignorada.
"""
import logging
from typing import Iterable, Optional

from pricing.calculators.base import apply_percent_discount, round_money
from pricing.calculators.cash import calculate_cash_price_with_pass_on
from pricing.calculators.installment import calculate_installment_option, find_rate
from pricing.coupons import is_coupon_applicable
from pricing.interface import (
    Coupon,
    InstallmentRate,
    PaymentKind,
    PriceDetails,
    PriceMode,
    PriceResolution,
    SelectedPayment,
)

logger = logging.getLogger(__name__)


def coupon_discounted_price(display_price: float, coupon: Coupon, discount_price: Optional[float] = None) -> float:
    """Preço especial do produto, se menor que a vitrine; senão aplica o % do cupom"""
    if discount_price and discount_price < display_price:
        return round_money(discount_price)
    return round_money(apply_percent_discount(display_price, coupon.discount_percent))


def resolve_price(
        display_price: float,
        base_price: float,
        rates: Iterable[InstallmentRate],
        discount_price: Optional[float] = None,
        coupon: Optional[Coupon] = None,
        selected_payment: Optional[SelectedPayment] = None,
        pass_on_cash_discount: bool = False,
) -> PriceResolution:
    """
    Decide o preço final e o modo de exibição.

    Args:
        display_price: Preço de vitrine
        base_price: Preço desejado pelo lojista (líquido)
        rates: Tabela de taxas de parcelamento
        discount_price: Preço especial do produto para cupom (opcional)
        coupon: Cupom informado (ignorado se inativo ou sem desconto)
        selected_payment: Forma de pagamento selecionada
        pass_on_cash_discount: Se o desconto à vista está embutido na vitrine

    Returns:
        PriceResolution com final_price, mode e details
    """
    selected = selected_payment or SelectedPayment.none()
    wants_installment = selected.kind == PaymentKind.INSTALLMENT and selected.installments is not None
    details = PriceDetails(
        display_price=display_price,
        base_price=base_price,
        pass_on_cash_discount=pass_on_cash_discount,
    )

    if is_coupon_applicable(coupon):
        discounted = coupon_discounted_price(display_price, coupon, discount_price)
        details.discounted_price = discounted
        details.coupon_code = coupon.code

        if wants_installment:
            option = calculate_installment_option(
                discounted, selected.installments, find_rate(rates, selected.installments)
            )
            details.option = option
            return PriceResolution(final_price=option.total_amount, mode=PriceMode.COUPON_INSTALLMENT,
                                   details=details)

        if selected.kind == PaymentKind.CASH:
            logger.debug("Seleção à vista ignorada: cupom ativo")
        return PriceResolution(final_price=discounted, mode=PriceMode.COUPON, details=details)

    if selected.kind == PaymentKind.CASH:
        cash_price = calculate_cash_price_with_pass_on(display_price, pass_on_cash_discount, base_price)
        return PriceResolution(final_price=cash_price, mode=PriceMode.CASH, details=details)

    if wants_installment:
        option = calculate_installment_option(
            display_price, selected.installments, find_rate(rates, selected.installments)
        )
        details.option = option
        return PriceResolution(final_price=option.total_amount, mode=PriceMode.INSTALLMENT, details=details)

    return PriceResolution(final_price=display_price, mode=PriceMode.ORIGINAL, details=details)


class PaymentSelection:
    """
    Estado da forma de pagamento na tela do produto.

    none -> cash | installment(n) -> none, livremente. Ativar um cupom com
    "à vista" selecionado volta para none; com cupom ativo, "à vista" não
    pode ser escolhido.
    """

    def __init__(self, coupon_active: bool = False):
        self.coupon_active = coupon_active
        self.selected = SelectedPayment.none()

    @property
    def cash_available(self) -> bool:
        return not self.coupon_active

    def clear(self) -> SelectedPayment:
        self.selected = SelectedPayment.none()
        return self.selected

    def select_cash(self) -> SelectedPayment:
        if self.coupon_active:
            logger.debug("À vista indisponível com cupom ativo")
            return self.selected
        self.selected = SelectedPayment.cash()
        return self.selected

    def select_installment(self, installments: int) -> SelectedPayment:
        self.selected = SelectedPayment.installment(installments)
        return self.selected

    def set_coupon_active(self, active: bool) -> SelectedPayment:
        self.coupon_active = active
        if active and self.selected.kind == PaymentKind.CASH:
            self.selected = SelectedPayment.none()
        return self.selected

from typing import List, Optional

from pricing.calculators.cash import (
    calculate_cash_discount,
    calculate_cash_price_with_pass_on,
    calculate_display_price,
)
from pricing.calculators.installment import InstallmentCalculator, build_installment_options
from pricing.coupons import CouponStore
from pricing.interface import (
    InstallmentOption,
    InstallmentRate,
    PriceResolution,
    ProductSummary,
    SelectedPayment,
)
from pricing.rates import InstallmentRateProvider
from pricing.resolution import resolve_price
from pricing.whatsapp import WhatsAppQuote, build_whatsapp_message, build_whatsapp_url


class PricingEngine:
    """
    Ponto de entrada da precificação da loja.

    Reúne tabela de taxas, calculadoras, cupons e a política de resolução de
    preço. Deve existir uma instância por processo (ver PricingEngineFactory).
    """

    def __init__(self, provider: InstallmentRateProvider, coupons: Optional[CouponStore] = None,
                 whatsapp_phone: str = ""):
        self.provider = provider
        self.coupons = coupons or CouponStore()
        self.whatsapp_phone = whatsapp_phone
        self.installments = InstallmentCalculator(provider)

    # Cálculos -----------------------------------------------------------

    async def get_all_installment_options(self, amount: float) -> List[InstallmentOption]:
        return await self.installments.compute_all_options(amount)

    async def get_installment_option(self, amount: float, installments: int) -> InstallmentOption:
        return await self.installments.compute_option(amount, installments)

    def calculate_cash_discount(self, price: float) -> float:
        return calculate_cash_discount(price)

    def calculate_display_price(self, price: float, pass_on: bool) -> float:
        return calculate_display_price(price, pass_on)

    def calculate_cash_price_with_pass_on(self, display_price: float, pass_on: bool, desired_price: float) -> float:
        return calculate_cash_price_with_pass_on(display_price, pass_on, desired_price)

    async def resolve_price(
            self,
            price: float,
            pass_on_cash_discount: bool = False,
            discount_price: Optional[float] = None,
            coupon_code: Optional[str] = None,
            selected_payment: Optional[SelectedPayment] = None,
    ) -> PriceResolution:
        """
        Resolve o preço final de um produto.

        Args:
            price: Preço desejado pelo lojista
            pass_on_cash_discount: Se o desconto à vista é embutido na vitrine
            discount_price: Preço especial para cupom (opcional)
            coupon_code: Código digitado pelo cliente (inválido = sem cupom)
            selected_payment: Forma de pagamento escolhida

        Returns:
            PriceResolution
        """
        display_price = calculate_display_price(price, pass_on_cash_discount)
        validation = self.coupons.validate(coupon_code)
        rates = await self.provider.get_rates()

        return resolve_price(
            display_price=display_price,
            base_price=price,
            rates=rates,
            discount_price=discount_price,
            coupon=validation.coupon,
            selected_payment=selected_payment,
            pass_on_cash_discount=pass_on_cash_discount,
        )

    async def quote_whatsapp(
            self,
            product: ProductSummary,
            price: float,
            pass_on_cash_discount: bool = False,
            discount_price: Optional[float] = None,
            coupon_code: Optional[str] = None,
            selected_payment: Optional[SelectedPayment] = None,
    ) -> WhatsAppQuote:
        """Resolve o preço e monta a mensagem/link de checkout via WhatsApp"""
        resolution = await self.resolve_price(
            price, pass_on_cash_discount, discount_price, coupon_code, selected_payment
        )
        display_price = resolution.details.display_price
        cash_price = calculate_cash_price_with_pass_on(display_price, pass_on_cash_discount, price)
        options = build_installment_options(display_price, await self.provider.get_rates())

        message = build_whatsapp_message(product, resolution, cash_price, options)
        return WhatsAppQuote(
            message=message,
            url=build_whatsapp_url(self.whatsapp_phone, message),
            resolution=resolution,
        )

    # Administração ------------------------------------------------------

    async def get_installment_rates(self) -> List[InstallmentRate]:
        return await self.provider.get_rates()

    async def add_installment_rate(self, installments: int, rate: float) -> List[InstallmentRate]:
        return await self.provider.add_rate(installments, rate)

    async def update_single_rate(self, installments: int, rate: float) -> List[InstallmentRate]:
        return await self.provider.update_rate(installments, rate)

    async def remove_installment_rate(self, installments: int) -> List[InstallmentRate]:
        return await self.provider.remove_rate(installments)

    async def update_installment_rates(self, rates: List[InstallmentRate]) -> List[InstallmentRate]:
        return await self.provider.replace_rates(rates)

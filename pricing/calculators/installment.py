from typing import Iterable, List

from pricing.exceptions import RateValidationError
from pricing.interface import InstallmentOption, InstallmentRate
from pricing.rates import InstallmentRateProvider
from .base import round_money


def calculate_installment_option(desired_amount: float, installments: int, rate: float) -> InstallmentOption:
    """
    Calcula o valor a cobrar considerando a taxa do cartão.

    Fórmula: valor_cobrado = valor_desejado / (1 - taxa/100), para que após o
    desconto da operadora o lojista receba o valor desejado.

    Args:
        desired_amount: Valor líquido desejado
        installments: Número de parcelas (>= 1)
        rate: Taxa da operadora em % (0 <= taxa < 100)

    Returns:
        InstallmentOption com total, parcela e taxa arredondados ao centavo

    Raises:
        RateValidationError: Se parcelas < 1 ou taxa fora de [0, 100)
    """
    if installments < 1:
        raise RateValidationError("O número de parcelas deve ser maior que zero")
    if rate < 0 or rate >= 100:
        raise RateValidationError("A taxa deve estar entre 0% e 100% (exclusivo)")

    total_amount = desired_amount / (1 - rate / 100)
    installment_value = total_amount / installments
    fee_amount = total_amount - desired_amount

    return InstallmentOption(
        installments=installments,
        rate=rate,
        total_amount=round_money(total_amount),
        installment_value=round_money(installment_value),
        fee_amount=round_money(fee_amount),
    )


def build_installment_options(desired_amount: float, rates: Iterable[InstallmentRate]) -> List[InstallmentOption]:
    """Gera todas as opções de parcelamento, ordenadas por número de parcelas"""
    ordered = sorted(rates, key=lambda r: r.installments)
    return [calculate_installment_option(desired_amount, r.installments, r.rate) for r in ordered]


def find_rate(rates: Iterable[InstallmentRate], installments: int) -> float:
    """Taxa configurada para o número de parcelas (0 se ausente)"""
    for r in rates:
        if r.installments == installments:
            return r.rate
    return 0.0


class InstallmentCalculator:
    """
    Calculadora de parcelamento sobre a tabela de taxas do provider.
    """

    def __init__(self, provider: InstallmentRateProvider):
        self.provider = provider

    async def compute_option(self, desired_amount: float, installments: int) -> InstallmentOption:
        rate = await self.provider.get_rate(installments)
        return calculate_installment_option(desired_amount, installments, rate)

    async def compute_all_options(self, desired_amount: float) -> List[InstallmentOption]:
        rates = await self.provider.get_rates()
        return build_installment_options(desired_amount, rates)

from pydantic import BaseModel, Field

from pricing.calculators.base import round_money

DEFAULT_TAX_RATE = 3.9  # % sobre vendas digitais


class TaxBreakdown(BaseModel):
    """Valores recebidos por forma de pagamento"""
    cash: float = Field(0.0, ge=0)
    pix: float = Field(0.0, ge=0)
    card: float = Field(0.0, ge=0)


class TaxResult(BaseModel):
    taxable_amount: float
    tax_amount: float
    tax_rate: float
    applied_to_cash: bool


def calculate_tax(breakdown: TaxBreakdown, tax_rate: float = DEFAULT_TAX_RATE,
                  include_cash: bool = False) -> TaxResult:
    """
    Calcula o imposto sobre uma venda.

    Pix e cartão são sempre tributados; dinheiro físico só quando include_cash.
    """
    digital = breakdown.pix + breakdown.card
    taxable_amount = breakdown.cash + digital if include_cash else digital
    tax_amount = taxable_amount * (tax_rate / 100)

    return TaxResult(
        taxable_amount=round_money(taxable_amount),
        tax_amount=round_money(tax_amount),
        tax_rate=tax_rate,
        applied_to_cash=include_cash,
    )

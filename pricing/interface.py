from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InstallmentRate(BaseModel):
    """Taxa da maquininha para um número de parcelas"""
    installments: int = Field(..., ge=1, le=99)
    rate: float = Field(..., ge=0, lt=100)  # % sobre o valor cobrado


class InstallmentOption(BaseModel):
    """Opção de parcelamento já com a taxa repassada ao comprador"""
    model_config = ConfigDict(frozen=True)

    installments: int
    rate: float
    total_amount: float       # valor total a cobrar (com taxa)
    installment_value: float  # valor de cada parcela
    fee_amount: float         # quanto de taxa (em R$)


class Coupon(BaseModel):
    """Cupom de desconto (preço atacado/B2B)"""
    id: str
    code: str
    active: bool = True
    discount_percent: float
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class CouponValidation(BaseModel):
    valid: bool
    coupon: Optional[Coupon] = None


class PaymentKind(str, Enum):
    NONE = "none"
    CASH = "cash"
    INSTALLMENT = "installment"


class SelectedPayment(BaseModel):
    """Forma de pagamento escolhida na tela do produto (não persistida)"""
    model_config = ConfigDict(frozen=True)

    kind: PaymentKind = PaymentKind.NONE
    installments: Optional[int] = Field(None, ge=1)

    @classmethod
    def none(cls) -> "SelectedPayment":
        return cls(kind=PaymentKind.NONE)

    @classmethod
    def cash(cls) -> "SelectedPayment":
        return cls(kind=PaymentKind.CASH)

    @classmethod
    def installment(cls, installments: int) -> "SelectedPayment":
        return cls(kind=PaymentKind.INSTALLMENT, installments=installments)


class PriceMode(str, Enum):
    ORIGINAL = "original"
    COUPON = "coupon"
    CASH = "cash"
    INSTALLMENT = "installment"
    COUPON_INSTALLMENT = "coupon-installment"


class PriceDetails(BaseModel):
    """Valores que explicam o preço final exibido"""
    display_price: float
    base_price: float
    discounted_price: Optional[float] = None  # preço com cupom
    coupon_code: Optional[str] = None
    pass_on_cash_discount: bool = False
    option: Optional[InstallmentOption] = None


class PriceResolution(BaseModel):
    final_price: float
    mode: PriceMode
    details: PriceDetails


class ProductSummary(BaseModel):
    """Dados do produto usados na mensagem de WhatsApp"""
    name: str
    brand: str = ""
    specs: str = ""
    description: str = ""
    image_url: Optional[str] = None


class IRateSource(ABC):
    """
    Interface para fontes da tabela de taxas de parcelamento.

    Implementações devem levantar exceção em qualquer falha (rede, formato);
    o provider decide o fallback.
    """

    @abstractmethod
    async def fetch_rates(self) -> List[InstallmentRate]:
        """
        Busca a tabela de taxas.

        Returns:
            Lista de InstallmentRate (qualquer ordem)

        Raises:
            RateSourceError: Se a fonte estiver indisponível ou malformada
        """
        pass

# -*- coding: utf-8 -*-
import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from config import settings
# Importar pricing module
from pricing import PricingEngine, PricingEngineFactory
from pricing.exceptions import CouponNotFoundError, PricingError, RateNotFoundError
from pricing.interface import (
    Coupon,
    CouponValidation,
    InstallmentOption,
    InstallmentRate,
    PaymentKind,
    PriceResolution,
    ProductSummary,
    SelectedPayment,
)
from pricing.tax import TaxBreakdown, TaxResult, calculate_tax
from pricing.whatsapp import WhatsAppQuote

# Configuração de logging estruturado
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Loja Pricing API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uma instância por processo: o cache de taxas vive aqui
pricing_engine = PricingEngineFactory.create(settings)


def get_pricing_engine() -> PricingEngine:
    return pricing_engine


def _raise_for(e: PricingError):
    """Converte erros de domínio em HTTPException (404 p/ não encontrado, 422 p/ validação)"""
    status_code = 404 if isinstance(e, (RateNotFoundError, CouponNotFoundError)) else 422
    raise HTTPException(status_code=status_code, detail={"message": str(e)})


@app.get("/health")
async def health():
    return {"status": "ok", "app": settings.app_slug}


# ============================================================================
# PRICING ENDPOINTS
# ============================================================================

class PaymentSelectionIn(BaseModel):
    """Forma de pagamento selecionada pelo cliente"""
    kind: PaymentKind = Field(PaymentKind.NONE, description="none | cash | installment")
    installments: Optional[int] = Field(None, ge=1, le=99, description="Número de parcelas (kind=installment)")

    def to_selected(self) -> SelectedPayment:
        if self.kind == PaymentKind.INSTALLMENT and self.installments:
            return SelectedPayment.installment(self.installments)
        if self.kind == PaymentKind.CASH:
            return SelectedPayment.cash()
        return SelectedPayment.none()


class InstallmentsRequest(BaseModel):
    amount: float = Field(..., gt=0, description="Valor líquido desejado (deve ser > 0)")


class CashPriceRequest(BaseModel):
    price: float = Field(..., gt=0, description="Preço desejado pelo lojista")
    pass_on_cash_discount: bool = Field(False, description="Embutir os 5% do à vista no preço de vitrine")


class CashPriceResponse(BaseModel):
    desired_price: float
    display_price: float
    cash_price: float
    pass_on_cash_discount: bool


class ResolvePriceRequest(BaseModel):
    """Request para resolução do preço final"""
    price: float = Field(..., gt=0, description="Preço desejado pelo lojista")
    pass_on_cash_discount: bool = False
    discount_price: Optional[float] = Field(None, gt=0, description="Preço especial com cupom (opcional)")
    coupon_code: Optional[str] = None
    payment: PaymentSelectionIn = Field(default_factory=PaymentSelectionIn)


class WhatsAppRequest(ResolvePriceRequest):
    product: ProductSummary


class TaxRequest(BaseModel):
    breakdown: TaxBreakdown
    tax_rate: Optional[float] = Field(None, ge=0, le=100)
    include_cash: Optional[bool] = None


@app.post("/pricing/installments", response_model=List[InstallmentOption])
async def pricing_installments(
        request: InstallmentsRequest,
        engine: PricingEngine = Depends(get_pricing_engine)
):
    """
    Calcula todas as opções de parcelamento para um valor.

    Returns:
        Lista de InstallmentOption ordenada por número de parcelas
    """
    return await engine.get_all_installment_options(request.amount)


@app.post("/pricing/installments/{installments}", response_model=InstallmentOption)
async def pricing_installment_option(
        installments: int,
        request: InstallmentsRequest,
        engine: PricingEngine = Depends(get_pricing_engine)
):
    """Calcula uma única opção de parcelamento (parcela sem taxa configurada usa 0%)"""
    try:
        return await engine.get_installment_option(request.amount, installments)
    except PricingError as e:
        _raise_for(e)


@app.post("/pricing/cash", response_model=CashPriceResponse)
async def pricing_cash(
        request: CashPriceRequest,
        engine: PricingEngine = Depends(get_pricing_engine)
):
    """Calcula preço de vitrine e valor à vista (com ou sem repasse do desconto)"""
    display_price = engine.calculate_display_price(request.price, request.pass_on_cash_discount)
    cash_price = engine.calculate_cash_price_with_pass_on(
        display_price, request.pass_on_cash_discount, request.price
    )
    return CashPriceResponse(
        desired_price=request.price,
        display_price=display_price,
        cash_price=cash_price,
        pass_on_cash_discount=request.pass_on_cash_discount,
    )


@app.post("/pricing/resolve", response_model=PriceResolution)
async def pricing_resolve(
        request: ResolvePriceRequest,
        engine: PricingEngine = Depends(get_pricing_engine)
):
    """
    Resolve o preço final exibido ao cliente.

    Prioridade: cupom + parcelamento > cupom > à vista > parcelamento > original.
    Cupom inválido não é erro: o preço cai para as regras sem cupom.
    """
    return await engine.resolve_price(
        price=request.price,
        pass_on_cash_discount=request.pass_on_cash_discount,
        discount_price=request.discount_price,
        coupon_code=request.coupon_code,
        selected_payment=request.payment.to_selected(),
    )


@app.post("/pricing/whatsapp", response_model=WhatsAppQuote)
async def pricing_whatsapp(
        request: WhatsAppRequest,
        engine: PricingEngine = Depends(get_pricing_engine)
):
    """Gera mensagem e link de checkout via WhatsApp para o produto"""
    return await engine.quote_whatsapp(
        product=request.product,
        price=request.price,
        pass_on_cash_discount=request.pass_on_cash_discount,
        discount_price=request.discount_price,
        coupon_code=request.coupon_code,
        selected_payment=request.payment.to_selected(),
    )


@app.post("/pricing/tax", response_model=TaxResult)
async def pricing_tax(request: TaxRequest):
    """Calcula imposto sobre a venda (pix + cartão, e dinheiro se configurado)"""
    tax_rate = request.tax_rate if request.tax_rate is not None else settings.default_tax_rate
    include_cash = request.include_cash if request.include_cash is not None else settings.include_cash_in_tax
    return calculate_tax(request.breakdown, tax_rate=tax_rate, include_cash=include_cash)


# ============================================================================
# INSTALLMENT RATES (ADMIN)
# ============================================================================

class RateIn(BaseModel):
    # limites validados no provider para devolver mensagem amigável
    installments: int
    rate: float


class RateUpdateIn(BaseModel):
    rate: float


class RatesTableIn(BaseModel):
    installment_rates: List[RateIn]


class RatesResponse(BaseModel):
    installment_rates: List[InstallmentRate]


@app.get("/pricing/installment-rates", response_model=RatesResponse)
async def list_installment_rates(engine: PricingEngine = Depends(get_pricing_engine)):
    return RatesResponse(installment_rates=await engine.get_installment_rates())


@app.post("/pricing/installment-rates", response_model=RatesResponse, status_code=201)
async def add_installment_rate(
        request: RateIn,
        engine: PricingEngine = Depends(get_pricing_engine)
):
    try:
        rates = await engine.add_installment_rate(request.installments, request.rate)
    except PricingError as e:
        _raise_for(e)
    return RatesResponse(installment_rates=rates)


@app.put("/pricing/installment-rates/{installments}", response_model=RatesResponse)
async def update_installment_rate(
        installments: int,
        request: RateUpdateIn,
        engine: PricingEngine = Depends(get_pricing_engine)
):
    try:
        rates = await engine.update_single_rate(installments, request.rate)
    except PricingError as e:
        _raise_for(e)
    return RatesResponse(installment_rates=rates)


@app.put("/pricing/installment-rates", response_model=RatesResponse)
async def replace_installment_rates(
        request: RatesTableIn,
        engine: PricingEngine = Depends(get_pricing_engine)
):
    try:
        rates = await engine.update_installment_rates([
            InstallmentRate.model_construct(installments=r.installments, rate=r.rate)
            for r in request.installment_rates
        ])
    except PricingError as e:
        _raise_for(e)
    return RatesResponse(installment_rates=rates)


@app.delete("/pricing/installment-rates/{installments}", response_model=RatesResponse)
async def remove_installment_rate(
        installments: int,
        engine: PricingEngine = Depends(get_pricing_engine)
):
    try:
        rates = await engine.remove_installment_rate(installments)
    except PricingError as e:
        _raise_for(e)
    return RatesResponse(installment_rates=rates)


# ============================================================================
# COUPONS
# ============================================================================

class CouponIn(BaseModel):
    code: str
    discount_percent: float


class CouponUpdateIn(CouponIn):
    active: bool = True


class CouponValidateIn(BaseModel):
    code: str = ""


@app.get("/coupons", response_model=List[Coupon])
async def list_coupons(active: bool = False, engine: PricingEngine = Depends(get_pricing_engine)):
    return engine.coupons.get_active() if active else engine.coupons.get_all()


@app.post("/coupons", response_model=Coupon, status_code=201)
async def create_coupon(request: CouponIn, engine: PricingEngine = Depends(get_pricing_engine)):
    try:
        return engine.coupons.add(request.code, request.discount_percent)
    except PricingError as e:
        _raise_for(e)


@app.put("/coupons/{coupon_id}", response_model=Coupon)
async def update_coupon(coupon_id: str, request: CouponUpdateIn,
                        engine: PricingEngine = Depends(get_pricing_engine)):
    try:
        return engine.coupons.update(coupon_id, request.code, request.discount_percent, request.active)
    except PricingError as e:
        _raise_for(e)


@app.post("/coupons/{coupon_id}/toggle", response_model=Coupon)
async def toggle_coupon(coupon_id: str, engine: PricingEngine = Depends(get_pricing_engine)):
    try:
        return engine.coupons.toggle(coupon_id)
    except PricingError as e:
        _raise_for(e)


@app.delete("/coupons/{coupon_id}", status_code=204)
async def delete_coupon(coupon_id: str, engine: PricingEngine = Depends(get_pricing_engine)):
    try:
        engine.coupons.delete(coupon_id)
    except PricingError as e:
        _raise_for(e)


@app.post("/coupons/validate", response_model=CouponValidation)
async def validate_coupon(request: CouponValidateIn, engine: PricingEngine = Depends(get_pricing_engine)):
    return engine.coupons.validate(request.code)


# ========= MAIN PARA RODAR DEBUGANDO =========


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app:app", host="127.0.0.1", port=5002, reload=True)

import asyncio

import pytest

from config import Settings
from pricing import PricingEngine, PricingEngineFactory
from pricing.exceptions import CouponValidationError
from pricing.interface import Coupon
from pricing.rate_source import RemoteRateSource, StaticRateSource
from pricing.rates import default_rates


def test_factory_without_url_uses_default_table():
    """Testa se sem URL configurada o engine usa a tabela padrão sem rede"""
    engine = PricingEngineFactory.create(Settings(installment_rates_url=None))

    assert isinstance(engine, PricingEngine)
    assert engine.provider.source is None
    assert len(asyncio.run(engine.get_installment_rates())) == 12


def test_factory_builds_remote_source_from_settings():
    settings = Settings(
        installment_rates_url="https://backend.local/functions/v1/get-installment-rates",
        installment_rates_api_key="anon-key",
        rates_fetch_timeout=3.0,
    )
    source = PricingEngineFactory.build_rate_source(settings)

    assert isinstance(source, RemoteRateSource)
    assert source.url == settings.installment_rates_url
    assert source.timeout == 3.0
    assert source.headers["apikey"] == "anon-key"


def test_factory_explicit_source_has_priority():
    source = StaticRateSource(default_rates())
    engine = PricingEngineFactory.create(
        Settings(installment_rates_url="https://backend.local/rates"), source=source
    )

    assert engine.provider.source is source


def test_factory_seeds_coupons_and_phone():
    coupon = Coupon(id="1", code="010203", discount_percent=5)
    engine = PricingEngineFactory.create(Settings(whatsapp_phone="5511999990000"), coupons=[coupon])

    assert engine.coupons.validate("010203").valid is True
    assert engine.whatsapp_phone == "5511999990000"


def test_each_engine_has_its_own_cache():
    settings = Settings(installment_rates_url=None)
    first = PricingEngineFactory.create(settings)
    second = PricingEngineFactory.create(settings)

    asyncio.run(first.add_installment_rate(18, 15.0))

    assert len(asyncio.run(first.get_installment_rates())) == 13
    assert len(asyncio.run(second.get_installment_rates())) == 12


def test_factory_rejects_invalid_seed_coupons():
    """Testa se cupom inicial acima de 50% ou com código repetido impede a criação do engine"""
    with pytest.raises(CouponValidationError):
        PricingEngineFactory.create(Settings(), coupons=[Coupon(id="1", code="ABUSO90", discount_percent=90)])

    with pytest.raises(CouponValidationError):
        PricingEngineFactory.create(Settings(), coupons=[
            Coupon(id="1", code="LOJA10", discount_percent=10),
            Coupon(id="2", code="loja10", discount_percent=5),
        ])

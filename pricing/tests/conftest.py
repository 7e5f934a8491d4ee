"""Fixtures compartilhadas pelos testes de precificação."""
import asyncio
from typing import List, Optional

import pytest

from pricing.coupons import CouponStore
from pricing.engine import PricingEngine
from pricing.exceptions import RateSourceError
from pricing.interface import InstallmentRate, IRateSource
from pricing.rates import InstallmentRateProvider, default_rates


class FakeRateSource(IRateSource):
    """Fonte em memória que conta as buscas e pode simular falha/atraso"""

    def __init__(self, rates: Optional[List[InstallmentRate]] = None, fail: bool = False, delay: float = 0.0):
        self.rates = rates if rates is not None else default_rates()
        self.fail = fail
        self.delay = delay
        self.calls = 0

    async def fetch_rates(self) -> List[InstallmentRate]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RateSourceError("fonte offline")
        return list(self.rates)


@pytest.fixture
def fake_source_cls():
    return FakeRateSource


@pytest.fixture
def provider() -> InstallmentRateProvider:
    return InstallmentRateProvider(FakeRateSource())


@pytest.fixture
def coupons() -> CouponStore:
    store = CouponStore()
    store.add("010203", 5)
    store.add("ATACADO10", 10)
    inactive = store.add("PAUSADO", 20)
    store.toggle(inactive.id)
    return store


@pytest.fixture
def engine(provider, coupons) -> PricingEngine:
    return PricingEngine(provider, coupons, whatsapp_phone="55 (48) 99102-7363")

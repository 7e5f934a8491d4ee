import asyncio

import httpx
import pytest

from pricing.calculators import InstallmentCalculator
from pricing.exceptions import RateNotFoundError, RateSourceError, RateValidationError
from pricing.interface import InstallmentRate
from pricing.rate_source import RemoteRateSource, StaticRateSource
from pricing.rates import DEFAULT_INSTALLMENT_RATES, InstallmentRateProvider, default_rates

RATES_URL = "http://config.local/functions/v1/get-installment-rates"


def _remote(handler) -> RemoteRateSource:
    return RemoteRateSource(RATES_URL, timeout=1.0, transport=httpx.MockTransport(handler))


def test_default_table_matches_reference():
    rates = default_rates()

    assert [r.installments for r in rates] == list(range(1, 13))
    assert rates[0].rate == 0.0
    assert rates[1].rate == 2.99
    assert rates[-1].rate == 12.99


def test_provider_without_source_uses_defaults():
    provider = InstallmentRateProvider()
    rates = asyncio.run(provider.get_rates())

    assert {r.installments: r.rate for r in rates} == DEFAULT_INSTALLMENT_RATES
    assert provider.is_loaded


def test_provider_caches_first_result(fake_source_cls):
    """Testa se a tabela é buscada uma única vez por processo"""
    source = fake_source_cls(rates=[InstallmentRate(installments=1, rate=1.5)])
    provider = InstallmentRateProvider(source)

    async def scenario():
        first = await provider.get_rates()
        source.rates = [InstallmentRate(installments=1, rate=9.0)]
        second = await provider.get_rates()
        return first, second

    first, second = asyncio.run(scenario())

    assert source.calls == 1
    assert first == second
    assert second[0].rate == 1.5


def test_concurrent_callers_share_single_fetch(fake_source_cls):
    """Testa single-flight: chamadas concorrentes aguardam a mesma busca"""
    source = fake_source_cls(delay=0.05)
    provider = InstallmentRateProvider(source)

    async def scenario():
        return await asyncio.gather(*(provider.get_rates() for _ in range(10)))

    results = asyncio.run(scenario())

    assert source.calls == 1
    assert all(r == results[0] for r in results)


def test_cancelled_caller_does_not_cancel_fetch(fake_source_cls):
    """Testa se quem desiste de esperar não impede o cache de ser preenchido"""
    source = fake_source_cls(delay=0.05)
    provider = InstallmentRateProvider(source)

    async def scenario():
        abandoned = asyncio.ensure_future(provider.get_rates())
        await asyncio.sleep(0.01)
        abandoned.cancel()
        with pytest.raises(asyncio.CancelledError):
            await abandoned
        return await provider.get_rates()

    rates = asyncio.run(scenario())

    assert source.calls == 1
    assert len(rates) == 12


def test_failed_fetch_falls_back_to_defaults(fake_source_cls):
    """Testa fallback para tabela padrão quando a fonte falha"""
    source = fake_source_cls(fail=True)
    provider = InstallmentRateProvider(source)
    calculator = InstallmentCalculator(provider)

    options = asyncio.run(calculator.compute_all_options(1000.0))

    assert len(options) == 12
    assert [(o.installments, o.rate) for o in options] == list(DEFAULT_INSTALLMENT_RATES.items())


def test_duplicate_rates_from_source_fall_back_to_defaults(fake_source_cls):
    source = fake_source_cls(rates=[
        InstallmentRate(installments=2, rate=1.0),
        InstallmentRate(installments=2, rate=2.0),
    ])
    provider = InstallmentRateProvider(source)

    rates = asyncio.run(provider.get_rates())

    assert len(rates) == 12


def test_empty_table_from_source_falls_back_to_defaults(fake_source_cls):
    provider = InstallmentRateProvider(fake_source_cls(rates=[]))
    assert len(asyncio.run(provider.get_rates())) == 12


def test_rates_from_source_are_sorted(fake_source_cls):
    source = fake_source_cls(rates=[
        InstallmentRate(installments=3, rate=3.0),
        InstallmentRate(installments=1, rate=0.0),
        InstallmentRate(installments=2, rate=2.0),
    ])
    provider = InstallmentRateProvider(source)

    rates = asyncio.run(provider.get_rates())

    assert [r.installments for r in rates] == [1, 2, 3]


def test_missing_installment_rate_is_zero(provider):
    calculator = InstallmentCalculator(provider)

    option = asyncio.run(calculator.compute_option(500.0, 18))

    assert option.rate == 0.0
    assert option.total_amount == 500.0
    assert option.installment_value == 27.78


def test_compute_option_uses_configured_rate(provider):
    calculator = InstallmentCalculator(provider)

    option = asyncio.run(calculator.compute_option(1000.0, 12))

    assert option.rate == 12.99
    assert option.total_amount == 1149.29


# ---------------------------------------------------------------------------
# Administração
# ---------------------------------------------------------------------------

def test_add_rate_keeps_table_sorted(provider):
    asyncio.run(provider.add_rate(18, 15.5))
    rates = asyncio.run(provider.add_rate(15, 14.0))

    assert [r.installments for r in rates][-2:] == [15, 18]


def test_add_rate_rejects_duplicate(provider):
    with pytest.raises(RateValidationError) as exc_info:
        asyncio.run(provider.add_rate(6, 5.0))

    assert "Já existe" in str(exc_info.value)


@pytest.mark.parametrize("installments,rate", [
    (0, 1.0),
    (100, 1.0),
    (-3, 1.0),
    (2.5, 1.0),
    (True, 1.0),
    (13, -0.01),
    (13, 100.0),
    (13, 150.0),
    (13, float("nan")),
])
def test_add_rate_rejects_out_of_range(provider, installments, rate):
    """Testa validação: parcelas inteiras 1-99 e taxa em [0, 100)"""
    with pytest.raises(RateValidationError):
        asyncio.run(provider.add_rate(installments, rate))

    assert len(asyncio.run(provider.get_rates())) == 12


def test_update_rate(provider):
    rates = asyncio.run(provider.update_rate(3, 4.5))

    assert {r.installments: r.rate for r in rates}[3] == 4.5


def test_update_rate_not_found(provider):
    with pytest.raises(RateNotFoundError):
        asyncio.run(provider.update_rate(24, 4.5))


def test_update_rate_rejects_full_rate(provider):
    with pytest.raises(RateValidationError):
        asyncio.run(provider.update_rate(3, 100))

    assert asyncio.run(provider.get_rate(3)) == 3.99


@pytest.mark.parametrize("installments", list(range(1, 13)))
def test_remove_rate_protects_defaults(provider, installments):
    with pytest.raises(RateValidationError) as exc_info:
        asyncio.run(provider.remove_rate(installments))

    assert "padrão" in str(exc_info.value)


def test_remove_extra_rate(provider):
    asyncio.run(provider.add_rate(18, 15.5))
    rates = asyncio.run(provider.remove_rate(18))

    assert 18 not in [r.installments for r in rates]


def test_remove_rate_not_found(provider):
    with pytest.raises(RateNotFoundError):
        asyncio.run(provider.remove_rate(24))


@pytest.mark.parametrize("installments", [0, -1, 150])
def test_remove_rate_rejects_out_of_range(provider, installments):
    with pytest.raises(RateValidationError):
        asyncio.run(provider.remove_rate(installments))


def test_replace_rates_requires_defaults(provider):
    with pytest.raises(RateValidationError):
        asyncio.run(provider.replace_rates([InstallmentRate(installments=1, rate=0.0)]))


def test_replace_rates(provider):
    new_rates = [InstallmentRate(installments=n, rate=n * 1.5) for n in range(12, 0, -1)]
    rates = asyncio.run(provider.replace_rates(new_rates))

    assert [r.installments for r in rates] == list(range(1, 13))
    assert rates[-1].rate == 18.0


# ---------------------------------------------------------------------------
# Fonte remota
# ---------------------------------------------------------------------------

def test_remote_source_parses_payload():
    def handler(request):
        assert request.url == RATES_URL
        return httpx.Response(200, json={"installment_rates": [
            {"installments": 1, "rate": 0},
            {"installments": 2, "rate": 3.49},
        ]})

    rates = asyncio.run(_remote(handler).fetch_rates())

    assert [(r.installments, r.rate) for r in rates] == [(1, 0.0), (2, 3.49)]


def test_remote_source_http_error():
    def handler(request):
        return httpx.Response(500, json={"error": "boom"})

    with pytest.raises(RateSourceError):
        asyncio.run(_remote(handler).fetch_rates())


def test_remote_source_timeout():
    def handler(request):
        raise httpx.ReadTimeout("timeout", request=request)

    with pytest.raises(RateSourceError) as exc_info:
        asyncio.run(_remote(handler).fetch_rates())

    assert "Timeout" in str(exc_info.value)


@pytest.mark.parametrize("content", [
    b"not json",
    b'{"rates": []}',
    b'{"installment_rates": [{"installments": "x", "rate": 1}]}',
    b'{"installment_rates": [{"installments": 2, "rate": 100}]}',
])
def test_remote_source_malformed_payload(content):
    def handler(request):
        return httpx.Response(200, content=content, headers={"Content-Type": "application/json"})

    with pytest.raises(RateSourceError):
        asyncio.run(_remote(handler).fetch_rates())


def test_provider_with_unreachable_remote_uses_defaults():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    provider = InstallmentRateProvider(_remote(handler))
    rates = asyncio.run(provider.get_rates())

    assert {r.installments: r.rate for r in rates} == DEFAULT_INSTALLMENT_RATES


def test_static_source():
    source = StaticRateSource([InstallmentRate(installments=1, rate=1.0)])
    provider = InstallmentRateProvider(source)

    assert asyncio.run(provider.get_rate(1)) == 1.0

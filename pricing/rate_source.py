"""
Fontes da tabela de taxas de parcelamento.
"""
import logging
from typing import Iterable, List, Optional

import httpx
from pydantic import BaseModel, ValidationError

from pricing.exceptions import RateSourceError
from pricing.interface import InstallmentRate, IRateSource

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


class RatesPayload(BaseModel):
    """Formato da resposta: {"installment_rates": [{"installments": 1, "rate": 0}, ...]}"""
    installment_rates: List[InstallmentRate]


class RemoteRateSource(IRateSource):
    """
    Busca as taxas no endpoint de configuração do backend.

    Qualquer falha (rede, status HTTP, JSON ou formato inválido) vira
    RateSourceError.
    """

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT,
                 headers: Optional[dict] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self.headers = headers or {}
        self.transport = transport

    async def fetch_rates(self) -> List[InstallmentRate]:
        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            try:
                resp = await client.get(self.url, headers=self.headers)
                resp.raise_for_status()
            except httpx.TimeoutException as e:
                logger.error(f"Timeout ao buscar taxas em {self.url}: {e}")
                raise RateSourceError(f"Timeout: {e}")
            except httpx.HTTPError as e:
                logger.error(f"Erro ao buscar taxas em {self.url}: {e}")
                raise RateSourceError(f"Falha de comunicação: {e}")

        try:
            payload = RatesPayload.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise RateSourceError(f"Resposta de taxas malformada: {e}")

        return payload.installment_rates


class StaticRateSource(IRateSource):
    """Fonte fixa, útil para configuração local e testes"""

    def __init__(self, rates: Iterable[InstallmentRate]):
        self.rates = list(rates)

    async def fetch_rates(self) -> List[InstallmentRate]:
        return list(self.rates)

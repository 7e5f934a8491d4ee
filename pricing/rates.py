"""
Tabela de taxas de parcelamento.

O provider busca a tabela uma única vez por processo (single-flight) e usa a
tabela padrão quando a fonte falha. As alterações administrativas valem para
o processo corrente.
"""
import asyncio
import logging
from typing import Iterable, List, Optional

from pricing.exceptions import RateNotFoundError, RateSourceError, RateValidationError
from pricing.interface import InstallmentRate, IRateSource

logger = logging.getLogger(__name__)

MIN_INSTALLMENTS = 1
MAX_INSTALLMENTS = 99
MAX_RATE = 100.0  # exclusivo: taxa de 100% zera o valor líquido
PROTECTED_INSTALLMENTS = range(1, 13)  # parcelas padrão (1-12x)

# Taxas padrão Visa/Mastercard
DEFAULT_INSTALLMENT_RATES = {
    1: 0.0,
    2: 2.99,
    3: 3.99,
    4: 4.99,
    5: 5.99,
    6: 6.99,
    7: 7.99,
    8: 8.99,
    9: 9.99,
    10: 10.99,
    11: 11.99,
    12: 12.99,
}


def default_rates() -> List[InstallmentRate]:
    return [InstallmentRate(installments=n, rate=r) for n, r in DEFAULT_INSTALLMENT_RATES.items()]


def validate_installments(installments: int) -> None:
    """Rejeita número de parcelas que não seja inteiro em 1..99"""
    if isinstance(installments, bool) or not isinstance(installments, int) \
            or not MIN_INSTALLMENTS <= installments <= MAX_INSTALLMENTS:
        raise RateValidationError(
            f"O número de parcelas deve ser um inteiro entre {MIN_INSTALLMENTS} e {MAX_INSTALLMENTS}"
        )


def validate_rate_entry(installments: int, rate: float) -> None:
    """
    Valida um par parcelas/taxa vindo da administração.

    Raises:
        RateValidationError: Se parcelas não for inteiro em 1..99 ou taxa fora de [0, 100)
    """
    validate_installments(installments)
    if isinstance(rate, bool) or not isinstance(rate, (int, float)) or not 0 <= rate < MAX_RATE:
        raise RateValidationError("A taxa deve ser maior ou igual a 0% e menor que 100%")


def normalize_rates(rates: Iterable[InstallmentRate]) -> List[InstallmentRate]:
    """Ordena por parcelas e rejeita tabela vazia ou com parcelas repetidas"""
    ordered = sorted(rates, key=lambda r: r.installments)
    if not ordered:
        raise RateSourceError("Tabela de taxas vazia")
    seen = set()
    for r in ordered:
        if r.installments in seen:
            raise RateSourceError(f"Parcela {r.installments}x repetida na tabela de taxas")
        seen.add(r.installments)
    return ordered


class InstallmentRateProvider:
    """
    Fornece a tabela de taxas por número de parcelas.

    Uma instância por processo: a primeira chamada dispara a busca na fonte,
    chamadas concorrentes aguardam a mesma busca e o resultado fica em cache
    até o processo reiniciar.
    """

    def __init__(self, source: Optional[IRateSource] = None):
        self.source = source
        self._rates: Optional[List[InstallmentRate]] = None
        self._loading: Optional[asyncio.Future] = None

    @property
    def is_loaded(self) -> bool:
        return self._rates is not None

    async def get_rates(self) -> List[InstallmentRate]:
        """Retorna a tabela ordenada por número de parcelas"""
        if self._rates is None:
            if self._loading is None:
                self._loading = asyncio.ensure_future(self._load())
            # shield: quem desistir de esperar não cancela a busca
            await asyncio.shield(self._loading)
        return list(self._rates)

    async def get_rate(self, installments: int) -> float:
        """Taxa configurada para o número de parcelas (0 se ausente)"""
        for r in await self.get_rates():
            if r.installments == installments:
                return r.rate
        return 0.0

    async def _load(self) -> None:
        try:
            if self.source is None:
                logger.info("Nenhuma fonte de taxas configurada. Usando tabela padrão.")
                self._rates = default_rates()
                return
            logger.info("Buscando tabela de taxas de parcelamento...")
            rates = await self.source.fetch_rates()
            self._rates = normalize_rates(rates)
            logger.info(f"Tabela de taxas carregada: {len(self._rates)} faixas")
        except Exception as e:
            logger.warning(f"Falha ao carregar taxas ({e}). Usando tabela padrão.")
            self._rates = default_rates()
        finally:
            self._loading = None

    # ------------------------------------------------------------------
    # Administração
    # ------------------------------------------------------------------

    async def add_rate(self, installments: int, rate: float) -> List[InstallmentRate]:
        """
        Adiciona uma nova faixa de parcelamento.

        Raises:
            RateValidationError: Entrada inválida ou parcela já configurada
        """
        validate_rate_entry(installments, rate)
        rates = await self.get_rates()
        if any(r.installments == installments for r in rates):
            raise RateValidationError("Já existe uma taxa configurada para este número de parcelas")

        rates.append(InstallmentRate(installments=installments, rate=rate))
        self._rates = sorted(rates, key=lambda r: r.installments)
        logger.info(f"Taxa adicionada: {installments}x = {rate}%")
        return list(self._rates)

    async def update_rate(self, installments: int, rate: float) -> List[InstallmentRate]:
        """
        Altera a taxa de uma faixa existente.

        Raises:
            RateValidationError: Entrada inválida
            RateNotFoundError: Parcela sem taxa configurada
        """
        validate_rate_entry(installments, rate)
        rates = await self.get_rates()
        if not any(r.installments == installments for r in rates):
            raise RateNotFoundError("Taxa não encontrada")

        self._rates = [
            InstallmentRate(installments=installments, rate=rate) if r.installments == installments else r
            for r in rates
        ]
        logger.info(f"Taxa atualizada: {installments}x = {rate}%")
        return list(self._rates)

    async def remove_rate(self, installments: int) -> List[InstallmentRate]:
        """
        Remove uma faixa extra (acima de 12x).

        Raises:
            RateValidationError: Parcela padrão (1-12x) ou entrada inválida
            RateNotFoundError: Parcela sem taxa configurada
        """
        validate_installments(installments)
        if installments in PROTECTED_INSTALLMENTS:
            raise RateValidationError("Não é possível remover parcelas padrão (1-12x)")

        rates = await self.get_rates()
        if not any(r.installments == installments for r in rates):
            raise RateNotFoundError("Taxa não encontrada")

        self._rates = [r for r in rates if r.installments != installments]
        logger.info(f"Taxa removida: {installments}x")
        return list(self._rates)

    async def replace_rates(self, rates: Iterable[InstallmentRate]) -> List[InstallmentRate]:
        """
        Substitui a tabela inteira.

        Raises:
            RateValidationError: Alguma faixa inválida, repetida, ou faltando parcela padrão
        """
        new_rates = list(rates)
        seen = set()
        for r in new_rates:
            validate_rate_entry(r.installments, r.rate)
            if r.installments in seen:
                raise RateValidationError(f"Parcela {r.installments}x informada mais de uma vez")
            seen.add(r.installments)

        missing = [n for n in PROTECTED_INSTALLMENTS if n not in seen]
        if missing:
            raise RateValidationError(
                f"A tabela deve conter as parcelas padrão (1-12x). Faltando: {', '.join(map(str, missing))}"
            )

        # garante o fim de uma busca em andamento antes de sobrescrever
        if self._loading is not None:
            await asyncio.shield(self._loading)
        self._rates = sorted(new_rates, key=lambda r: r.installments)
        logger.info(f"Tabela de taxas substituída: {len(self._rates)} faixas")
        return list(self._rates)

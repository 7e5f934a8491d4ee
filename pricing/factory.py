import logging
from typing import Iterable, Optional

from pricing.coupons import CouponStore
from pricing.engine import PricingEngine
from pricing.interface import Coupon, IRateSource
from pricing.rate_source import RemoteRateSource
from pricing.rates import InstallmentRateProvider

logger = logging.getLogger(__name__)


class PricingEngineFactory:
    """
    Factory para montar o PricingEngine a partir das configurações.

    Centraliza a escolha da fonte de taxas para que toda a aplicação
    compartilhe um único provider (e um único cache).
    """

    @classmethod
    def build_rate_source(cls, settings) -> Optional[IRateSource]:
        """
        Retorna a fonte remota configurada, ou None para usar a tabela padrão.

        Args:
            settings: Objeto com installment_rates_url, installment_rates_api_key e rates_fetch_timeout
        """
        url = getattr(settings, "installment_rates_url", None)
        if not url:
            return None

        headers = {}
        api_key = getattr(settings, "installment_rates_api_key", "")
        if api_key:
            headers = {"apikey": api_key, "Authorization": f"Bearer {api_key}"}

        return RemoteRateSource(url, timeout=getattr(settings, "rates_fetch_timeout", 15.0), headers=headers)

    @classmethod
    def create(cls, settings=None, source: Optional[IRateSource] = None,
               coupons: Optional[Iterable[Coupon]] = None) -> PricingEngine:
        """
        Cria o engine de precificação.

        Args:
            settings: Configurações (padrão: config.settings)
            source: Fonte de taxas explícita (tem prioridade sobre settings)
            coupons: Cupons iniciais

        Returns:
            PricingEngine pronto para uso
        """
        if settings is None:
            from config import settings as app_settings
            settings = app_settings

        if source is None:
            source = cls.build_rate_source(settings)

        logger.info(f"Engine de precificação criado (fonte de taxas: {type(source).__name__ if source else 'padrão'})")
        return PricingEngine(
            provider=InstallmentRateProvider(source),
            coupons=CouponStore(coupons),
            whatsapp_phone=getattr(settings, "whatsapp_phone", ""),
        )

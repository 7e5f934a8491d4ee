class PricingError(Exception):
    """Base exception para erros do módulo de precificação"""
    pass


class RateSourceError(PricingError):
    """Falha ao obter a tabela de taxas da fonte remota"""
    pass


class RateValidationError(PricingError, ValueError):
    """Parcela ou taxa fora dos limites permitidos"""
    pass


class RateNotFoundError(PricingError, LookupError):
    """Nenhuma taxa configurada para o número de parcelas"""
    pass


class CouponValidationError(PricingError, ValueError):
    """Código ou desconto de cupom inválido"""
    pass


class CouponNotFoundError(PricingError, LookupError):
    """Cupom não encontrado"""
    pass

from .interface import InstallmentOption, InstallmentRate, PriceMode, PriceResolution, SelectedPayment
from .engine import PricingEngine
from .factory import PricingEngineFactory

__all__ = [
    "InstallmentOption",
    "InstallmentRate",
    "PriceMode",
    "PriceResolution",
    "SelectedPayment",
    "PricingEngine",
    "PricingEngineFactory",
]

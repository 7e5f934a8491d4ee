from .cash import calculate_cash_discount, calculate_cash_price_with_pass_on, calculate_display_price
from .installment import InstallmentCalculator, build_installment_options, calculate_installment_option

__all__ = [
    "calculate_cash_discount",
    "calculate_cash_price_with_pass_on",
    "calculate_display_price",
    "InstallmentCalculator",
    "build_installment_options",
    "calculate_installment_option",
]

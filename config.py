# config.py
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    dev_mode: bool = False

    app_slug: str = "loja-pricing"
    log_level: str = "INFO"

    # Endpoint que devolve {"installment_rates": [...]}; sem URL usa a tabela padrão
    installment_rates_url: Optional[str] = None
    installment_rates_api_key: str = ""
    rates_fetch_timeout: float = 15.0

    whatsapp_phone: str = "5548991027363"
    default_tax_rate: float = 3.9
    include_cash_in_tax: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()

"""
config.py - Konfiguracja aplikacji przez zmienne środowiskowe.
Wszystkie zmienne mają prefiks IMPSEM_.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Interpreter z paliwem: budżet używany, gdy wywołujący go nie poda
    default_budget: int = 1_000

    # Denotacja: górna granica budżetu przy szukaniu wartości granicznej
    max_budget: int = 10_000

    # Semantyka małych kroków: maksymalna liczba przejść w jednym śladzie
    max_steps: int = 100_000

    # Logging
    log_level: str = "INFO"

    # App
    app_title: str = "impsem"
    app_version: str = "0.1.0"

    model_config = SettingsConfigDict(env_prefix="IMPSEM_", env_file=".env", extra="ignore")

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # NAV used when a price file has no entry for an instrument.
    FOLIO_DEFAULT_NAV: float | None = 100.0

    # XIRR search interval. The lower bound stays just above -100%.
    FOLIO_XIRR_LOWER: float = -0.9999999
    FOLIO_XIRR_UPPER: float = 1.0
    FOLIO_XIRR_MAXITER: int = 100

    # Raise on a disposal larger than the units held instead of skipping it.
    FOLIO_STRICT_OVERSELL: bool = False

    FOLIO_TRANSACTIONS: str = "data/transaction_data.json"
    FOLIO_LOG_LEVEL: str = "WARNING"

    @property
    def default_nav(self) -> float | None:
        return self.FOLIO_DEFAULT_NAV

    @property
    def xirr_bounds(self) -> tuple[float, float]:
        return (self.FOLIO_XIRR_LOWER, self.FOLIO_XIRR_UPPER)

    @property
    def xirr_maxiter(self) -> int:
        return self.FOLIO_XIRR_MAXITER

    @property
    def strict_oversell(self) -> bool:
        return self.FOLIO_STRICT_OVERSELL

    @property
    def transactions_path(self) -> str:
        return self.FOLIO_TRANSACTIONS

    @property
    def log_level(self) -> str:
        return (self.FOLIO_LOG_LEVEL or "WARNING").strip().upper()


def load_settings() -> Settings:
    return Settings()

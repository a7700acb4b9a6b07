"""Settings helpers for infrastructure adapters."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import os
from pathlib import Path
from typing import Optional

import dotenv

from giving_engine.domain.constants import DEFAULT_MAX_DONATION_AMOUNT
from giving_engine.domain.policies import InactiveCategoryPolicy, ZeroGrowthPolicy
from giving_engine.infrastructure.logging.logger import get_app_logger

DEFAULT_CACHE_TTL_SECONDS = 300
DEFAULT_EXPORT_FIELDS_FILE = Path(__file__).resolve().parent / "config" / "export_fields.json"


@dataclass(frozen=True)
class GivingSettings:
    """Runtime settings for the giving engine.

    Attributes:
        ledger_db_url: SQLAlchemy URL of the ledger, when configured.
        max_donation_amount: Ceiling for a single donation amount.
        cache_ttl_seconds: Lifetime of per-subject cache entries.
        zero_growth_policy: Growth reported against an empty period.
        inactive_category_policy: Whether inactive categories accept
            donations.
        export_fields_file: JSON file holding the export whitelists.
    """

    ledger_db_url: Optional[str] = None
    max_donation_amount: Decimal = DEFAULT_MAX_DONATION_AMOUNT
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    zero_growth_policy: ZeroGrowthPolicy = ZeroGrowthPolicy.HUNDRED_PERCENT
    inactive_category_policy: InactiveCategoryPolicy = InactiveCategoryPolicy.REJECT
    export_fields_file: Path = DEFAULT_EXPORT_FIELDS_FILE

    @classmethod
    def from_env(cls) -> "GivingSettings":
        """Build settings from environment variables and a .env file.

        Invalid values fall back to their defaults with a warning.

        Returns:
            GivingSettings: Settings sourced from environment variables.
        """
        dotenv.load_dotenv()
        logger = get_app_logger()
        raw_fields_file = os.getenv("GIVING_EXPORT_FIELDS_FILE")
        return cls(
            ledger_db_url=os.getenv("LEDGER_DB_URL") or None,
            max_donation_amount=cls._read_amount(logger),
            cache_ttl_seconds=cls._read_ttl(logger),
            zero_growth_policy=cls._read_enum(
                "GIVING_ZERO_GROWTH_POLICY",
                ZeroGrowthPolicy,
                ZeroGrowthPolicy.HUNDRED_PERCENT,
                logger,
            ),
            inactive_category_policy=cls._read_enum(
                "GIVING_INACTIVE_CATEGORY_POLICY",
                InactiveCategoryPolicy,
                InactiveCategoryPolicy.REJECT,
                logger,
            ),
            export_fields_file=(
                Path(raw_fields_file).expanduser().resolve()
                if raw_fields_file
                else DEFAULT_EXPORT_FIELDS_FILE
            ),
        )

    @staticmethod
    def _read_amount(logger) -> Decimal:
        raw = os.getenv("GIVING_MAX_DONATION_AMOUNT")
        if not raw:
            return DEFAULT_MAX_DONATION_AMOUNT
        try:
            value = Decimal(raw.strip())
        except InvalidOperation:
            value = None
        if value is None or not value.is_finite() or value <= 0:
            logger.warning(
                f"Invalid GIVING_MAX_DONATION_AMOUNT {raw!r}; "
                f"using {DEFAULT_MAX_DONATION_AMOUNT}"
            )
            return DEFAULT_MAX_DONATION_AMOUNT
        return value

    @staticmethod
    def _read_ttl(logger) -> int:
        raw = os.getenv("GIVING_CACHE_TTL_SECONDS")
        if not raw:
            return DEFAULT_CACHE_TTL_SECONDS
        try:
            value = int(raw.strip())
        except ValueError:
            value = 0
        if value <= 0:
            logger.warning(
                f"Invalid GIVING_CACHE_TTL_SECONDS {raw!r}; "
                f"using {DEFAULT_CACHE_TTL_SECONDS}"
            )
            return DEFAULT_CACHE_TTL_SECONDS
        return value

    @staticmethod
    def _read_enum(name: str, enum_cls, default, logger):
        raw = os.getenv(name)
        if not raw:
            return default
        try:
            return enum_cls(raw.strip().lower())
        except ValueError:
            logger.warning(f"Invalid {name} {raw!r}; using {default.value}")
            return default


__all__ = ["GivingSettings", "DEFAULT_EXPORT_FIELDS_FILE"]

"""Configuration management with environment variable support."""

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def _parse_default_bet() -> Decimal | None:
    """Parse BLACKJACK_DEFAULT_BET; empty or zero disables the automatic bet."""
    raw = os.getenv("BLACKJACK_DEFAULT_BET", "100").strip()
    if not raw:
        return None
    amount = Decimal(raw)
    return amount if amount > 0 else None


@dataclass(frozen=True)
class TableConfig:
    """Blackjack table configuration."""

    num_decks: int = field(
        default_factory=lambda: int(os.getenv("BLACKJACK_NUM_DECKS", "6"))
    )
    cut_card_min: int = field(
        default_factory=lambda: int(os.getenv("BLACKJACK_CUT_CARD_MIN", "60"))
    )
    cut_card_max: int = field(
        default_factory=lambda: int(os.getenv("BLACKJACK_CUT_CARD_MAX", "74"))
    )
    default_bet: Decimal | None = field(default_factory=_parse_default_bet)
    dealer_delay: float = field(
        default_factory=lambda: float(os.getenv("BLACKJACK_DEALER_DELAY", "0.8"))
    )
    reveal_delay: float = field(
        default_factory=lambda: float(os.getenv("BLACKJACK_REVEAL_DELAY", "0.6"))
    )
    refund_on_abandon: bool = field(
        default_factory=lambda: _env_bool("BLACKJACK_REFUND_ON_ABANDON")
    )


@dataclass(frozen=True)
class WalletConfig:
    """Wallet configuration."""

    starting_balance: Decimal = field(
        default_factory=lambda: Decimal(os.getenv("CASINO_STARTING_BALANCE", "1000.00"))
    )


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: os.getenv("CASINO_LOG_LEVEL", "INFO").upper())
    format: str = field(
        default_factory=lambda: os.getenv(
            "CASINO_LOG_FORMAT", "%(asctime)s %(levelname)s %(name)s: %(message)s"
        )
    )


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: _env_bool("DEBUG"))

    table: TableConfig = field(default_factory=TableConfig)
    wallet: WalletConfig = field(default_factory=WalletConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def configure_logging(settings: LoggingConfig | None = None, debug: bool = False) -> None:
    """Configure root logging for a host application embedding the casino."""
    settings = settings or LoggingConfig()
    level = logging.DEBUG if debug else getattr(logging, settings.level, logging.INFO)
    logging.basicConfig(level=level, format=settings.format)


# Global configuration instance
config = AppConfig()

"""Configuration management for microloan."""

from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from pathlib import Path
from typing import Any

from microloan.exceptions import ConfigurationError


@dataclass
class LoanTermsConfig:
    """Commercial terms shared by every loan.

    All amounts are whole pesos (COP has no fractional unit in practice).
    """

    markup_rate: Decimal = Decimal("0.20")
    penalty_unit: int = 20_000
    daily_installments: int = 24
    weekly_installments: int = 4
    weekly_interval_days: int = 7
    # Collections close at 23:59:59; amounts due today become collectible at 00:01
    collections_close_at: time = time(23, 59, 59, 999999)
    calculations_available_at: time = time(0, 1)
    physical_delivery_at: time = time(8, 0)
    default_after_days: int = 30

    def installments_for(self, frequency: str) -> int:
        """Number of installments for a payment frequency value."""
        counts = {
            "daily": self.daily_installments,
            "weekly": self.weekly_installments,
        }
        try:
            return counts[str(frequency)]
        except KeyError:
            raise ConfigurationError(f"No installment count for frequency {frequency!r}") from None


@dataclass
class PaymentLimitsConfig:
    """Limits applied when validating a payment captured by a collector."""

    min_amount: int = 1_000
    max_amount: int = 50_000_000
    max_days_future: int = 0
    max_days_past: int = 365
    old_payment_warning_days: int = 30
    max_notes_length: int = 500
    notes_warning_ratio: float = 0.8
    small_payment_ratio: float = 0.1
    minimum_payment_ratio: float = 0.3


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class ScenarioConfig:
    """Configuration for scenario execution."""

    name: str
    num_debtors: int = 50
    num_collectors: int = 5
    weekly_loan_rate: float = 0.30
    reference_date: date | None = None
    labels: dict[str, Any] = field(default_factory=dict)


@dataclass
class MicroloanConfig:
    """Main configuration for microloan."""

    terms: LoanTermsConfig = field(default_factory=LoanTermsConfig)
    payment_limits: PaymentLimitsConfig = field(default_factory=PaymentLimitsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    scenario: ScenarioConfig | None = None
    seed: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "MicroloanConfig":
        """Create config from environment variables."""
        import os

        try:
            terms = LoanTermsConfig(
                markup_rate=Decimal(os.getenv("MARKUP_RATE", "0.20")),
                penalty_unit=int(os.getenv("PENALTY_UNIT", "20000")),
                default_after_days=int(os.getenv("DEFAULT_AFTER_DAYS", "30")),
            )

            payment_limits = PaymentLimitsConfig(
                min_amount=int(os.getenv("PAYMENT_MIN_AMOUNT", "1000")),
                max_amount=int(os.getenv("PAYMENT_MAX_AMOUNT", "50000000")),
                max_days_past=int(os.getenv("PAYMENT_MAX_DAYS_PAST", "365")),
            )
            seed = int(os.getenv("SEED")) if os.getenv("SEED") else None
        except (ArithmeticError, ValueError) as exc:
            raise ConfigurationError(f"Invalid numeric setting in environment: {exc}") from exc

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            terms=terms,
            payment_limits=payment_limits,
            output=output,
            seed=seed,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


DEFAULT_TERMS = LoanTermsConfig()
DEFAULT_PAYMENT_LIMITS = PaymentLimitsConfig()

"""Configuration management using Pydantic Settings.

Every path the pipeline touches is resolved here once and handed to the
pipeline as an explicit ``ReportPaths`` value; nothing downstream reads the
process working directory.

Environment variables use the ``TRADEFEED_`` prefix, e.g.::

    TRADEFEED_OUTPUT_DIR=./out
    TRADEFEED_TRADE_REPORT_NAME=TRADE.csv
    TRADEFEED_ERROR_LOG_PATH=./out/errors.log
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class ReportPaths:
    """Resolved destinations for one run."""

    trade: Path
    extrade: Path
    info: Path
    errors: Path | None = None  # None: findings go to stderr

    def all_reports(self) -> tuple[Path, Path, Path]:
        return (self.trade, self.extrade, self.info)


class FeedSettings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TRADEFEED_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Input
    input_path: Path | None = None
    input_encoding: str = "utf-8"

    # Output
    output_dir: Path = Field(default=Path("."), description="Directory for the three reports")
    trade_report_name: str = "TRADE.csv"
    extrade_report_name: str = "EXTRADE.csv"
    info_report_name: str = "INFO.csv"
    error_log_path: Path | None = None
    csv_encoding: str = "utf-8"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "console"

    @field_validator("trade_report_name", "extrade_report_name", "info_report_name")
    @classmethod
    def _plain_file_name(cls, value: str) -> str:
        if not value or Path(value).name != value:
            raise ValueError(f"report name must be a plain file name, got {value!r}")
        return value

    def report_paths(self, output_dir: Path | None = None) -> ReportPaths:
        """Resolve report destinations, optionally under another directory."""
        base = Path(output_dir or self.output_dir).resolve()
        return ReportPaths(
            trade=base / self.trade_report_name,
            extrade=base / self.extrade_report_name,
            info=base / self.info_report_name,
            errors=self.error_log_path.resolve() if self.error_log_path else None,
        )


# Global settings instance
_settings: FeedSettings | None = None


def get_settings() -> FeedSettings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = FeedSettings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None

"""Configuration loader and validation for reconciliation settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SystemInputConfig(BaseModel):
    """Configuration for parsing the internal system ledger."""

    encoding: str = "utf-8"
    delimiter: str = ","
    column_mappings: dict[str, str] = Field(
        default_factory=lambda: {
            "trx_id": "trxID",
            "amount": "amount",
            "type": "type",
            "transaction_time": "transactionTime",
        }
    )


class BankInputConfig(BaseModel):
    """Configuration for parsing bank statement files."""

    encoding: str = "utf-8"
    delimiter: str = ","
    date_format: str = "%Y-%m-%d"
    unknown_bank_label: str = "UNKNOWN"
    column_mappings: dict[str, str] = Field(
        default_factory=lambda: {
            "unique_identifier": "unique_identifier",
            "amount": "amount",
            "date": "date",
            "bank": "bank",
        }
    )


class InputConfig(BaseModel):
    """Configuration for input file parsing."""

    system: SystemInputConfig = Field(default_factory=SystemInputConfig)
    bank: BankInputConfig = Field(default_factory=BankInputConfig)


class JsonOutputConfig(BaseModel):
    """Configuration for the JSON summary."""

    indent: int = 2


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    matched: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Matched Transactions")
    )
    unmatched_system: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Unmatched System")
    )
    unmatched_bank: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Unmatched Bank")
    )


class OutputConfig(BaseModel):
    """Configuration for output."""

    json_summary: JsonOutputConfig = Field(default_factory=JsonOutputConfig, alias="json")
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)

    model_config = {"populate_by_name": True}


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "input": {
            "system": {
                "encoding": "utf-8",
                "delimiter": ",",
                "column_mappings": {
                    "trx_id": "trxID",
                    "amount": "amount",
                    "type": "type",
                    "transaction_time": "transactionTime",
                },
            },
            "bank": {
                "encoding": "utf-8",
                "delimiter": ",",
                "date_format": "%Y-%m-%d",
                "unknown_bank_label": "UNKNOWN",
                "column_mappings": {
                    "unique_identifier": "unique_identifier",
                    "amount": "amount",
                    "date": "date",
                    "bank": "bank",
                },
            },
        },
        "output": {
            "json": {
                "indent": 2,
            },
            "sheets": {
                "summary": {"enabled": True, "name": "Summary"},
                "matched": {"enabled": True, "name": "Matched Transactions"},
                "unmatched_system": {"enabled": True, "name": "Unmatched System"},
                "unmatched_bank": {"enabled": True, "name": "Unmatched Bank"},
            },
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file": None,
        },
    }


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    config_dict = get_default_config()

    if config_path is not None:
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {config_path}"
            )

        # Deep merge user config into defaults
        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Ledger reconciliation configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")

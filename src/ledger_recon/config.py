"""Configuration loader and validation for reconciliation settings."""

from decimal import Decimal
from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ColumnMapping(BaseModel):
    """Zero-based positions of the ledger fields within a row."""

    id: int = Field(default=0, ge=0)
    date: int = Field(default=1, ge=0)
    amount: int = Field(default=2, ge=0)


class InputConfig(BaseModel):
    """Configuration for ledger file parsing."""

    encoding: str = "utf-8"
    delimiter: str = ","
    has_header: bool = False
    field_count: int = Field(default=3, ge=1)
    columns: ColumnMapping = Field(default_factory=ColumnMapping)
    date_formats: list[str] = Field(default_factory=lambda: ["%m/%d/%Y", "%Y-%m-%d"])
    minor_unit_digits: int = Field(default=2, ge=0, le=8)
    parallel_parse: bool = False


class MatchingConfig(BaseModel):
    """Configuration for the matching engine."""

    # Same currency units as the ledger amounts; 10.00 is 1000 minor units
    threshold: Decimal = Field(default=Decimal("10.00"), ge=0)
    days: int = Field(default=7, ge=0)


class WorkbookConfig(BaseModel):
    """Layout of the bank-export workbook consumed by ``split-workbook``."""

    credit_sheet: str = "Sheet1"
    debit_sheet: str = "Sheet2"
    header_rows: int = Field(default=25, ge=0)
    footer_rows: int = Field(default=14, ge=0)
    min_columns: int = Field(default=39, ge=1)
    id_column: str = "A"
    date_column: str = "Y"
    amount_column: str = "AL"


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "reconciliation_report_{date}_{time}.xlsx"


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    matched: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Matched Transactions"))
    unmatched_credits: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Unmatched Credits")
    )
    unmatched_debits: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Unmatched Debits")
    )
    parse_errors: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Parse Errors"))


class OutputConfig(BaseModel):
    """Configuration for output."""

    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    workbook: WorkbookConfig = Field(default_factory=WorkbookConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "input": {
            "encoding": "utf-8",
            "delimiter": ",",
            "has_header": False,
            "field_count": 3,
            "columns": {"id": 0, "date": 1, "amount": 2},
            "date_formats": ["%m/%d/%Y", "%Y-%m-%d"],
            "minor_unit_digits": 2,
            "parallel_parse": False,
        },
        "matching": {
            "threshold": "10.00",
            "days": 7,
        },
        "workbook": {
            "credit_sheet": "Sheet1",
            "debit_sheet": "Sheet2",
            "header_rows": 25,
            "footer_rows": 14,
            "min_columns": 39,
            "id_column": "A",
            "date_column": "Y",
            "amount_column": "AL",
        },
        "output": {
            "excel": {
                "filename_template": "reconciliation_report_{date}_{time}.xlsx",
            },
            "sheets": {
                "summary": {"enabled": True, "name": "Summary"},
                "matched": {"enabled": True, "name": "Matched Transactions"},
                "unmatched_credits": {"enabled": True, "name": "Unmatched Credits"},
                "unmatched_debits": {"enabled": True, "name": "Unmatched Debits"},
                "parse_errors": {"enabled": True, "name": "Parse Errors"},
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
        ConfigurationError: If the file is unreadable or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read configuration file {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Configuration file {config_path} must contain a mapping at the top level"
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
# matching.threshold uses the same currency units as the ledger amounts

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")

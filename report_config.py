"""
Configuration models for the GA report extractor.
Report definitions and the date block are read from a JSON file and validated with pydantic.
"""

import json
import os
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_CONFIG_FILE = 'report_config.json'
DEFAULT_KEY_FILE = 'service_account_key.json'


class DateConfiguration(BaseModel):
    """Date block shared by every report. Values stay raw strings; the resolver parses them."""
    model_config = ConfigDict(frozen=True)

    start_date: Optional[str] = Field("", description="Explicit start date, e.g. 2024-01-01")
    end_date: Optional[str] = Field("", description="Explicit end date, e.g. 2024-01-31")
    number_of_days: Optional[str] = Field("", description="Trailing days to report on when no explicit range is set")

    @field_validator('start_date', 'end_date', 'number_of_days', mode='before')
    @classmethod
    def _coerce_to_string(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)


class ReportDefinition(BaseModel):
    """A named query template: metrics, dimensions, ordering and page size"""
    model_config = ConfigDict(frozen=True)

    name: str
    metrics: str = Field(..., description="Comma-separated metric expressions, e.g. ga:sessions,ga:users")
    dimensions: str = Field(..., description="Comma-separated dimension names, e.g. ga:date")
    order_by: Optional[str] = Field(None, description="Comma-separated field-direction pairs, e.g. ga:sessions-DESCENDING")
    record_count: int = Field(0, description="Rows per page; 0 uses the API maximum")


class ReportConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    date_configuration: DateConfiguration = Field(default_factory=DateConfiguration)
    reports: Tuple[ReportDefinition, ...] = ()
    key_file_name: Optional[str] = Field(None, description="Service account key file")
    max_pages: Optional[int] = Field(None, ge=1, description="Upper bound on requests per report; unset means follow every page")


def resolve_local_path(path: str) -> str:
    """Relative paths missing from the cwd are looked up next to this script."""
    if not os.path.isabs(path) and not os.path.exists(path):
        script_dir = Path(__file__).parent
        path = str(script_dir / path)
    return path


def get_config_path(default_path: str = DEFAULT_CONFIG_FILE) -> str:
    """Resolve the configuration file path using env override, cwd, then script directory."""
    return resolve_local_path(os.environ.get('GA_REPORT_CONFIG', default_path))


def get_key_file_path(config: Optional[ReportConfiguration] = None) -> str:
    """Resolve the service account key file: KEY_FILE_PATH env, then config, then the default name.

    Relative names resolve like the configuration file: cwd first, then the script directory.
    """
    key_file_path = os.environ.get('KEY_FILE_PATH')
    if not key_file_path:
        if config is not None and config.key_file_name:
            key_file_path = config.key_file_name
        else:
            key_file_path = DEFAULT_KEY_FILE
    return resolve_local_path(key_file_path)


def parse_report_configuration(data: dict) -> ReportConfiguration:
    try:
        return ReportConfiguration.model_validate(data)
    except ValidationError as e:
        raise RuntimeError(f"Invalid report configuration: {e}") from e


def load_report_configuration(config_path: Optional[str] = None) -> ReportConfiguration:
    """
    Load and validate the report configuration file.

    Args:
        config_path: Path to the JSON file. Defaults to get_config_path().

    Returns:
        ReportConfiguration

    Raises:
        RuntimeError: if the file is missing, is not valid JSON, or fails validation.
    """
    config_path = config_path or get_config_path()
    if not os.path.exists(config_path):
        raise RuntimeError(f"Could not find report configuration file '{config_path}'. "
                           "Set GA_REPORT_CONFIG or pass --config.")
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Report configuration file '{config_path}' is not valid JSON: {e}") from e
    return parse_report_configuration(data)

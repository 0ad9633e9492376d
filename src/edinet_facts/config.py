"""
Configuration management using Pydantic Settings.

Automatically loads configuration from config/mappings.yaml and environment variables.
Provides type-safe access to:
- Fact mapping tables (XBRL element name -> statement field) per statement kind
- EDINET API settings (API key, base URL, throttling)
- MongoDB connection settings
"""

from pathlib import Path
from typing import Dict, List, Optional
import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StatementMapping(BaseModel):
    """
    Mapping table definition for one statement kind.

    Attributes:
        qualifier: Default context id selected for this statement kind
        entries: Qualified element name -> output field identifier
    """

    qualifier: str = Field(
        ...,
        description="Default contextRef value for this statement kind",
        examples=["CurrentYTDDuration"]
    )
    entries: Dict[str, str] = Field(
        default_factory=dict,
        description="Qualified element name to output field identifier"
    )


class FactMappingConfig(BaseSettings):
    """
    Configuration automatically loaded from config/mappings.yaml.

    Holds one StatementMapping per statement kind. Extending the set of
    recognized facts only requires adding entries to the YAML file.

    Attributes:
        income_statement: Mapping for the cumulative year-to-date income statement
        balance_sheet: Mapping for the instantaneous balance sheet

    Example:
        >>> config = FactMappingConfig()
        >>> config.income_statement.qualifier
        'CurrentYTDDuration'
        >>> config.income_statement.entries['jppfs_cor:NetSales']
        'net_sales'
    """

    income_statement: StatementMapping
    balance_sheet: StatementMapping

    model_config = SettingsConfigDict(
        extra='ignore'
    )

    @model_validator(mode='before')
    @classmethod
    def load_yaml_config(cls, data: dict) -> dict:
        """
        Load configuration from config/mappings.yaml if not already provided.
        """
        # Values passed explicitly (e.g., from tests) take precedence
        if data:
            return data

        # src/edinet_facts/config.py -> root
        project_root = Path(__file__).parent.parent.parent
        config_path = project_root / 'config' / 'mappings.yaml'

        if not config_path.exists():
            config_path = Path('config/mappings.yaml')

        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found at {config_path}. "
                f"Ensure config/mappings.yaml exists in project root."
            )

        with open(config_path, 'r', encoding='utf-8') as f:
            yaml_data = yaml.safe_load(f) or {}

        return {
            'income_statement': yaml_data.get('income_statement', {}),
            'balance_sheet': yaml_data.get('balance_sheet', {})
        }

    def get_statement(self, kind: str) -> StatementMapping:
        """
        Get the mapping definition for a statement kind.

        Args:
            kind: 'income_statement' or 'balance_sheet'

        Returns:
            StatementMapping for the kind

        Raises:
            KeyError: If kind is not a known statement kind
        """
        if kind not in self.statement_kinds():
            raise KeyError(f"Unknown statement kind: {kind}")
        return getattr(self, kind)

    @staticmethod
    def statement_kinds() -> List[str]:
        """Statement kinds in extraction order."""
        return ['income_statement', 'balance_sheet']


# Singleton pattern - loaded once, cached forever
_fact_mappings: Optional[FactMappingConfig] = None


def get_fact_mappings() -> FactMappingConfig:
    """
    Get global fact mapping config (lazy-loaded singleton).

    Returns:
        Singleton FactMappingConfig instance

    Example:
        >>> mappings = get_fact_mappings()
        >>> mappings is get_fact_mappings()
        True
    """
    global _fact_mappings
    if _fact_mappings is None:
        _fact_mappings = FactMappingConfig()
    return _fact_mappings


class AppConfig(BaseSettings):
    """
    Application configuration loaded from environment variables.

    Environment Variables (from .env):
        EDINET_API_KEY: EDINET API subscription key
        EDINET_API_BASE_URL: EDINET API v2 base URL
        MONGO_HOST: MongoDB host (e.g., "localhost:27017")
        DB_NAME: MongoDB database name (e.g., "EDINET")
        BASE_DIR: Directory for downloaded archives and failure reports
        REQUEST_INTERVAL_SEC: Pause between dates in the collection loop
        REQUEST_TIMEOUT_SEC: HTTP timeout for EDINET requests
        DOC_TYPE_CODES: JSON list of document type codes to collect

    Example:
        >>> config = get_app_config()
        >>> config.mongodb_uri
        'mongodb://localhost:27017/'
        >>> config.doc_type_codes
        ['140', '150']
    """

    edinet_api_key: Optional[str] = Field(
        default=None,
        description="EDINET API subscription key"
    )

    edinet_api_base_url: str = Field(
        default="https://api.edinet-fsa.go.jp/api/v2",
        description="EDINET API v2 base URL"
    )

    mongo_host: str = Field(
        default="localhost:27017",
        description="MongoDB host address"
    )

    db_name: str = Field(
        default="EDINET",
        description="MongoDB database name"
    )

    base_dir: str = Field(
        default="edinet_documents",
        description="Directory for downloaded XBRL archives"
    )

    request_interval_sec: float = Field(
        default=0.25,
        ge=0,
        description="Pause between dates when iterating a date range"
    )

    request_timeout_sec: float = Field(
        default=30,
        gt=0,
        description="HTTP timeout for EDINET API requests"
    )

    doc_type_codes: List[str] = Field(
        default_factory=lambda: ["140", "150"],
        description="Document type codes to collect (140: quarterly, 150: semi-annual)"
    )

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    @property
    def mongodb_uri(self) -> str:
        """Construct MongoDB URI from host."""
        return f"mongodb://{self.mongo_host}/"


# Singleton pattern - loaded once, cached forever
_app_config: Optional[AppConfig] = None


def get_app_config() -> AppConfig:
    """
    Get global application config instance (lazy-loaded singleton).

    Configuration is loaded from environment variables and .env file.

    Returns:
        Singleton AppConfig instance
    """
    global _app_config
    if _app_config is None:
        _app_config = AppConfig()
    return _app_config

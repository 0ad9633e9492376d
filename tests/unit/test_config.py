"""
Unit tests for configuration management using Pydantic Settings.

Tests FactMappingConfig (auto-loads config/mappings.yaml) and AppConfig
(environment variables / .env).
"""

import pytest
from unittest.mock import patch


class TestFactMappingConfig:
    """Test suite for FactMappingConfig pydantic-settings class."""

    def test_config_loads_yaml_automatically(self):
        """Config should automatically load mappings.yaml on instantiation."""
        from edinet_facts.config import FactMappingConfig

        config = FactMappingConfig()

        assert config.income_statement.qualifier == 'CurrentYTDDuration'
        assert config.balance_sheet.qualifier == 'CurrentQuarterInstant'
        assert len(config.income_statement.entries) == 26
        assert len(config.balance_sheet.entries) == 14

    def test_config_contains_expected_entries(self):
        from edinet_facts.config import FactMappingConfig

        config = FactMappingConfig()

        assert config.income_statement.entries['jppfs_cor:NetSales'] == 'net_sales'
        assert config.income_statement.entries['jppfs_cor:OrdinaryIncome'] == 'ordinary_income'
        assert config.balance_sheet.entries['jppfs_cor:NetAssets'] == 'equity.total_equity'

    def test_explicit_values_skip_yaml(self):
        from edinet_facts.config import FactMappingConfig, StatementMapping

        config = FactMappingConfig(
            income_statement=StatementMapping(qualifier='A'),
            balance_sheet=StatementMapping(qualifier='B'),
        )

        assert config.income_statement.entries == {}
        assert config.balance_sheet.qualifier == 'B'

    def test_get_statement(self):
        from edinet_facts.config import FactMappingConfig

        config = FactMappingConfig()

        assert config.get_statement('income_statement') is config.income_statement
        assert config.get_statement('balance_sheet') is config.balance_sheet

    def test_get_statement_unknown_kind(self):
        from edinet_facts.config import FactMappingConfig

        with pytest.raises(KeyError):
            FactMappingConfig().get_statement('cash_flow')

    def test_statement_kinds_order(self):
        from edinet_facts.config import FactMappingConfig

        assert FactMappingConfig.statement_kinds() == ['income_statement', 'balance_sheet']

    def test_singleton(self):
        from edinet_facts.config import get_fact_mappings

        assert get_fact_mappings() is get_fact_mappings()


class TestAppConfig:
    """Test suite for environment-driven AppConfig."""

    def test_defaults(self):
        from edinet_facts.config import AppConfig

        with patch.dict('os.environ', {}, clear=True):
            config = AppConfig(_env_file=None)

        assert config.edinet_api_key is None
        assert config.edinet_api_base_url == 'https://api.edinet-fsa.go.jp/api/v2'
        assert config.mongo_host == 'localhost:27017'
        assert config.db_name == 'EDINET'
        assert config.base_dir == 'edinet_documents'
        assert config.request_interval_sec == 0.25
        assert config.request_timeout_sec == 30
        assert config.doc_type_codes == ['140', '150']

    def test_environment_overrides(self):
        from edinet_facts.config import AppConfig

        with patch.dict('os.environ', {
            'EDINET_API_KEY': 'test-key',
            'MONGO_HOST': 'mongo:27018',
            'DB_NAME': 'EDINET_TEST',
            'REQUEST_INTERVAL_SEC': '0',
            'DOC_TYPE_CODES': '["120", "140"]',
        }, clear=True):
            config = AppConfig(_env_file=None)

        assert config.edinet_api_key == 'test-key'
        assert config.db_name == 'EDINET_TEST'
        assert config.request_interval_sec == 0
        assert config.doc_type_codes == ['120', '140']
        assert config.mongodb_uri == 'mongodb://mongo:27018/'

    def test_negative_interval_rejected(self):
        from pydantic import ValidationError
        from edinet_facts.config import AppConfig

        with patch.dict('os.environ', {'REQUEST_INTERVAL_SEC': '-1'}, clear=True):
            with pytest.raises(ValidationError):
                AppConfig(_env_file=None)

    def test_singleton(self):
        from edinet_facts.config import get_app_config

        assert get_app_config() is get_app_config()

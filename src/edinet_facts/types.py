"""
Discovery helper for the configured statement kinds.

Provides a user-facing API to list statement kinds, their default context
qualifiers and the fields each one can populate, from config/mappings.yaml.
"""

from typing import Dict, List

from edinet_facts.config import get_fact_mappings
from edinet_facts.parsers.mapping_table import RECORD_TYPES


class StatementKinds:
    """
    Helper class for discovering extractable statements.

    All methods return copies to prevent accidental mutation of the
    configuration singleton.

    Example:
        >>> StatementKinds.list_available()
        ['income_statement', 'balance_sheet']

        >>> StatementKinds.default_qualifier('balance_sheet')
        'CurrentQuarterInstant'

        >>> StatementKinds.is_valid('cash_flow')
        False
    """

    @staticmethod
    def list_available() -> List[str]:
        """List statement kinds in extraction order."""
        return list(get_fact_mappings().statement_kinds())

    @staticmethod
    def is_valid(kind: str) -> bool:
        return kind in get_fact_mappings().statement_kinds()

    @staticmethod
    def default_qualifier(kind: str) -> str:
        """
        Get the context id a statement kind is resolved against by default.

        Raises:
            ValueError: If kind is not a known statement kind
        """
        if not StatementKinds.is_valid(kind):
            raise ValueError(
                f"Unknown statement kind: {kind}. "
                f"Available: {StatementKinds.list_available()}"
            )
        return get_fact_mappings().get_statement(kind).qualifier

    @staticmethod
    def list_fields(kind: str) -> List[str]:
        """
        List every field a statement kind's record declares.

        Raises:
            ValueError: If kind is not a known statement kind
        """
        if kind not in RECORD_TYPES:
            raise ValueError(f"Unknown statement kind: {kind}")
        return RECORD_TYPES[kind].field_ids()

    @staticmethod
    def list_mappings(kind: str) -> Dict[str, str]:
        """
        Get element name -> field identifier for a statement kind.

        Example:
            >>> StatementKinds.list_mappings('income_statement')['jppfs_cor:NetSales']
            'net_sales'
        """
        StatementKinds.default_qualifier(kind)
        return dict(get_fact_mappings().get_statement(kind).entries)

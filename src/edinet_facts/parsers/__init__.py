"""
XBRL parsing and fact resolution.

- Parse once: raw markup -> ParsedDocument (explicit-stack tree builder)
- Resolve per statement kind: context qualifier + mapping table -> fact record
- Mapping tables are data (config/mappings.yaml), not code
"""

from .xbrl_parser import parse_document, ParseError, StructuralError
from .mapping_table import (
    MappingTable,
    income_statement_table,
    balance_sheet_table,
)
from .fact_resolver import (
    parse_fact_value,
    resolve_facts,
    extract_income_statement,
    extract_balance_sheet,
)

__all__ = [
    # Parsing
    'parse_document',
    'ParseError',
    'StructuralError',
    # Mapping tables
    'MappingTable',
    'income_statement_table',
    'balance_sheet_table',
    # Resolution
    'parse_fact_value',
    'resolve_facts',
    'extract_income_statement',
    'extract_balance_sheet',
]

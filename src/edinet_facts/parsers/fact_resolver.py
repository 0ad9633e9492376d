"""
Fact resolution: pull context-qualified numeric facts out of a parsed tree.

Matching rules (all exact, no schema knowledge):
- element.context_ref == qualifier
- element.name is a key of the mapping table
- element.value is a base-10 floating point literal

Anything else is skipped silently; unknown tags vary between taxonomy
revisions and are expected. When a field matches more than once, the
later element in document order wins.
"""

import logging
import re
from typing import Dict, Optional

from edinet_facts.models.element import ParsedDocument
from edinet_facts.models.statements import (
    BalanceSheetFacts,
    IncomeStatementFacts,
    StatementFacts,
)
from edinet_facts.parsers.mapping_table import (
    MappingTable,
    balance_sheet_table,
    income_statement_table,
)

logger = logging.getLogger(__name__)

# ASCII digits only; rejects nan/inf, hex and digit separators that float() accepts
_FLOAT_LITERAL = re.compile(r'[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?')


def parse_fact_value(text: Optional[str]) -> Optional[float]:
    """
    Parse a fact's text as a base-10 float.

    Returns:
        The value, or None if text is missing or not a float literal

    Example:
        >>> parse_fact_value('1000')
        1000.0
        >>> parse_fact_value('-2.5e3')
        -2500.0
        >>> parse_fact_value('not_a_number') is None
        True
    """
    if text is None:
        return None
    candidate = text.strip()
    if not _FLOAT_LITERAL.fullmatch(candidate):
        return None
    return float(candidate)


def resolve_facts(
    document: ParsedDocument,
    qualifier: str,
    table: MappingTable
) -> StatementFacts:
    """
    Resolve one statement's facts from a parsed document.

    Visits every element at every depth in pre-order; never short-circuits,
    never raises for document content.

    Args:
        document: Parsed XBRL document
        qualifier: contextRef to select (e.g., 'CurrentYTDDuration')
        table: Mapping table for the statement kind

    Returns:
        Instance of table.record_type; unmatched fields are None

    Example:
        >>> facts = resolve_facts(doc, 'CurrentYTDDuration', income_statement_table())
        >>> facts.net_sales
        1000.0
    """
    values: Dict[str, float] = {}
    visited = 0

    for element in document.iter_elements():
        visited += 1
        if element.context_ref != qualifier:
            continue
        field_id = table.field_for(element.name)
        if field_id is None:
            continue
        value = parse_fact_value(element.value)
        if value is None:
            continue
        if field_id in values:
            logger.debug(
                f"Overwriting {table.kind}.{field_id}: {values[field_id]} -> {value} "
                f"({element.name}, context {qualifier})"
            )
        values[field_id] = value

    logger.debug(
        f"Resolved {len(values)}/{len(table)} {table.kind} facts "
        f"for context {qualifier} ({visited} elements visited)"
    )

    return table.record_type.from_fields(values)


def extract_income_statement(
    document: ParsedDocument,
    qualifier: Optional[str] = None
) -> IncomeStatementFacts:
    """Resolve income statement facts with the configured table and qualifier."""
    table = income_statement_table()
    return resolve_facts(document, table.qualifier if qualifier is None else qualifier, table)


def extract_balance_sheet(
    document: ParsedDocument,
    qualifier: Optional[str] = None
) -> BalanceSheetFacts:
    """Resolve balance sheet facts with the configured table and qualifier."""
    table = balance_sheet_table()
    return resolve_facts(document, table.qualifier if qualifier is None else qualifier, table)

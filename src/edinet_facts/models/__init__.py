"""
Data models for parsed documents, extracted facts and document metadata.

- element: schema-less XBRL element tree (dataclasses)
- statements: income statement / balance sheet fact records (Pydantic)
- report: EDINET API payloads and stored report metadata (Pydantic)
- requests: validated pipeline requests (Pydantic)
"""

from edinet_facts.models.element import TaggedElement, ParsedDocument
from edinet_facts.models.statements import (
    StatementFacts,
    IncomeStatementFacts,
    BalanceSheetFacts,
    Assets,
    Liabilities,
    Equity,
)
from edinet_facts.models.report import (
    DocumentInfo,
    DocumentListMetadata,
    DocumentListResponse,
    QuarterlyReport,
)
from edinet_facts.models.requests import CollectionRequest

__all__ = [
    'TaggedElement',
    'ParsedDocument',
    'StatementFacts',
    'IncomeStatementFacts',
    'BalanceSheetFacts',
    'Assets',
    'Liabilities',
    'Equity',
    'DocumentInfo',
    'DocumentListMetadata',
    'DocumentListResponse',
    'QuarterlyReport',
    'CollectionRequest',
]

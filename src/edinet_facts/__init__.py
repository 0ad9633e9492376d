"""
edinet-facts: EDINET XBRL financial fact extraction library.

Main package exports for user-facing API.
"""

from edinet_facts.api import (
    ExtractionPipeline,
    ReportCollectionPipeline,
    BackfillPipelineParallel,
)
from edinet_facts.parsers import parse_document, ParseError, StructuralError
from edinet_facts.services import StorageService, EdinetClient
from edinet_facts.types import StatementKinds

__all__ = [
    'ExtractionPipeline',
    'ReportCollectionPipeline',
    'BackfillPipelineParallel',
    'parse_document',
    'ParseError',
    'StructuralError',
    'StorageService',
    'EdinetClient',
    'StatementKinds',
]

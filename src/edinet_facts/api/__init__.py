"""
User-facing API interfaces for edinet-facts.

This module provides the extraction pipeline for single documents and the
collection/backfill pipelines that fill MongoDB with statement facts.
"""

from edinet_facts.api.pipeline import (
    ExtractionPipeline,
    ExtractionResult,
    ReportCollectionPipeline,
)
from edinet_facts.api.pipeline_parallel import BackfillPipelineParallel

__all__ = [
    'ExtractionPipeline',
    'ExtractionResult',
    'ReportCollectionPipeline',
    'BackfillPipelineParallel'
]

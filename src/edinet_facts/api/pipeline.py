"""
High-level pipelines for EDINET financial facts.

ExtractionPipeline turns one XBRL document into statement records:
- Parse the markup once (parse_document)
- Resolve income statement and balance sheet facts against the same tree

ReportCollectionPipeline coordinates the complete workflow:
- List documents per date (via EdinetClient)
- Download XBRL archives
- Extract statement facts
- Store in MongoDB (via StorageService)

Design Philosophy:
- Explicit database control (StorageService injected by user)
- Resilient processing (continues after individual failures)
- Statistics-based monitoring (returns actionable metrics)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union
import logging
import time

import pandas as pd

from edinet_facts.config import get_app_config
from edinet_facts.models import (
    BalanceSheetFacts,
    CollectionRequest,
    DocumentInfo,
    IncomeStatementFacts,
    ParsedDocument,
    QuarterlyReport,
)
from edinet_facts.parsers.fact_resolver import resolve_facts
from edinet_facts.parsers.mapping_table import (
    MappingTable,
    balance_sheet_table,
    income_statement_table,
)
from edinet_facts.parsers.xbrl_parser import parse_document
from edinet_facts.services.archive_reader import read_xbrl_from_zip
from edinet_facts.services.edinet_client import EdinetApiError, EdinetClient
from edinet_facts.services.storage_service import StorageService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionResult:
    """Statement records extracted from one document, plus the parsed tree."""

    income_statement: IncomeStatementFacts
    balance_sheet: BalanceSheetFacts
    document: ParsedDocument


class ExtractionPipeline:
    """
    Parse once, resolve per statement kind.

    Example:
        pipeline = ExtractionPipeline()
        result = pipeline.extract(xbrl_text)
        print(result.income_statement.net_sales)
        print(result.balance_sheet.assets.total_assets)
    """

    def __init__(
        self,
        income_table: Optional[MappingTable] = None,
        balance_table: Optional[MappingTable] = None
    ):
        """
        Args:
            income_table: Income statement mapping (default: configured table)
            balance_table: Balance sheet mapping (default: configured table)
        """
        self.income_table = income_table or income_statement_table()
        self.balance_table = balance_table or balance_sheet_table()

    def extract(
        self,
        text: Union[str, bytes],
        income_qualifier: Optional[str] = None,
        balance_qualifier: Optional[str] = None
    ) -> ExtractionResult:
        """
        Extract both statements from XBRL markup.

        Args:
            text: Complete XBRL instance document
            income_qualifier: contextRef for income facts (default: table qualifier)
            balance_qualifier: contextRef for balance facts (default: table qualifier)

        Returns:
            ExtractionResult with both records and the parsed document

        Raises:
            ParseError: If the markup is malformed (StructuralError for
                        unbalanced elements)
        """
        document = parse_document(text)

        income = resolve_facts(
            document,
            self.income_table.qualifier if income_qualifier is None else income_qualifier,
            self.income_table
        )
        balance = resolve_facts(
            document,
            self.balance_table.qualifier if balance_qualifier is None else balance_qualifier,
            self.balance_table
        )

        return ExtractionResult(
            income_statement=income,
            balance_sheet=balance,
            document=document
        )

    def extract_archive(self, zip_path: Union[str, Path]) -> ExtractionResult:
        """
        Extract both statements from a downloaded EDINET archive.

        Raises:
            FileNotFoundError: If the archive does not exist
            ArchiveError: If the archive has no .xbrl member
            ParseError: If the markup is malformed
        """
        return self.extract(read_xbrl_from_zip(zip_path))


class ReportCollectionPipeline:
    """
    Date-range collection: list → filter → download → extract → store.

    Database connection is injected, so users control when and how the
    connection is established and verified.

    Example:
        from edinet_facts.services import StorageService
        from edinet_facts.api import ReportCollectionPipeline

        storage = StorageService()
        pipeline = ReportCollectionPipeline(storage_service=storage)

        stats = pipeline.collect('2015-04-01', '2015-05-01')
        print(f"Extracted {stats['extracted']} of {stats['documents']} documents, "
              f"{stats['failed']} failures")
    """

    def __init__(
        self,
        storage_service: StorageService,
        client: Optional[EdinetClient] = None,
        extraction: Optional[ExtractionPipeline] = None,
        base_dir: Optional[str] = None,
        doc_type_codes: Optional[List[str]] = None,
        request_interval_sec: Optional[float] = None
    ):
        """
        Initialize pipeline with injected storage service.

        Args:
            storage_service: Pre-initialized StorageService with verified connection
            client: EDINET client (default: EdinetClient() from config)
            extraction: Extraction pipeline (default: configured mapping tables)
            base_dir: Download/failure directory (default: config.base_dir)
            doc_type_codes: Document types to keep (default: config.doc_type_codes)
            request_interval_sec: Pause between dates (default: config value)
        """
        config = get_app_config()

        self._storage = storage_service
        self._client = client or EdinetClient()
        self._extraction = extraction or ExtractionPipeline()
        self.base_dir = base_dir or config.base_dir
        self.doc_type_codes = doc_type_codes or list(config.doc_type_codes)
        self.request_interval_sec = (
            config.request_interval_sec if request_interval_sec is None
            else request_interval_sec
        )
        logger.info("ReportCollectionPipeline initialized with injected StorageService")

    def collect(self, start_date: str, end_date: str) -> Dict[str, int]:
        """
        Collect all matching reports listed in [start_date, end_date).

        Args:
            start_date: First listing date (YYYY-MM-DD, inclusive)
            end_date: End listing date (YYYY-MM-DD, exclusive)

        Returns:
            Statistics dictionary:
            {
                'dates': 30,        # Dates whose document list was fetched
                'documents': 12,    # Documents matching doc_type_codes
                'extracted': 10,    # Documents with statements stored
                'failed': 1,        # Failed documents or dates
                'skipped': 1        # Documents without a downloadable archive
            }

        Raises:
            ValidationError: If dates are malformed or end_date < start_date
            EdinetApiError: If EDINET rejects the API key (HTTP 401/403)
        """
        request = CollectionRequest(
            start_date=start_date,
            end_date=end_date,
            doc_type_codes=self.doc_type_codes
        )

        stats = self._init_statistics()
        failures: List[Dict] = []

        logger.info(
            f"Starting collection: {request.start_date} to {request.end_date}, "
            f"doc types {request.doc_type_codes}"
        )

        try:
            for date in request.iter_dates():
                self._collect_date(date, request.doc_type_codes, stats, failures)
                if self.request_interval_sec > 0:
                    time.sleep(self.request_interval_sec)
        finally:
            if failures:
                save_failures_csv(
                    failures, self.base_dir, f"{request.start_date}_{request.end_date}"
                )

        logger.info(
            f"Collection complete: {stats['dates']} dates, "
            f"{stats['documents']} documents, {stats['extracted']} extracted, "
            f"{stats['skipped']} skipped, {stats['failed']} failures"
        )

        return stats

    def _collect_date(
        self,
        date: str,
        doc_type_codes: List[str],
        stats: Dict[str, int],
        failures: List[Dict]
    ) -> None:
        try:
            listing = self._client.get_document_list(date)
        except EdinetApiError as e:
            # Authentication/Authorization errors should fail fast
            if e.is_auth_error:
                logger.error(
                    f"Authentication failed for {date}: {e}. "
                    "Check EDINET_API_KEY in .env file."
                )
                raise
            logger.error(f"Failed to fetch document list for {date}: {e}", exc_info=True)
            failures.append(self._failure_row(date, None, e))
            stats['failed'] += 1
            return

        # EDINET reports a bad key as HTTP 200 with status 401 in the body
        if listing.metadata.status == "401":
            raise EdinetApiError(
                f"Authentication failed for {date}: {listing.metadata.message}",
                status_code=401
            )

        if not listing.is_ok():
            logger.warning(
                f"Document list for {date} returned status {listing.metadata.status}: "
                f"{listing.metadata.message}"
            )
            failures.append({
                'date': date,
                'doc_id': None,
                'filer_name': None,
                'error': listing.metadata.message,
                'error_type': f"status_{listing.metadata.status}"
            })
            stats['failed'] += 1
            return

        stats['dates'] += 1

        targets = [
            doc for doc in listing.results
            if doc.doc_type_code in doc_type_codes
        ]
        logger.info(
            f"{date}: {len(targets)} of {len(listing.results)} documents match "
            f"doc types {doc_type_codes}"
        )

        for doc in targets:
            stats['documents'] += 1
            self._process_document(doc, date, stats, failures)

    def _process_document(
        self,
        doc: DocumentInfo,
        date: str,
        stats: Dict[str, int],
        failures: List[Dict]
    ) -> None:
        try:
            zip_path = self._client.download_xbrl(doc.doc_id, self.base_dir)
        except Exception as e:
            logger.error(
                f"Download failed for {doc.doc_id} ({doc.filer_name}): {e}",
                exc_info=True
            )
            failures.append(self._failure_row(date, doc, e))
            stats['failed'] += 1
            return

        report = QuarterlyReport.from_document_info(doc, date, xbrl_zip_path=zip_path)

        if zip_path is None:
            self._store(report, None, None, date, doc, failures)
            stats['skipped'] += 1
            return

        income = balance = None
        try:
            result = self._extraction.extract_archive(Path(self.base_dir) / zip_path)
            income, balance = result.income_statement, result.balance_sheet
        except Exception as e:
            # Metadata is still stored; statements are omitted
            logger.error(
                f"Failed to extract {doc.doc_id} ({doc.filer_name}): {e}",
                exc_info=True
            )
            failures.append(self._failure_row(date, doc, e))
            stats['failed'] += 1
            self._store(report, None, None, date, doc, failures)
            return

        if self._store(report, income, balance, date, doc, failures):
            stats['extracted'] += 1
            logger.info(
                f"Stored {report}: {income.populated_count()} income, "
                f"{balance.populated_count()} balance facts"
            )
        else:
            stats['failed'] += 1

    def _store(
        self,
        report: QuarterlyReport,
        income: Optional[IncomeStatementFacts],
        balance: Optional[BalanceSheetFacts],
        date: str,
        doc: DocumentInfo,
        failures: List[Dict]
    ) -> bool:
        result = self._storage.save_report(report, income=income, balance=balance)
        if result['success']:
            return True

        logger.error(f"Failed to store {doc.doc_id}: {result.get('error')}")
        failures.append({
            'date': date,
            'doc_id': doc.doc_id,
            'filer_name': doc.filer_name,
            'error': result.get('error'),
            'error_type': 'storage'
        })
        return False

    @staticmethod
    def _failure_row(date: str, doc: Optional[DocumentInfo], error: Exception) -> Dict:
        return {
            'date': date,
            'doc_id': doc.doc_id if doc else None,
            'filer_name': doc.filer_name if doc else None,
            'error': str(error),
            'error_type': type(error).__name__
        }

    def _init_statistics(self) -> Dict[str, int]:
        return {
            'dates': 0,
            'documents': 0,
            'extracted': 0,
            'failed': 0,
            'skipped': 0
        }


def save_failures_csv(failures: List[Dict], base_dir: str, label: str):
    """
    Save failed attempts to {base_dir}/failures/failures_{label}.csv.

    Args:
        failures: List of failure dictionaries with document info and error
        base_dir: Base directory for saving CSV files
        label: Run label, e.g. '{start_date}_{end_date}' or 'backfill'
    """
    if not failures:
        return

    try:
        failures_dir = Path(base_dir) / "failures"
        failures_dir.mkdir(parents=True, exist_ok=True)

        df = pd.DataFrame(failures)

        csv_path = failures_dir / f"failures_{label}.csv"
        df.to_csv(csv_path, index=False, encoding='utf-8')

        logger.info(f"Saved {len(failures)} failure(s) to {csv_path}")
    except OSError as e:
        logger.error(f"Failed to save failures CSV for {label}: {e}", exc_info=True)

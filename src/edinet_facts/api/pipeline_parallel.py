"""
Parallel Pipeline for EDINET archives (Backfill Mode)

Re-extracts statement facts from archives already downloaded to
{base_dir}/xbrl/{doc_id}_xbrl.zip, without any API calls.
Uses ProcessPoolExecutor because XBRL parsing is CPU-bound.

Design:
- Workers only read, parse and resolve; they return plain dicts
- The parent process does every MongoDB write, one document at a time
- No shared state between processes (all aggregation via return values)

Usage:
    storage = StorageService()
    pipeline = BackfillPipelineParallel(storage_service=storage)

    stats = pipeline.backfill(max_workers=8)
"""

from concurrent.futures import ProcessPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from pymongo.errors import PyMongoError

from edinet_facts.api.pipeline import ExtractionPipeline, save_failures_csv
from edinet_facts.config import get_app_config
from edinet_facts.models import BalanceSheetFacts, IncomeStatementFacts, QuarterlyReport
from edinet_facts.services.storage_service import StorageService
from edinet_facts.validators import validate_doc_id

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = '_xbrl.zip'


def _extract_archive_worker(archive_info: Dict[str, str]) -> Dict[str, Any]:
    """
    Worker function for extracting a single archive in a child process.

    Args:
        archive_info: Dictionary with:
            - doc_id: EDINET document id
            - zip_path: Absolute or base_dir-joined archive path

    Returns:
        Result dictionary:
        {
            'success': bool,
            'doc_id': str,
            'income': dict (only if success=True),
            'balance': dict (only if success=True),
            'failure': dict (only if success=False)
        }
    """
    doc_id = archive_info['doc_id']
    try:
        result = ExtractionPipeline().extract_archive(archive_info['zip_path'])
        return {
            'success': True,
            'doc_id': doc_id,
            'income': result.income_statement.model_dump(),
            'balance': result.balance_sheet.model_dump()
        }

    except Exception as e:
        logger.error(f"Worker failed to extract {doc_id}: {e}", exc_info=True)
        return {
            'success': False,
            'doc_id': doc_id,
            'failure': {
                'doc_id': doc_id,
                'zip_path': archive_info['zip_path'],
                'error': str(e),
                'error_type': type(e).__name__
            }
        }


class BackfillPipelineParallel:
    """
    Parallel re-extraction of downloaded archives.

    Example:
        storage = StorageService()
        pipeline = BackfillPipelineParallel(storage_service=storage)

        stats = pipeline.backfill(max_workers=8, skip_existing=True)
        print(f"{stats['extracted']} extracted, {stats['failed']} failed")
    """

    def __init__(self, storage_service: StorageService, base_dir: Optional[str] = None):
        """
        Args:
            storage_service: Pre-initialized StorageService with verified connection
            base_dir: Directory holding xbrl/ (default: config.base_dir)
        """
        self._storage = storage_service
        self.base_dir = base_dir or get_app_config().base_dir

    def scan_archives(self) -> List[Dict[str, str]]:
        """
        Find downloaded archives under {base_dir}/xbrl/.

        Returns:
            List of {'doc_id', 'zip_path'} sorted by doc_id; files whose
            name is not a valid document id are skipped
        """
        xbrl_dir = Path(self.base_dir) / 'xbrl'
        if not xbrl_dir.exists():
            return []

        archives = []
        for path in sorted(xbrl_dir.glob(f'*{ARCHIVE_SUFFIX}')):
            doc_id = path.name[:-len(ARCHIVE_SUFFIX)]
            try:
                validate_doc_id(doc_id)
            except ValueError:
                logger.warning(f"Skipping {path.name}: not an EDINET document id")
                continue
            archives.append({
                'doc_id': doc_id,
                'zip_path': str(path)
            })
        return archives

    def backfill(self, max_workers: int = 8, skip_existing: bool = True) -> Dict[str, int]:
        """
        Extract every downloaded archive in parallel and store the results.

        Args:
            max_workers: Number of parallel worker processes (default: 8)
            skip_existing: Skip doc_ids that already have statements stored

        Returns:
            Statistics dictionary:
            {
                'archives': int,   # Archives found on disk
                'extracted': int,  # Documents extracted and stored
                'failed': int,     # Extraction or storage failures
                'skipped': int     # Already stored, not re-extracted
            }
        """
        archives = self.scan_archives()
        stats = {'archives': len(archives), 'extracted': 0, 'failed': 0, 'skipped': 0}

        if skip_existing and archives:
            existing = set(self._storage.list_doc_ids(with_statements=True))
            pending = [a for a in archives if a['doc_id'] not in existing]
            stats['skipped'] = len(archives) - len(pending)
            archives = pending

        logger.info(
            f"Starting parallel backfill: {len(archives)} archives to process "
            f"({stats['skipped']} skipped), {max_workers} workers"
        )

        if not archives:
            logger.info("No new archives to process")
            return stats

        failures: List[Dict] = []
        archive_by_id = {a['doc_id']: a for a in archives}

        try:
            with ProcessPoolExecutor(max_workers=max_workers) as executor:
                futures = [
                    executor.submit(_extract_archive_worker, archive_info)
                    for archive_info in archives
                ]

                processed = 0
                for future in as_completed(futures):
                    result = future.result()

                    if result['success']:
                        if self._store_result(result, archive_by_id[result['doc_id']], failures):
                            stats['extracted'] += 1
                        else:
                            stats['failed'] += 1
                    else:
                        failures.append(result['failure'])
                        stats['failed'] += 1

                    processed += 1
                    if processed % 10 == 0 or not result['success']:
                        logger.info(
                            f"Progress: {processed}/{len(archives)} "
                            f"({stats['extracted']} success, {stats['failed']} failed)"
                        )
        finally:
            save_failures_csv(failures, self.base_dir, 'backfill')

        logger.info(
            f"Parallel backfill complete: {stats['extracted']} extracted, "
            f"{stats['skipped']} skipped, {stats['failed']} failures"
        )

        return stats

    def _store_result(
        self,
        result: Dict[str, Any],
        archive_info: Dict[str, str],
        failures: List[Dict]
    ) -> bool:
        doc_id = result['doc_id']
        try:
            report = self._report_for(doc_id, archive_info['zip_path'])
        except PyMongoError as e:
            saved = {'success': False, 'error': f"MongoDB error: {e}"}
        else:
            saved = self._storage.save_report(
                report,
                income=IncomeStatementFacts(**result['income']),
                balance=BalanceSheetFacts(**result['balance'])
            )
        if saved['success']:
            return True

        logger.error(f"Failed to store {doc_id}: {saved.get('error')}")
        failures.append({
            'doc_id': doc_id,
            'zip_path': archive_info['zip_path'],
            'error': saved.get('error'),
            'error_type': 'storage'
        })
        return False

    def _report_for(self, doc_id: str, zip_path: str) -> QuarterlyReport:
        """Reuse the stored metadata row; otherwise date it by the archive's mtime."""
        relative_path = f"xbrl/{doc_id}{ARCHIVE_SUFFIX}"
        stored = self._storage.get_report(doc_id)
        if stored:
            return QuarterlyReport(**{**stored, 'xbrl_zip_path': relative_path})

        mtime = datetime.fromtimestamp(Path(zip_path).stat().st_mtime)
        return QuarterlyReport(
            doc_id=doc_id,
            date=mtime.strftime('%Y-%m-%d'),
            doc_type_code='',
            xbrl_zip_path=relative_path
        )

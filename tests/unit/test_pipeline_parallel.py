"""
Unit tests for BackfillPipelineParallel (parallel processing).

ProcessPoolExecutor is swapped for ThreadPoolExecutor so workers run
in-process; the worker function itself is tested directly.
"""

import os
import pytest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock, patch

import pandas as pd
from pymongo.errors import PyMongoError

from edinet_facts.api.pipeline_parallel import (
    BackfillPipelineParallel,
    _extract_archive_worker,
)
from edinet_facts.services.storage_service import StorageService
from conftest import SAMPLE_XBRL, write_xbrl_zip


@pytest.fixture
def mock_storage():
    """Create mock StorageService."""
    storage = Mock(spec=StorageService)
    storage.list_doc_ids.return_value = []
    storage.get_report.return_value = None
    storage.save_report.return_value = {'success': True}
    return storage


@pytest.fixture
def base_dir(tmp_path):
    write_xbrl_zip(tmp_path / 'xbrl' / 'S1005ABC_xbrl.zip', SAMPLE_XBRL)
    write_xbrl_zip(tmp_path / 'xbrl' / 'S1005ABD_xbrl.zip', SAMPLE_XBRL)
    write_xbrl_zip(tmp_path / 'xbrl' / 'S1005ABE_xbrl.zip', '<a><b>')
    return tmp_path


@pytest.fixture
def pipeline(mock_storage, base_dir):
    return BackfillPipelineParallel(storage_service=mock_storage, base_dir=str(base_dir))


@pytest.mark.unit
class TestWorkerFunction:
    """Tests for _extract_archive_worker()."""

    def test_worker_success(self, base_dir):
        result = _extract_archive_worker({
            'doc_id': 'S1005ABC',
            'zip_path': str(base_dir / 'xbrl' / 'S1005ABC_xbrl.zip'),
        })

        assert result['success'] is True
        assert result['doc_id'] == 'S1005ABC'
        assert result['income']['net_sales'] == 1000.0
        assert result['balance']['assets']['total_assets'] == 5000.0

    def test_worker_parse_failure(self, base_dir):
        result = _extract_archive_worker({
            'doc_id': 'S1005ABE',
            'zip_path': str(base_dir / 'xbrl' / 'S1005ABE_xbrl.zip'),
        })

        assert result['success'] is False
        assert result['failure']['doc_id'] == 'S1005ABE'
        assert result['failure']['error_type'] == 'StructuralError'

    def test_worker_missing_archive(self, tmp_path):
        result = _extract_archive_worker({
            'doc_id': 'S1005ABC',
            'zip_path': str(tmp_path / 'missing.zip'),
        })

        assert result['success'] is False
        assert result['failure']['error_type'] == 'FileNotFoundError'

    def test_worker_does_not_touch_storage(self, base_dir):
        with patch('edinet_facts.services.storage_service.MongoClient') as mock_client:
            _extract_archive_worker({
                'doc_id': 'S1005ABC',
                'zip_path': str(base_dir / 'xbrl' / 'S1005ABC_xbrl.zip'),
            })

        mock_client.assert_not_called()


@pytest.mark.unit
class TestScanArchives:

    def test_scan_sorted(self, pipeline, base_dir):
        archives = pipeline.scan_archives()

        assert [a['doc_id'] for a in archives] == ['S1005ABC', 'S1005ABD', 'S1005ABE']
        assert archives[0]['zip_path'] == str(base_dir / 'xbrl' / 'S1005ABC_xbrl.zip')

    def test_scan_skips_invalid_names(self, pipeline, base_dir):
        (base_dir / 'xbrl' / 'notes_xbrl.zip').write_bytes(b'')
        (base_dir / 'xbrl' / 'S1005ABF.zip').write_bytes(b'')

        assert len(pipeline.scan_archives()) == 3

    def test_scan_missing_directory(self, mock_storage, tmp_path):
        pipeline = BackfillPipelineParallel(storage_service=mock_storage, base_dir=str(tmp_path))

        assert pipeline.scan_archives() == []


@pytest.mark.unit
@patch('edinet_facts.api.pipeline_parallel.ProcessPoolExecutor', ThreadPoolExecutor)
class TestBackfill:
    """Aggregation and parent-side storage."""

    def test_backfill_stats(self, pipeline, mock_storage, base_dir):
        stats = pipeline.backfill(max_workers=2)

        assert stats == {'archives': 3, 'extracted': 2, 'failed': 1, 'skipped': 0}
        assert mock_storage.save_report.call_count == 2
        assert (base_dir / 'failures' / 'failures_backfill.csv').exists()

    def test_parent_stores_results(self, pipeline, mock_storage):
        pipeline.backfill(max_workers=2)

        saved = {
            args[0].doc_id: kwargs
            for args, kwargs in mock_storage.save_report.call_args_list
        }
        assert set(saved) == {'S1005ABC', 'S1005ABD'}
        assert saved['S1005ABC']['income'].net_sales == 1000.0
        assert saved['S1005ABC']['balance'].equity.total_equity == 2000.0

    def test_skip_existing(self, pipeline, mock_storage):
        mock_storage.list_doc_ids.return_value = ['S1005ABC', 'S1005ABE']

        stats = pipeline.backfill(max_workers=2)

        assert stats == {'archives': 3, 'extracted': 1, 'failed': 0, 'skipped': 2}
        mock_storage.list_doc_ids.assert_called_once_with(with_statements=True)

    def test_force_reprocess(self, pipeline, mock_storage):
        mock_storage.list_doc_ids.return_value = ['S1005ABC', 'S1005ABD', 'S1005ABE']

        stats = pipeline.backfill(max_workers=2, skip_existing=False)

        assert stats['skipped'] == 0
        assert stats['extracted'] == 2
        mock_storage.list_doc_ids.assert_not_called()

    def test_nothing_to_do(self, mock_storage, tmp_path):
        pipeline = BackfillPipelineParallel(storage_service=mock_storage, base_dir=str(tmp_path))

        stats = pipeline.backfill()

        assert stats == {'archives': 0, 'extracted': 0, 'failed': 0, 'skipped': 0}
        mock_storage.save_report.assert_not_called()

    def test_reuses_stored_metadata(self, pipeline, mock_storage):
        mock_storage.get_report.return_value = {
            'doc_id': 'S1005ABC',
            'date': '2015-04-01',
            'sec_code': '12340',
            'doc_type_code': '140',
            'submit_date_time': None,
            'edinet_code': 'E01234',
            'filer_name': 'サンプル株式会社',
            'xbrl_zip_path': None,
        }

        pipeline.backfill(max_workers=1)

        reports = [args[0] for args, _ in mock_storage.save_report.call_args_list]
        stored = next(r for r in reports if r.doc_id == 'S1005ABC')
        assert stored.doc_type_code == '140'
        assert stored.filer_name == 'サンプル株式会社'
        assert stored.xbrl_zip_path == 'xbrl/S1005ABC_xbrl.zip'

    def test_new_metadata_dated_by_archive_mtime(self, pipeline, mock_storage, base_dir):
        # 2015-04-01 12:00 local time
        from datetime import datetime
        timestamp = datetime(2015, 4, 1, 12, 0).timestamp()
        for name in ('S1005ABC', 'S1005ABD'):
            os.utime(base_dir / 'xbrl' / f'{name}_xbrl.zip', (timestamp, timestamp))

        pipeline.backfill(max_workers=1)

        reports = [args[0] for args, _ in mock_storage.save_report.call_args_list]
        assert {r.date for r in reports} == {'2015-04-01'}
        assert {r.doc_type_code for r in reports} == {''}

    def test_storage_failure_counted(self, pipeline, mock_storage):
        mock_storage.save_report.return_value = {'success': False, 'error': 'MongoDB error: down'}

        stats = pipeline.backfill(max_workers=2)

        assert stats['extracted'] == 0
        assert stats['failed'] == 3

    def test_metadata_lookup_error_recorded_per_document(self, pipeline, mock_storage, base_dir):
        mock_storage.get_report.side_effect = PyMongoError('server selection timeout')

        stats = pipeline.backfill(max_workers=2)

        assert stats == {'archives': 3, 'extracted': 0, 'failed': 3, 'skipped': 0}
        mock_storage.save_report.assert_not_called()

        failures = pd.read_csv(base_dir / 'failures' / 'failures_backfill.csv')
        storage_rows = failures[failures['error_type'] == 'storage']
        assert sorted(storage_rows['doc_id']) == ['S1005ABC', 'S1005ABD']
        assert all('server selection timeout' in error for error in storage_rows['error'])

    def test_failures_saved_when_aborted(self, pipeline, mock_storage, base_dir):
        mock_storage.save_report.side_effect = [
            {'success': False, 'error': 'MongoDB error: down'},
            RuntimeError('unexpected'),
        ]

        with pytest.raises(RuntimeError):
            pipeline.backfill(max_workers=1)

        failures = pd.read_csv(base_dir / 'failures' / 'failures_backfill.csv')
        assert 'storage' in set(failures['error_type'])

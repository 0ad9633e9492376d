"""
Smoke Tests - Quick sanity checks with live API

These tests make REAL API calls to verify basic functionality.
Run them manually to ensure the system works end-to-end.

Usage:
    # Run smoke tests explicitly
    pytest -m smoke -v

    # Skip smoke tests (default)
    pytest tests/

Requirements:
- Valid EDINET_API_KEY in .env file
- Active internet connection
"""

import os

import pytest
from dotenv import load_dotenv

from edinet_facts.api import ExtractionPipeline
from edinet_facts.services.edinet_client import EdinetClient


# Mark all tests in this file as smoke tests (disabled by default)
pytestmark = pytest.mark.smoke

# A weekday in the first quarterly-report season with XBRL on EDINET API v2
LISTING_DATE = '2015-05-15'


@pytest.fixture(scope="module")
def client():
    """EDINET client built from the real API key."""
    load_dotenv()
    api_key = os.getenv("EDINET_API_KEY")

    if not api_key:
        pytest.skip("EDINET_API_KEY not found in .env file")

    with EdinetClient(api_key=api_key) as edinet:
        yield edinet


class TestEdinetSmoke:

    def test_document_list(self, client):
        listing = client.get_document_list(LISTING_DATE)

        assert listing.is_ok(), listing.metadata.message
        assert listing.results

    def test_download_and_extract_quarterly_report(self, client, tmp_path):
        listing = client.get_document_list(LISTING_DATE)
        quarterly = [d for d in listing.results if d.doc_type_code == '140']
        if not quarterly:
            pytest.skip(f"No quarterly reports listed on {LISTING_DATE}")

        relative = client.download_xbrl(quarterly[0].doc_id, tmp_path)
        assert relative == f"xbrl/{quarterly[0].doc_id}_xbrl.zip"

        result = ExtractionPipeline().extract_archive(tmp_path / relative)

        assert result.document.count_elements() > 0
        assert 'CurrentYTDDuration' in result.document.contexts

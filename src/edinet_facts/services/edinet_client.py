"""
EDINET API Client

Document source for the collection pipeline:
- Document list per listing date (documents.json, type=2)
- XBRL archive download per document (documents/{docID}, type=1)

Archives are stored as {base_dir}/xbrl/{doc_id}_xbrl.zip.
"""

from pathlib import Path
from typing import Optional, Union
import logging

import requests

from edinet_facts.config import get_app_config
from edinet_facts.models.report import DocumentListResponse

logger = logging.getLogger(__name__)


class EdinetApiError(Exception):
    """Document list request failed (transport error or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_auth_error(self) -> bool:
        return self.status_code in (401, 403)


class EdinetClient:
    """
    HTTP client for the EDINET API v2.

    Usage:
        >>> with EdinetClient() as client:
        ...     listing = client.get_document_list('2015-04-01')
        ...     path = client.download_xbrl(listing.results[0].doc_id, 'edinet_documents')

    Environment Variables (via config facade):
        - EDINET_API_KEY: Subscription key (required unless passed explicitly)
        - EDINET_API_BASE_URL: API base URL
        - REQUEST_TIMEOUT_SEC: HTTP timeout
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize client.

        Args:
            api_key: Subscription key (overrides EDINET_API_KEY)
            base_url: API base URL (overrides config)
            timeout: Request timeout in seconds (overrides config)
            session: Pre-configured requests session (for tests or pooling)

        Raises:
            ValueError: If no API key is configured
        """
        config = get_app_config()

        self.api_key = api_key or config.edinet_api_key
        if not self.api_key:
            raise ValueError(
                "EDINET API key not configured. "
                "Set EDINET_API_KEY in .env or pass api_key explicitly."
            )

        self.base_url = (base_url or config.edinet_api_base_url).rstrip('/')
        self.timeout = timeout or config.request_timeout_sec
        self.session = session or requests.Session()

    def get_document_list(self, date: str) -> DocumentListResponse:
        """
        Fetch the list of documents submitted on a date.

        Args:
            date: Listing date in YYYY-MM-DD format

        Returns:
            Parsed DocumentListResponse (check .is_ok() for the API status)

        Raises:
            EdinetApiError: On transport failure or non-2xx HTTP status
        """
        url = f"{self.base_url}/documents.json"
        params = {'date': date, 'type': 2, 'Subscription-Key': self.api_key}

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise EdinetApiError(f"Document list request failed for {date}: {e}") from e

        if not response.ok:
            raise EdinetApiError(
                f"Failed to fetch document list for {date}: HTTP {response.status_code}",
                status_code=response.status_code
            )

        listing = DocumentListResponse.model_validate(response.json())
        logger.debug(
            f"Document list for {date}: status={listing.metadata.status}, "
            f"{len(listing.results)} documents"
        )
        return listing

    def download_xbrl(self, doc_id: str, base_dir: Union[str, Path]) -> Optional[str]:
        """
        Download the XBRL archive of a document.

        Args:
            doc_id: EDINET document id
            base_dir: Base directory; archive goes to {base_dir}/xbrl/

        Returns:
            Archive path relative to base_dir ('xbrl/{doc_id}_xbrl.zip'),
            or None if EDINET did not return an archive

        Raises:
            requests.RequestException: On transport failure
        """
        url = f"{self.base_url}/documents/{doc_id}"
        params = {'type': 1, 'Subscription-Key': self.api_key}

        response = self.session.get(url, params=params, timeout=self.timeout)
        if not response.ok:
            logger.warning(f"No XBRL archive for {doc_id}: HTTP {response.status_code}")
            return None

        # EDINET reports missing documents as a JSON body with HTTP 200
        content_type = response.headers.get('Content-Type', '')
        if 'application/json' in content_type:
            logger.warning(f"No XBRL archive for {doc_id}: {response.text[:200]}")
            return None

        doc_dir = Path(base_dir) / 'xbrl'
        doc_dir.mkdir(parents=True, exist_ok=True)

        filename = f"{doc_id}_xbrl.zip"
        (doc_dir / filename).write_bytes(response.content)

        logger.debug(
            f"Downloaded {doc_id}: {len(response.content) / (1024 * 1024):.2f} MB"
        )
        return f"xbrl/{filename}"

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

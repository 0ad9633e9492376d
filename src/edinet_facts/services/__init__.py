"""Service layer: EDINET API access, archive reading and MongoDB storage."""

from edinet_facts.services.edinet_client import EdinetClient, EdinetApiError
from edinet_facts.services.archive_reader import (
    ArchiveError,
    read_xbrl_from_zip,
    list_xbrl_members,
)
from edinet_facts.services.storage_service import StorageService

__all__ = [
    'EdinetClient',
    'EdinetApiError',
    'ArchiveError',
    'read_xbrl_from_zip',
    'list_xbrl_members',
    'StorageService',
]

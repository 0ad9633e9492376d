"""
Unit tests for reading XBRL documents out of EDINET archives.
"""

import zipfile

import pytest

from edinet_facts.services.archive_reader import (
    ArchiveError,
    list_xbrl_members,
    read_xbrl_from_zip,
)
from conftest import SAMPLE_XBRL, XBRL_MEMBER


class TestReadXbrlFromZip:

    def test_reads_first_xbrl_member(self, sample_zip):
        assert read_xbrl_from_zip(sample_zip) == SAMPLE_XBRL

    def test_accepts_str_path(self, sample_zip):
        assert read_xbrl_from_zip(str(sample_zip)) == SAMPLE_XBRL

    def test_missing_archive(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_xbrl_from_zip(tmp_path / 'missing.zip')

    def test_archive_without_xbrl(self, tmp_path):
        path = tmp_path / 'empty.zip'
        with zipfile.ZipFile(path, 'w') as zf:
            zf.writestr('XBRL/PublicDoc/manifest_PublicDoc.xml', '<manifest/>')

        with pytest.raises(ArchiveError, match='No .xbrl file'):
            read_xbrl_from_zip(path)

    def test_not_a_zip(self, tmp_path):
        path = tmp_path / 'error.zip'
        path.write_text('{"metadata": {"status": "404"}}')

        with pytest.raises(ArchiveError, match='Not a ZIP'):
            read_xbrl_from_zip(path)

    def test_non_utf8_member(self, tmp_path):
        path = tmp_path / 'sjis.zip'
        with zipfile.ZipFile(path, 'w') as zf:
            zf.writestr('doc.xbrl', '<a>売上高</a>'.encode('shift_jis'))

        with pytest.raises(ArchiveError, match='not UTF-8'):
            read_xbrl_from_zip(path)


class TestListXbrlMembers:

    def test_lists_in_archive_order(self, sample_zip):
        assert list_xbrl_members(sample_zip) == [
            XBRL_MEMBER,
            'XBRL/AuditDoc/jpaud-qrr-cc-001.xbrl',
        ]

"""
Archive reader: pull the XBRL instance document out of an EDINET ZIP.
"""

import zipfile
from pathlib import Path
from typing import List, Union


class ArchiveError(Exception):
    """Archive is unreadable or holds no XBRL instance document."""


def list_xbrl_members(zip_path: Union[str, Path]) -> List[str]:
    """Names of all .xbrl members, in archive order."""
    with zipfile.ZipFile(zip_path, 'r') as zip_ref:
        return [name for name in zip_ref.namelist() if name.endswith('.xbrl')]


def read_xbrl_from_zip(zip_path: Union[str, Path]) -> str:
    """
    Read the first .xbrl member of an archive as UTF-8 text.

    Args:
        zip_path: Path to the downloaded archive

    Returns:
        Markup of the XBRL instance document

    Raises:
        FileNotFoundError: If the archive does not exist
        ArchiveError: If the file is not a ZIP or contains no .xbrl member

    Example:
        >>> text = read_xbrl_from_zip('edinet_documents/xbrl/S1005ABC_xbrl.zip')
        >>> text.startswith('<?xml')
        True
    """
    zip_path = Path(zip_path)
    if not zip_path.exists():
        raise FileNotFoundError(f"Archive not found: {zip_path}")

    try:
        with zipfile.ZipFile(zip_path, 'r') as zip_ref:
            for name in zip_ref.namelist():
                if name.endswith('.xbrl'):
                    return zip_ref.read(name).decode('utf-8')
            contents = zip_ref.namelist()
    except zipfile.BadZipFile as e:
        raise ArchiveError(f"Not a ZIP archive: {zip_path}") from e
    except UnicodeDecodeError as e:
        raise ArchiveError(f"XBRL document in {zip_path} is not UTF-8") from e

    raise ArchiveError(
        f"No .xbrl file found in {zip_path}. Contents: {contents[:20]}"
    )

"""
Reusable field validators for Pydantic models.

These validators can be used with Pydantic @field_validator decorator
for automatic input validation of collection requests.
"""

from datetime import date as _date
from typing import List


def validate_date_iso(date: str) -> str:
    """
    Validate date string in YYYY-MM-DD format (the EDINET API date format).

    Args:
        date: Date string to validate (e.g., '2015-04-01')

    Returns:
        The validated date string (unchanged if valid)

    Raises:
        ValueError: If date is not a real calendar date in YYYY-MM-DD format,
                   or year is outside 2008-2100

    Example:
        >>> validate_date_iso('2015-04-01')
        '2015-04-01'
        >>> validate_date_iso('20150401')  # Raises ValueError (no dashes)
    """
    if not date or len(date) != 10 or date[4] != '-' or date[7] != '-':
        raise ValueError(
            f"Date must be YYYY-MM-DD format, got: '{date}'\n"
            f"Example: '2015-04-01'"
        )

    try:
        parsed = _date.fromisoformat(date)
    except ValueError as e:
        raise ValueError(f"Invalid calendar date: '{date}'") from e

    # EDINET XBRL filings start in 2008
    if parsed.year < 2008 or parsed.year > 2100:
        raise ValueError(
            f"Year {parsed.year} is out of valid range (2008-2100)"
        )

    return date


def validate_doc_id(doc_id: str) -> str:
    """
    Validate EDINET document id format.

    EDINET document ids are 8-character alphanumeric strings starting
    with 'S' (e.g., 'S1005ABC').

    Raises:
        ValueError: If doc_id does not match the format
    """
    if not doc_id or len(doc_id) != 8 or not doc_id.isalnum() or not doc_id.startswith('S'):
        raise ValueError(
            f"Document id must be 8 alphanumeric characters starting with 'S', got: '{doc_id}'\n"
            f"Example: 'S1005ABC'"
        )
    return doc_id


def validate_doc_type_codes(codes: List[str]) -> List[str]:
    """
    Validate EDINET document type codes (3 digits, e.g., '140').

    Raises:
        ValueError: If any code is not a 3-digit string, listing the invalid codes
    """
    invalid = [c for c in codes if not (isinstance(c, str) and c.isdigit() and len(c) == 3)]
    if invalid:
        raise ValueError(
            f"Invalid document type codes: {invalid}\n"
            f"Codes are 3 digits, e.g., '140' (quarterly) or '150' (semi-annual)."
        )
    return codes

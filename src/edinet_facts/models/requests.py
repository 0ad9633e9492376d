"""
Request models for pipeline operations.

These Pydantic models provide type-safe, validated interfaces for
date-range collection runs.
"""

from datetime import date, timedelta
from typing import Iterator, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from edinet_facts.validators import validate_date_iso, validate_doc_type_codes


class CollectionRequest(BaseModel):
    """
    Request model for collecting EDINET reports over a date range.

    The range is half-open: start_date is included, end_date is not.

    Attributes:
        start_date: First listing date in YYYY-MM-DD format
        end_date: Exclusive end date in YYYY-MM-DD format
        doc_type_codes: Document type codes to keep (e.g., ['140', '150'])

    Example:
        >>> request = CollectionRequest(
        ...     start_date='2015-04-01',
        ...     end_date='2015-04-06',
        ...     doc_type_codes=['140', '150']
        ... )
        >>> list(request.iter_dates())[0]
        '2015-04-01'

    Raises:
        ValidationError: If any field fails validation or end_date < start_date
    """

    start_date: str = Field(
        ...,
        description="First listing date (inclusive) in YYYY-MM-DD format",
        examples=["2015-04-01"]
    )

    end_date: str = Field(
        ...,
        description="Last listing date (exclusive) in YYYY-MM-DD format",
        examples=["2015-04-06"]
    )

    doc_type_codes: List[str] = Field(
        ...,
        min_length=1,
        description="EDINET document type codes to collect",
        examples=[["140", "150"]]
    )

    _validate_start_date = field_validator('start_date')(validate_date_iso)
    _validate_end_date = field_validator('end_date')(validate_date_iso)
    _validate_doc_type_codes = field_validator('doc_type_codes')(validate_doc_type_codes)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def check_range(self) -> 'CollectionRequest':
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date {self.end_date} is before start_date {self.start_date}"
            )
        return self

    def iter_dates(self) -> Iterator[str]:
        """Yield each date in [start_date, end_date) as YYYY-MM-DD."""
        current = date.fromisoformat(self.start_date)
        end = date.fromisoformat(self.end_date)
        while current < end:
            yield current.isoformat()
            current += timedelta(days=1)

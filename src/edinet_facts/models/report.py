"""
Pydantic models for EDINET document metadata.

- DocumentListResponse and friends mirror the EDINET API v2 documents.json
  payload (camelCase aliases)
- QuarterlyReport is the stored metadata row for one collected document
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResultSet(BaseModel):
    count: int


class DocumentListMetadata(BaseModel):
    """
    Metadata block of a documents.json response.

    Error responses carry only title, status and message.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = ''
    status: str
    message: str = ''
    process_date: Optional[str] = Field(default=None, alias='processDateTime')
    result_set: Optional[ResultSet] = Field(default=None, alias='resultset')


class DocumentInfo(BaseModel):
    """
    One entry of a documents.json result list.

    Only the fields used by the collection pipeline are declared; the API
    returns many more, which are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    seq_number: int = Field(..., alias='seqNumber')
    doc_id: str = Field(..., alias='docID')
    edinet_code: Optional[str] = Field(default=None, alias='edinetCode')
    sec_code: Optional[str] = Field(default=None, alias='secCode')
    doc_type_code: Optional[str] = Field(default=None, alias='docTypeCode')
    submit_date_time: Optional[str] = Field(default=None, alias='submitDateTime')
    filer_name: Optional[str] = Field(default=None, alias='filerName')


class DocumentListResponse(BaseModel):
    """
    EDINET documents.json response (type=2).

    Example:
        >>> resp = DocumentListResponse.model_validate(api_json)
        >>> resp.is_ok()
        True
        >>> [d.doc_id for d in resp.results][:2]
        ['S1005ABC', 'S1005ABD']
    """

    metadata: DocumentListMetadata
    results: List[DocumentInfo] = Field(default_factory=list)

    def is_ok(self) -> bool:
        return self.metadata.status == "200"


class QuarterlyReport(BaseModel):
    """
    Stored metadata row for one collected document.

    Attributes:
        doc_id: EDINET document id (primary key, e.g., 'S1005ABC')
        date: Listing date the document was found on (YYYY-MM-DD)
        sec_code: Securities code
        doc_type_code: EDINET document type code (e.g., '140')
        submit_date_time: Submission timestamp as reported by EDINET
        edinet_code: Filer EDINET code
        filer_name: Filer name
        xbrl_zip_path: Archive path relative to base_dir, if downloaded
    """

    doc_id: str = Field(..., min_length=1, examples=["S1005ABC"])
    date: str = Field(..., pattern=r'^\d{4}-\d{2}-\d{2}$', examples=["2015-04-01"])
    sec_code: Optional[str] = None
    doc_type_code: str = Field(..., examples=["140"])
    submit_date_time: Optional[str] = None
    edinet_code: Optional[str] = None
    filer_name: Optional[str] = None
    xbrl_zip_path: Optional[str] = None

    @classmethod
    def from_document_info(
        cls,
        doc: DocumentInfo,
        date: str,
        xbrl_zip_path: Optional[str] = None
    ) -> 'QuarterlyReport':
        """Build the metadata row from a documents.json entry."""
        return cls(
            doc_id=doc.doc_id,
            date=date,
            sec_code=doc.sec_code,
            doc_type_code=doc.doc_type_code or '',
            submit_date_time=doc.submit_date_time,
            edinet_code=doc.edinet_code,
            filer_name=doc.filer_name,
            xbrl_zip_path=xbrl_zip_path,
        )

    def to_mongo_dict(self) -> Dict[str, Any]:
        return self.model_dump()

    def __str__(self) -> str:
        return f"{self.doc_id} ({self.filer_name or 'Unknown'}) - {self.date} type {self.doc_type_code}"

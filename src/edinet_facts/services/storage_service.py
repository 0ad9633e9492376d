"""
MongoDB storage service for collected EDINET reports.

One document per report in each collection, keyed by doc_id:
- quarterly_reports: report metadata (QuarterlyReport)
- income_statements: IncomeStatementFacts, flattened
- balance_sheets: BalanceSheetFacts, flattened

All writes are ReplaceOne upserts, so re-collecting a report updates it
in place instead of duplicating it.
"""

from typing import List, Dict, Optional, Any
from pymongo import MongoClient, ASCENDING, ReplaceOne
from pymongo.errors import PyMongoError

from edinet_facts.models import (
    QuarterlyReport,
    IncomeStatementFacts,
    BalanceSheetFacts,
)
from edinet_facts.config import get_app_config

REPORTS_COLLECTION = 'quarterly_reports'
INCOME_COLLECTION = 'income_statements'
BALANCE_COLLECTION = 'balance_sheets'


class StorageService:
    """
    MongoDB storage service for report metadata and statement facts.

    Usage:
        >>> service = StorageService()
        >>> result = service.save_report(report, income=income, balance=balance)
        >>> service.get_income_statement('S1005ABC')['net_sales']
        1000.0
        >>> service.close()

    Context Manager:
        >>> with StorageService() as service:
        ...     service.save_report(report)

    Environment Variables (via config facade):
        - MONGO_HOST: MongoDB host (default: localhost:27017)
        - DB_NAME: Database name (default: EDINET)
    """

    def __init__(
        self,
        mongo_uri: Optional[str] = None,
        database: Optional[str] = None
    ):
        """
        Initialize StorageService with MongoDB connection.

        Args:
            mongo_uri: MongoDB connection string (overrides config if provided)
            database: Database name (overrides config if provided)

        Raises:
            ConnectionFailure: If MongoDB connection fails
        """
        config = get_app_config()

        self.mongo_uri = mongo_uri or config.mongodb_uri
        self.database_name = database or config.db_name

        self.client = MongoClient(
            self.mongo_uri,
            serverSelectionTimeoutMS=5000
        )

        # Fail at construction rather than on first write
        self.client.admin.command('ping')

        self.db = self.client[self.database_name]
        self.reports = self.db[REPORTS_COLLECTION]
        self.income_statements = self.db[INCOME_COLLECTION]
        self.balance_sheets = self.db[BALANCE_COLLECTION]

    def save_report(
        self,
        report: QuarterlyReport,
        income: Optional[IncomeStatementFacts] = None,
        balance: Optional[BalanceSheetFacts] = None
    ) -> Dict[str, Any]:
        """
        Upsert a report's metadata and whichever statements are present.

        Writes go out one collection at a time, metadata first; a statement
        is only written after its report row.

        Args:
            report: Report metadata row
            income: Income statement facts (skipped if None)
            balance: Balance sheet facts (skipped if None)

        Returns:
            Dictionary with:
                - success (bool): True if all writes succeeded
                - doc_id (str): Report document id
                - written (List[str]): Collections written
                - error (str): Error message if failed (optional)

        Example:
            >>> service.save_report(report, income=income)
            {'success': True, 'doc_id': 'S1005ABC', 'written': ['quarterly_reports', 'income_statements']}
        """
        doc_id = report.doc_id
        writes = [(self.reports, report.to_mongo_dict())]
        if income is not None:
            writes.append((self.income_statements, income.to_mongo_dict(doc_id)))
        if balance is not None:
            writes.append((self.balance_sheets, balance.to_mongo_dict(doc_id)))

        written: List[str] = []
        try:
            for collection, document in writes:
                collection.bulk_write([
                    ReplaceOne({'doc_id': doc_id}, document, upsert=True)
                ])
                written.append(collection.name)
        except PyMongoError as e:
            return {
                'success': False,
                'doc_id': doc_id,
                'written': written,
                'error': f"MongoDB error: {str(e)}"
            }

        return {
            'success': True,
            'doc_id': doc_id,
            'written': written
        }

    def get_report(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """Retrieve a report's metadata row, or None."""
        return self.reports.find_one({'doc_id': doc_id}, {'_id': 0})

    def get_income_statement(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """Retrieve a report's income statement facts, or None."""
        return self.income_statements.find_one({'doc_id': doc_id}, {'_id': 0})

    def get_balance_sheet(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """Retrieve a report's balance sheet facts, or None."""
        return self.balance_sheets.find_one({'doc_id': doc_id}, {'_id': 0})

    def list_doc_ids(self, with_statements: bool = False) -> List[str]:
        """
        List stored report ids.

        Args:
            with_statements: Only ids that also have an income statement row

        Returns:
            Sorted list of doc_ids

        Example:
            >>> service.list_doc_ids()
            ['S1005ABC', 'S1005ABD']
        """
        collection = self.income_statements if with_statements else self.reports
        return sorted(collection.distinct('doc_id'))

    def delete_report(self, doc_id: str) -> Dict[str, Any]:
        """
        Delete a report from all three collections.

        Returns:
            Dictionary with:
                - success (bool): True if deletion succeeded
                - deleted_count (int): Number of documents deleted
        """
        try:
            deleted = 0
            for collection in (self.income_statements, self.balance_sheets, self.reports):
                deleted += collection.delete_many({'doc_id': doc_id}).deleted_count

            return {
                'success': True,
                'deleted_count': deleted
            }

        except PyMongoError as e:
            return {
                'success': False,
                'deleted_count': 0,
                'error': f"MongoDB error: {str(e)}"
            }

    def create_indexes(self) -> None:
        """
        Create MongoDB indexes.

        Creates:
        - (doc_id) unique on every collection
        - (sec_code, date) on quarterly_reports for per-company time series

        Should be called once during initial setup or deployment.
        """
        for collection in (self.reports, self.income_statements, self.balance_sheets):
            collection.create_index(
                [('doc_id', ASCENDING)],
                unique=True,
                name='idx_doc_id'
            )

        self.reports.create_index(
            [('sec_code', ASCENDING), ('date', ASCENDING)],
            name='idx_sec_code_date'
        )

    def close(self) -> None:
        """Close MongoDB connection. Called automatically by the context manager."""
        if self.client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

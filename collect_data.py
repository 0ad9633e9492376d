"""
Batch Data Collection Script

Collects quarterly (140) and semi-annual (150) securities reports from
EDINET over a date range, extracts income statement and balance sheet
facts, and stores them in MongoDB.

Date range: [START_DATE, END_DATE), one document list request per date
Storage: quarterly_reports, income_statements, balance_sheets (keyed by doc_id)

Note: Re-running over the same range is safe; every write is an upsert.
"""

from edinet_facts.services.storage_service import StorageService
from edinet_facts.api import ReportCollectionPipeline
from edinet_facts.config import get_app_config
from datetime import datetime
import logging

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s'
)

START_DATE = "2015-04-01"
END_DATE = "2015-04-06"

print("=" * 80)
print("BATCH DATA COLLECTION: EDINET Quarterly Reports - Financial Facts")
print("=" * 80)

# === Step 1: Load Configuration ===
print("\n[Step 1] Loading configuration...")
config = get_app_config()
print(f"  ✓ Config loaded")
print(f"    - MongoDB: {config.mongodb_uri}")
print(f"    - Database: {config.db_name}")
print(f"    - Base directory: {config.base_dir}")
print(f"    - Document types: {config.doc_type_codes}")
print(f"    - API Key: {'***' + config.edinet_api_key[-4:] if config.edinet_api_key else 'NOT SET'}")

# === Step 2: Initialize MongoDB Connection ===
print("\n[Step 2] Connecting to MongoDB...")
storage = StorageService()
storage.create_indexes()
print(f"  ✓ Connected to MongoDB: {config.db_name}")

# === Step 3: Initialize Pipeline ===
print("\n[Step 3] Initializing ReportCollectionPipeline...")
pipeline = ReportCollectionPipeline(storage_service=storage)
print(f"  ✓ ReportCollectionPipeline ready")

# === Step 4: Execute Batch Collection ===
print("\n[Step 4] Starting batch data collection...")
print(f"  Dates: {START_DATE} to {END_DATE} (exclusive)")
print(f"  Pause between dates: {config.request_interval_sec}s")
print()
print("  Processing will continue even if individual documents fail.")
print()

start_time = datetime.now()

try:
    stats = pipeline.collect(START_DATE, END_DATE)
finally:
    storage.close()

elapsed = (datetime.now() - start_time).total_seconds()

# === Step 5: Display Results ===
print("\n" + "=" * 80)
print("BATCH COLLECTION COMPLETE")
print("=" * 80)
print()
print(f"⏱️  Total Time: {elapsed:.1f} seconds ({elapsed/60:.1f} minutes)")
print()
print("📊 Statistics:")
print(f"    📅 Dates fetched: {stats['dates']}")
print(f"    📄 Matching documents: {stats['documents']}")
print(f"    ✓ Extracted: {stats['extracted']}")
print(f"    ⏭️  Skipped (no archive): {stats['skipped']}")
print(f"    ✗ Failed: {stats['failed']}")
print()
if stats['failed']:
    print(f"📄 Failures written to {config.base_dir}/failures/")
print("=" * 80)

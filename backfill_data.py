"""
Backfill Script: Re-extract downloaded archives and store facts in MongoDB

Use this script when:
- MongoDB was offline during data collection
- Archives exist in edinet_documents/xbrl/ but have no statements stored
- You want to re-extract existing archives with updated mapping tables

This script will:
1. Scan all *_xbrl.zip archives under {BASE_DIR}/xbrl/
2. Skip doc_ids that already have statements (unless FORCE_REPARSE)
3. Extract in parallel worker processes
4. Store results from this process
"""

from edinet_facts.services.storage_service import StorageService
from edinet_facts.api import BackfillPipelineParallel
from edinet_facts.config import get_app_config
from datetime import datetime
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s'
)

MAX_WORKERS = 8
FORCE_REPARSE = False  # Set to True to re-extract already stored documents

if __name__ == '__main__':
    print("=" * 80)
    print("BACKFILL SCRIPT: Re-extract downloaded archives into MongoDB")
    print("=" * 80)

    # === Step 1: Load Configuration ===
    print("\n[Step 1] Loading configuration...")
    config = get_app_config()
    print(f"  ✓ Config loaded")
    print(f"    - MongoDB: {config.mongodb_uri}")
    print(f"    - Database: {config.db_name}")
    print(f"    - Base directory: {config.base_dir}")

    # === Step 2: Connect to MongoDB ===
    print("\n[Step 2] Connecting to MongoDB...")
    try:
        storage = StorageService()
        print(f"  ✓ Connected to MongoDB: {config.db_name}")
    except Exception as e:
        print(f"  ✗ Failed to connect to MongoDB!")
        print(f"    Error: {e}")
        print()
        print("  Please ensure MongoDB is running and MONGO_HOST in .env is correct.")
        sys.exit(1)

    # === Step 3: Run Backfill ===
    print("\n[Step 3] Starting backfill process...")
    print(f"  Workers: {MAX_WORKERS}")
    print(f"  Force re-extract: {FORCE_REPARSE}")
    print()

    start_time = datetime.now()

    pipeline = BackfillPipelineParallel(storage_service=storage)
    try:
        stats = pipeline.backfill(max_workers=MAX_WORKERS, skip_existing=not FORCE_REPARSE)
    finally:
        storage.close()

    elapsed = (datetime.now() - start_time).total_seconds()

    # === Step 4: Display Results ===
    print("\n" + "=" * 80)
    print("BACKFILL COMPLETE")
    print("=" * 80)
    print()
    print(f"⏱️  Total Time: {elapsed:.1f} seconds ({elapsed/60:.1f} minutes)")
    print()
    print("📊 Statistics:")
    print(f"    🔍 Archives found: {stats['archives']}")
    print(f"    ⏭️  Already stored: {stats['skipped']}")
    print(f"    ✓ Extracted: {stats['extracted']}")
    print(f"    ✗ Failed: {stats['failed']}")
    print()
    print("=" * 80)

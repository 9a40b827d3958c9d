#!/usr/bin/env python3
"""
Database Setup Script

Creates the PostgreSQL tables (jobboard/db/schema.sql) and the MongoDB indexes.
Safe to run more than once.
Usage: python scripts/init_db.py [--seed-questions]
"""
import argparse
import sys
sys.path.insert(0, '.')

from jobboard.db.postgres import init_schema
from jobboard.db.mongodb import init_mongo_indexes


def main():
    parser = argparse.ArgumentParser(description="Create Jobboard database schema")
    parser.add_argument("--seed-questions", action="store_true",
                        help="also store the built-in personality questions")
    args = parser.parse_args()

    print("[1] Applying PostgreSQL schema...")
    init_schema()
    print("    ✅ Tables ready")

    print("[2] Creating MongoDB indexes...")
    try:
        init_mongo_indexes()
        print("    ✅ Indexes ready")
    except Exception as e:
        print(f"    ⚠️  MongoDB unavailable, skipped: {e}")

    if args.seed_questions:
        from jobboard.services.personality_service import seed_default_questions
        result = seed_default_questions()
        print(f"[3] {result['message']} ({result['count']})")


if __name__ == "__main__":
    main()

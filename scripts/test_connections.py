#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify PostgreSQL, MongoDB and the AI endpoint are reachable.
Usage: python scripts/test_connections.py
"""
import sys
sys.path.insert(0, '.')

from jobboard.db.postgres import test_postgres_connection
from jobboard.db.mongodb import test_mongo_connection
from jobboard.services.ai_client import get_ai_client
from jobboard.core.config import get_settings


def main():
    settings = get_settings()
    print("=" * 50)
    print("JOBBOARD - CONNECTION TEST")
    print("=" * 50)

    ok = True

    # Test PostgreSQL
    print("\n[1] Testing PostgreSQL...")
    print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if test_postgres_connection():
        print("    ✅ PostgreSQL: CONNECTED")
    else:
        print("    ❌ PostgreSQL: FAILED")
        ok = False

    # Test MongoDB
    print("\n[2] Testing MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
    else:
        print("    ❌ MongoDB: FAILED")
        ok = False

    # Test AI endpoint (only if API key is set)
    print("\n[3] Testing AI endpoint...")
    if settings.ai_configured:
        print(f"    Base URL: {settings.ai_base_url}")
        print(f"    Model: {settings.ai_model}")
        if get_ai_client().test_connection():
            print("    ✅ AI: CONNECTED")
        else:
            print("    ❌ AI: FAILED")
            ok = False
    else:
        print("    ⚠️  AI: API key not configured (AI features will return errors)")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())

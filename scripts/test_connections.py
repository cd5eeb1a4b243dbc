#!/usr/bin/env python3
"""
Connection Check Script

Verifies MongoDB is reachable and creates the indexes the API relies on.
Usage: python scripts/test_connections.py [--indexes]
"""
import sys
sys.path.insert(0, '.')

from admissions.core.config import get_settings
from admissions.db.mongodb import COLLECTIONS, get_collection, init_mongo_indexes, test_mongo_connection


def main():
    settings = get_settings()
    print("=" * 50)
    print("ADMISSIONS MARKETPLACE - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] MongoDB")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if not test_mongo_connection():
        print("    ❌ MongoDB: FAILED")
        sys.exit(1)
    print("    ✅ MongoDB: CONNECTED")

    print("\n[2] Collections")
    for name in COLLECTIONS.values():
        print(f"    {name:<16} {get_collection(name).estimated_document_count()} documents")

    if "--indexes" in sys.argv:
        print("\n[3] Indexes")
        init_mongo_indexes()
        shortlist_indexes = get_collection(COLLECTIONS["shortlists"]).index_information()
        for name, info in shortlist_indexes.items():
            print(f"    shortlists.{name} unique={info.get('unique', False)}")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()

"""
MongoDB Connection Utility

MongoDB stores every entity of the marketplace:
- students, colleges, admins: login accounts
- college_admins: institutional profiles with course catalogs
- shortlists: student <-> college interest links

The compound unique index on shortlists (student, college) is the only
consistency mechanism for interest records, so init_mongo_indexes() must
run before the API accepts writes.
"""
import logging

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from admissions.core.config import get_settings

logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(get_settings().mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the admissions database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def set_mongo_client(client: MongoClient) -> None:
    """Swap the client (and drop the cached database handle)."""
    global _client, _db
    _client = client
    _db = None


def get_collection(name: str) -> Collection:
    """
    Get a specific collection.
    Use the COLLECTIONS constants rather than raw names.
    """
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "students": "students",
    "colleges": "colleges",
    "admins": "admins",
    "college_admins": "college_admins",
    "shortlists": "shortlists",
}


def init_mongo_indexes():
    """
    Create indexes for uniqueness and query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # Login accounts are looked up by email
    db[COLLECTIONS["students"]].create_index("email", unique=True)
    db[COLLECTIONS["colleges"]].create_index("email", unique=True)
    db[COLLECTIONS["admins"]].create_index("email", unique=True)

    # One profile per College account
    db[COLLECTIONS["college_admins"]].create_index("college", unique=True)
    db[COLLECTIONS["college_admins"]].create_index("email", unique=True)

    # Exactly one shortlist per (student, college) pair
    shortlists = db[COLLECTIONS["shortlists"]]
    shortlists.create_index([
        ("student", ASCENDING),
        ("college", ASCENDING)
    ], unique=True)
    shortlists.create_index("student")
    shortlists.create_index([("college", ASCENDING), ("created_at", DESCENDING)])

    logger.info("MongoDB indexes created successfully")

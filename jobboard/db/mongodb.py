"""
MongoDB Connection Utility

MongoDB stores:
- Raw resume text extracted from uploads
- AI-parsed resume outputs (structured JSON)
- Full AI personality reports

PostgreSQL stays the source of truth for everything the app queries
relationally; these collections keep the schema-flexible AI payloads.
"""
import logging
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from jobboard.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=5000)
    return _client


def get_mongo_db() -> Database:
    """Get the jobboard_docs database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection (see COLLECTIONS)."""
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
    "raw_resumes": "raw_resumes",
    "parsed_resumes": "parsed_resumes",
    "personality_reports": "personality_reports",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # One current resume per user
    db[COLLECTIONS["raw_resumes"]].create_index("user_id")
    db[COLLECTIONS["parsed_resumes"]].create_index("user_id")

    db[COLLECTIONS["personality_reports"]].create_index("user_id", unique=True)

    logger.info("MongoDB indexes created successfully")

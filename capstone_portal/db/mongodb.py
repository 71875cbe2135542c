"""
MongoDB Connection Utility

MongoDB stores:
- users: one profile per identity-provider account (students and faculty)
- facultyApplications: student -> faculty applications, keyed "{studentId}_{facultyId}"
- departments / domains: reference lists offered during profile setup

The accept cascade uses multi-document transactions, so the server must run
as a replica set (a single-node replica set is enough for development).
"""
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from capstone_portal.core.config import get_settings
from capstone_portal.core.logger import get_logger

logger = get_logger("mongodb")

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(get_settings().mongodb_uri, tz_aware=False)
    return _client


def get_mongo_db() -> Database:
    """Get the portal database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
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
    except PyMongoError as e:
        logger.error("MongoDB connection failed", error=str(e))
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "applications": "facultyApplications",
    "departments": "departments",
    "domains": "domains",
}


def init_mongo_indexes():
    """
    Create the indexes behind every query filter the portal uses.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # Faculty browsing filters users by role
    db[COLLECTIONS["users"]].create_index("role")

    # Applications by faculty / student / status, plus the per-category
    # accepted count used for intake limits
    apps = db[COLLECTIONS["applications"]]
    apps.create_index("facultyId")
    apps.create_index("studentId")
    apps.create_index("status")
    apps.create_index([
        ("facultyId", ASCENDING),
        ("status", ASCENDING),
        ("studentType", ASCENDING),
    ])

    # Reference list names are unique
    db[COLLECTIONS["departments"]].create_index("name", unique=True)
    db[COLLECTIONS["domains"]].create_index("name", unique=True)

    logger.info("MongoDB indexes created")

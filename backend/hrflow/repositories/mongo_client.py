"""MongoDB Client - Connection and Collection Management"""
from typing import Any, Dict, Optional
from pymongo import MongoClient as PyMongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import ConnectionFailure, PyMongoError

from ..config.settings import settings
from ..utils.logger import get_logger

logger = get_logger(__name__)

WORKFLOWS = "workflows"
TEMPLATES = "workflow_templates"
ACCOUNTS = "employee_accounts"
NOTIFICATIONS = "notifications"
USERS = "users"

# Global client instance
_client: Optional[PyMongoClient] = None
_database: Optional[Database] = None


def get_client() -> PyMongoClient:
    """Get or create MongoDB client"""
    global _client
    if _client is None:
        logger.info(f"Connecting to MongoDB: {settings.mongo_uri}")
        _client = PyMongoClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            socketTimeoutMS=30000,
        )
        try:
            _client.admin.command("ping")
            logger.info("MongoDB connection successful")
        except ConnectionFailure as e:
            logger.error(f"MongoDB connection failed: {e}")
            raise
    return _client


def get_database() -> Database:
    """Get the application database"""
    global _database
    if _database is None:
        client = get_client()
        _database = client[settings.mongo_db]
        logger.info(f"Using database: {settings.mongo_db}")
    return _database


def get_collection(name: str) -> Collection:
    """Get a collection from the database"""
    db = get_database()
    return db[name]


def close_connection() -> None:
    """Close MongoDB connection"""
    global _client, _database
    if _client is not None:
        _client.close()
        _client = None
        _database = None
        logger.info("MongoDB connection closed")


def create_indexes() -> None:
    """Create all required indexes"""
    db = get_database()
    logger.info("Creating MongoDB indexes...")

    workflows = db[WORKFLOWS]
    workflows.create_index("workflow_id", unique=True)
    workflows.create_index([("status", ASCENDING), ("type", ASCENDING)])
    workflows.create_index("employee.email")
    workflows.create_index("stages.tasks.assigned_to.user_id")
    workflows.create_index("updated_at", background=True)

    templates = db[TEMPLATES]
    templates.create_index("template_id", unique=True)
    templates.create_index("type")

    # At most one directory account per email
    accounts = db[ACCOUNTS]
    accounts.create_index("account_id", unique=True)
    accounts.create_index("email", unique=True)
    accounts.create_index("status")

    notifications = db[NOTIFICATIONS]
    notifications.create_index("notification_id", unique=True)
    notifications.create_index([("recipient_email", ASCENDING), ("created_at", DESCENDING)])
    notifications.create_index("workflow_id")

    users = db[USERS]
    users.create_index("user_id", unique=True)

    logger.info("MongoDB indexes created successfully")


def health_check() -> Dict[str, Any]:
    """Check MongoDB health"""
    try:
        client = get_client()
        client.admin.command("ping")
        return {
            "status": "healthy",
            "database": settings.mongo_db,
            "connection": "ok"
        }
    except PyMongoError as e:
        logger.error(f"MongoDB health check failed: {e}")
        return {
            "status": "unhealthy",
            "database": settings.mongo_db,
            "error": str(e)
        }

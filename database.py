"""
Database Helper Functions

MongoDB connection and small helpers shared by the API handlers.
The client is created once per process by connect() and handed to
handlers through the get_db() dependency.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.server_api import ServerApi

load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL") or os.getenv("DATABASE_URI")
DATABASE_NAME = os.getenv("DATABASE_NAME", "digitalsitepro")

USERS = "users"
TESTIMONIALS = "testimonial"
PROPOSALS = "proposals"

client: Optional[MongoClient] = None
db: Optional[Database] = None


def connect(url: Optional[str] = DATABASE_URL, name: str = DATABASE_NAME) -> Optional[Database]:
    """Open the shared client and ping the server. Failures are logged, not raised."""
    global client, db
    if not url:
        logger.error("Error connecting to MongoDB: DATABASE_URL is not set")
        return None
    try:
        client = MongoClient(
            url,
            server_api=ServerApi("1", strict=True, deprecation_errors=True),
        )
        client.admin.command("ping")
        db = client[name]
        logger.info("MongoDB connected!")
    except Exception:
        logger.exception("Error connecting to MongoDB")
    return db


def close():
    global client, db
    if client is not None:
        client.close()
    client = None
    db = None


def get_db() -> Database:
    if db is None:
        raise RuntimeError("Database not available")
    return db


def find_user(database: Database, email: Optional[str]) -> Optional[dict]:
    return database[USERS].find_one({"email": email})


def create_document(database: Database, collection_name: str, data: dict):
    """Insert a single document and return the pymongo InsertOneResult."""
    return database[collection_name].insert_one(data)


def get_documents(database: Database, collection_name: str, filter_dict: Optional[dict] = None):
    return list(database[collection_name].find(filter_dict or {}))


def insert_result(result) -> dict:
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def update_result(result) -> dict:
    upserted_id = result.upserted_id
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
        "upsertedCount": 0 if upserted_id is None else 1,
        "upsertedId": None if upserted_id is None else str(upserted_id),
    }

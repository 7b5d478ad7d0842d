# connect_db.py
import os
from typing import Optional

from dotenv import load_dotenv
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import ConfigurationError, ConnectionFailure, OperationFailure

from event_db.errors import DatabaseConnectionError, DatabasePermissionError, SchemaInitError

load_dotenv()
MONGO_URI = os.getenv("EVENT_API_MONGO_URI", "mongodb://127.0.0.1:27017/infosys")
DB_NAME = os.getenv("EVENT_API_DB_NAME")
TIMEOUT_MS = os.getenv("EVENT_API_MONGO_TIMEOUT_MS", "10000")

# Used when neither EVENT_API_DB_NAME nor the URI path names a database
DEFAULT_DB_NAME = "infosys"

# Unauthorized, AuthenticationFailed
PERMISSION_ERROR_CODES = (13, 18)


def get_client(uri: Optional[str] = None, timeout_ms: Optional[int] = None) -> MongoClient:
    uri = uri or MONGO_URI
    if timeout_ms is None:
        try:
            timeout_ms = int(TIMEOUT_MS)
        except ValueError as e:
            raise SchemaInitError(
                f"EVENT_API_MONGO_TIMEOUT_MS must be a whole number of milliseconds, got '{TIMEOUT_MS}'"
            ) from e
    try:
        client = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
    except (ConfigurationError, ValueError) as e:
        raise DatabaseConnectionError(f"Invalid MongoDB URI: {e}") from e

    try:
        # MongoClient connects lazily; ping so failures surface here
        client.admin.command("ping")
    except ConnectionFailure as e:
        client.close()
        raise DatabaseConnectionError(f"Failed to connect to MongoDB: {e}") from e
    except OperationFailure as e:
        client.close()
        if e.code in PERMISSION_ERROR_CODES:
            raise DatabasePermissionError(f"MongoDB rejected the credentials: {e}") from e
        raise DatabaseConnectionError(f"Failed to connect to MongoDB: {e}") from e
    return client


def get_database(
    uri: Optional[str] = None,
    db_name: Optional[str] = None,
    client: Optional[MongoClient] = None,
) -> Database:
    """Return the target database, connecting first unless a client is given.

    An explicit `db_name` (or EVENT_API_DB_NAME) wins over the database in
    the URI path.
    """
    if client is None:
        client = get_client(uri)
    name = db_name or DB_NAME
    if name:
        db = client[name]
    else:
        db = client.get_default_database(DEFAULT_DB_NAME)
    print(f"✅ Connected to MongoDB database: {db.name}")
    return db


if __name__ == "__main__":
    get_database()

"""event_db/inspect_schema.py

Read-only check that a database carries the collections and indexes set up
by create_collections. Prints the index listing of each collection followed
by any problems found, and exits non-zero if there are problems. Nothing is
created, changed or dropped.

Usage:
    $env:EVENT_API_MONGO_URI = 'mongodb://127.0.0.1:27017/infosys'
    python -m event_db.inspect_schema
"""
import sys
from typing import Any, Dict, List

from pymongo.database import Database
from pymongo.errors import ConnectionFailure, OperationFailure, PyMongoError

from event_db.connect_db import PERMISSION_ERROR_CODES, get_database
from event_db.errors import SchemaInitError
from event_db.schema import COLLECTIONS, INDEXES, describe_index_info


def describe_indexes(db: Database, collection: str) -> Dict[str, Dict[str, Any]]:
    if collection not in db.list_collection_names():
        return {}
    return {
        name: describe_index_info(info)
        for name, info in db[collection].index_information().items()
    }


def check_schema(db: Database) -> List[str]:
    """Return a list of problems; an empty list means the schema is in place."""
    problems = []
    existing_collections = set(db.list_collection_names())

    for name in COLLECTIONS:
        if name not in existing_collections:
            problems.append(f"collection '{name}' is missing")

    for spec in INDEXES:
        if spec.collection not in existing_collections:
            problems.append(f"index '{spec.name}' is missing (no collection '{spec.collection}')")
            continue
        existing = db[spec.collection].index_information()
        info = existing.get(spec.name)
        if info is None:
            problems.append(f"index '{spec.name}' on '{spec.collection}' is missing")
            same_key = [name for name, other in existing.items() if spec.same_keys(other)]
            if same_key:
                problems.append(
                    f"key {spec.describe()['key']} on '{spec.collection}' is indexed as "
                    f"{', '.join(repr(n) for n in same_key)} instead of '{spec.name}'"
                )
        elif not spec.matches(info):
            problems.append(
                f"index '{spec.name}' on '{spec.collection}' differs: "
                f"expected {spec.describe()}, found {describe_index_info(info)}"
            )
    return problems


def _print_listing(db: Database):
    for name in COLLECTIONS:
        print(f"\n=== {name} ===")
        indexes = describe_indexes(db, name)
        if not indexes:
            print("(collection does not exist)")
        for index_name, info in indexes.items():
            unique = " unique" if info["unique"] else ""
            print(f"{index_name}: {info['key']}{unique}")


def main() -> int:
    try:
        db = get_database()
    except SchemaInitError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    try:
        _print_listing(db)
        problems = check_schema(db)
    except ConnectionFailure as e:
        print(f"❌ Lost connection to MongoDB: {e}", file=sys.stderr)
        return 1
    except OperationFailure as e:
        if e.code in PERMISSION_ERROR_CODES:
            print(f"❌ Not allowed to read the schema: {e}", file=sys.stderr)
        else:
            print(f"❌ Failed to read schema: {e}", file=sys.stderr)
        return 1
    except PyMongoError as e:
        print(f"❌ Failed to read schema: {e}", file=sys.stderr)
        return 1
    finally:
        db.client.close()

    print()
    if problems:
        for problem in problems:
            print(f"⚠️ {problem}")
        return 1
    print("✅ Schema matches the expected layout.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

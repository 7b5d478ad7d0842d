import sys
from typing import List, Tuple

from pymongo.database import Database
from pymongo.errors import CollectionInvalid, ConnectionFailure, OperationFailure, PyMongoError

from event_db.connect_db import PERMISSION_ERROR_CODES, get_database
from event_db.errors import (
    DatabaseConnectionError,
    DatabasePermissionError,
    SchemaConflictError,
    SchemaInitError,
)
from event_db.schema import SCHEMA_STEPS, IndexSpec, describe_index_info

NAMESPACE_EXISTS = 48
# IndexOptionsConflict, IndexKeySpecsConflict
INDEX_CONFLICT_CODES = (85, 86)


def ensure_collection(db: Database, name: str) -> bool:
    """Create the collection unless it exists. Returns True if it was created."""
    if name in db.list_collection_names():
        return False
    try:
        db.create_collection(name)
    except CollectionInvalid:
        # created by someone else between the listing and the create
        return False
    except OperationFailure as e:
        if e.code == NAMESPACE_EXISTS:
            return False
        raise
    return True


def ensure_index(db: Database, spec: IndexSpec) -> bool:
    """Create the index unless an identical one exists. Returns True if it was created.

    An index with the same name but another definition, or with the same key
    under another name, raises SchemaConflictError and is left as it is.
    """
    collection = db[spec.collection]
    existing = collection.index_information()

    info = existing.get(spec.name)
    if info is not None:
        if spec.matches(info):
            return False
        raise SchemaConflictError(
            f"Index '{spec.name}' on '{spec.collection}' exists with a different definition: "
            f"expected {spec.describe()}, found {describe_index_info(info)}",
            collection=spec.collection,
            index_name=spec.name,
            expected=spec.describe(),
            found=describe_index_info(info),
        )

    for other_name, other in existing.items():
        if spec.same_keys(other):
            raise SchemaConflictError(
                f"Key {spec.describe()['key']} on '{spec.collection}' is already indexed "
                f"as '{other_name}', expected index name '{spec.name}'",
                collection=spec.collection,
                index_name=spec.name,
                expected=spec.describe(),
                found={other_name: describe_index_info(other)},
            )

    try:
        collection.create_index(spec.key_document(), unique=spec.unique, name=spec.name)
    except OperationFailure as e:
        if e.code in INDEX_CONFLICT_CODES:
            raise SchemaConflictError(
                f"Index '{spec.name}' on '{spec.collection}' conflicts with an existing index: {e}",
                collection=spec.collection,
                index_name=spec.name,
                expected=spec.describe(),
            ) from e
        raise
    return True


def _step_label(step) -> str:
    if isinstance(step, IndexSpec):
        return f"index '{step.name}' on '{step.collection}'"
    return f"collection '{step}'"


def init_schema(db: Database) -> List[Tuple[str, bool]]:
    """Apply every schema step in order and report (label, created) per step.

    Safe to run again after any failure; nothing is dropped or rewritten.
    """
    results = []
    for step in SCHEMA_STEPS:
        label = _step_label(step)
        try:
            if isinstance(step, IndexSpec):
                created = ensure_index(db, step)
            else:
                created = ensure_collection(db, step)
        except ConnectionFailure as e:
            raise DatabaseConnectionError(f"Lost connection to MongoDB while ensuring {label}: {e}") from e
        except OperationFailure as e:
            if e.code in PERMISSION_ERROR_CODES:
                raise DatabasePermissionError(f"Not allowed to create {label}: {e}") from e
            raise SchemaInitError(f"Failed to ensure {label}: {e}") from e
        except PyMongoError as e:
            raise SchemaInitError(f"Failed to ensure {label}: {e}") from e

        if created:
            print(f"✅ Created {label}.")
        else:
            print(f"✅ {label[0].upper()}{label[1:]} already present.")
        results.append((label, created))
    return results


def main() -> int:
    try:
        db = get_database()
    except SchemaInitError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    try:
        init_schema(db)
    except SchemaInitError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    finally:
        db.client.close()

    print("✅ Schema is up to date.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

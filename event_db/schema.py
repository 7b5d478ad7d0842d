# schema.py
from typing import Any, Dict, List, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IndexSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    collection: str = Field(min_length=1)
    keys: List[Tuple[str, int]] = Field(min_length=1)
    unique: bool = False
    name: str = Field(min_length=1)

    @field_validator("keys")
    @classmethod
    def validate_directions(cls, v):
        for field, direction in v:
            if not field:
                raise ValueError("index key field cannot be empty")
            if direction not in (1, -1):
                raise ValueError(f"direction for '{field}' must be 1 or -1, got {direction}")
        return v

    def key_document(self) -> List[Tuple[str, int]]:
        return list(self.keys)

    def describe(self) -> Dict[str, Any]:
        return {"key": dict(self.keys), "unique": self.unique}

    def same_keys(self, info: Dict[str, Any]) -> bool:
        """Compare against an entry of Collection.index_information()."""
        found = [(field, _normalize_direction(d)) for field, d in info.get("key", [])]
        return found == self.key_document()

    def matches(self, info: Dict[str, Any]) -> bool:
        """Same key, same uniqueness, and no further options such as sparse or a partial filter."""
        found = describe_index_info(info)
        del found["key"]
        return self.same_keys(info) and found == {"unique": self.unique}


# Options that change which documents an index covers or keeps
DEFINITION_OPTIONS = ("sparse", "partialFilterExpression", "collation", "expireAfterSeconds")


def _normalize_direction(direction: Any) -> Any:
    # the server may report 1 as 1.0; text/hashed/2dsphere stay strings
    if isinstance(direction, (int, float)) and not isinstance(direction, bool):
        return int(direction)
    return direction


def describe_index_info(info: Dict[str, Any]) -> Dict[str, Any]:
    """Reduce an index_information() entry to the parts a definition is compared on.

    Options from DEFINITION_OPTIONS are included only when set.
    """
    described = {
        "key": {field: _normalize_direction(d) for field, d in info.get("key", [])},
        "unique": bool(info.get("unique", False)),
    }
    for option in DEFINITION_OPTIONS:
        value = info.get(option)
        if option == "sparse":
            if value:
                described[option] = True
        elif value is not None:
            described[option] = value
    return described


users_email_index = IndexSpec(
    collection="users",
    keys=[("email", 1)],
    unique=True,
    name="users_email_unique",
)

events_starts_at_index = IndexSpec(
    collection="events",
    keys=[("starts_at", 1)],
    name="events_starts_at",
)

events_reg_ids_index = IndexSpec(
    collection="events",
    keys=[("registration_ids", 1)],
    name="events_reg_ids",
)

COLLECTIONS: Tuple[str, ...] = ("users", "events")

INDEXES: Tuple[IndexSpec, ...] = (
    users_email_index,
    events_starts_at_index,
    events_reg_ids_index,
)

# Applied in this order; a collection always comes before its indexes.
SCHEMA_STEPS: Tuple[Union[str, IndexSpec], ...] = (
    "users",
    users_email_index,
    "events",
    events_starts_at_index,
    events_reg_ids_index,
)

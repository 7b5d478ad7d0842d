"""event_db package initializer

Schema setup for the event API's MongoDB database: the `users` and `events`
collections and the indexes the API relies on. Run
`python -m event_db.create_collections` (or the `event-db-init` script) to
apply it and `event-db-check` to verify an existing database.
"""

__all__ = [
    "connect_db",
    "create_collections",
    "errors",
    "inspect_schema",
    "schema",
]

"""
Example 05: Error Handling

This example demonstrates how recognized driver errors are translated into
rowset exceptions while unrecognized ones reach the caller unchanged.
"""

from rowset import (
    ConnectionConfig,
    Database,
    DuplicateKeyError,
    MultipleRowsError,
    ReferentialIntegrityError,
)
import sqlite3


def main():
    db = Database.from_config(ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1))
    db.sql_statement("CREATE TABLE users (id INTEGER PRIMARY KEY, email TEXT UNIQUE)").non_query()
    db.sql_statement(
        "CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER REFERENCES users(id))"
    ).non_query()
    db.sql_statement("INSERT INTO users VALUES (1, 'a@example.com'), (2, 'b@example.com')").non_query()

    print("=== Error Handling ===\n")

    try:
        db.sql_statement("INSERT INTO users VALUES (3, 'a@example.com')").non_query()
    except DuplicateKeyError as e:
        print(f"DuplicateKeyError (code={e.code}), caused by {type(e.__cause__).__name__}")

    try:
        db.sql_statement("INSERT INTO orders VALUES (1, 42)").non_query()
    except ReferentialIntegrityError as e:
        print(f"ReferentialIntegrityError (code={e.code})")

    try:
        db.sql_statement("SELECT id FROM users").select_single(lambda r: r["id"])
    except MultipleRowsError as e:
        print(f"MultipleRowsError: {e}")

    try:
        db.sql_statement("SELECT * FROM missing_table").select_many(lambda r: r)
    except sqlite3.OperationalError as e:
        print(f"Unrecognized driver error passes through: {e}")

    db.close()


if __name__ == "__main__":
    main()

"""
Example 01: Basic Query Execution

This example demonstrates the single-result-set operations of a command:
select_many, select_single, select_first, scalar and non_query.
"""

from rowset import ConnectionConfig, Database, ModelMapper, NoRowsError
from dataclasses import dataclass
import tempfile
import sqlite3
from pathlib import Path


@dataclass
class User:
    id: int
    name: str
    email: str


def main():
    # Create a temporary database
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    conn = sqlite3.connect(db_path)
    conn.execute("""
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            active INTEGER DEFAULT 1
        )
    """)
    conn.execute("INSERT INTO users (name, email) VALUES ('Alice', 'alice@example.com')")
    conn.execute("INSERT INTO users (name, email) VALUES ('Bob', 'bob@example.com')")
    conn.execute("INSERT INTO users (name, email, active) VALUES ('Charlie', 'charlie@example.com', 0)")
    conn.commit()
    conn.close()

    db = Database.from_config(ConnectionConfig(driver="sqlite", database=db_path))
    users = ModelMapper(User)

    print("=== Basic Query Execution ===\n")

    # select_single: exactly one row
    user = db.sql_statement(
        "SELECT id, name, email FROM users WHERE id = :id", {"id": 1}
    ).select_single(users)
    print(f"select_single result: {user}\n")

    # select_many: every row
    active = db.sql_statement(
        "SELECT id, name, email FROM users WHERE active = 1"
    ).select_many(users)
    print(f"select_many result ({len(active)} rows):")
    for user in active:
        print(f"  - {user.name} ({user.email})")
    print()

    # select_first_or_default: a plain callable works as a mapper
    name = db.sql_statement("SELECT name FROM users ORDER BY name DESC").select_first_or_default(
        lambda record: record["name"]
    )
    print(f"select_first_or_default result: {name}\n")

    try:
        db.sql_statement("SELECT id FROM users WHERE id = 99").select_single(users)
    except NoRowsError as e:
        print(f"select_single on a missing row: {e}\n")

    # non_query and scalar
    updated = db.sql_statement("UPDATE users SET active = 1 WHERE active = 0").non_query()
    count = db.sql_statement("SELECT COUNT(*) FROM users WHERE active = 1").scalar(int)
    print(f"non_query updated {updated} row(s); scalar reports {count} active users\n")

    # Clean up
    db.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()

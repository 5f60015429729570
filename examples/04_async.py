"""
Example 04: Async Support

This example demonstrates asynchronous command execution using AsyncDatabase.
"""

import asyncio
from rowset import AsyncDatabase, CollectionSet, ConnectionConfig, ModelMapper
from dataclasses import dataclass
import tempfile
from pathlib import Path


@dataclass
class User:
    id: int
    name: str
    email: str


async def main():
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    db = AsyncDatabase.from_config(ConnectionConfig(driver="sqlite", database=db_path))

    print("=== Async Support ===\n")

    await db.sql_statement(
        "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL, email TEXT NOT NULL)"
    ).non_query()
    for name in ["Alice", "Bob", "Charlie"]:
        await db.sql_statement(
            "INSERT INTO users (name, email) VALUES (:name, :email)",
            {"name": name, "email": f"{name.lower()}@example.com"},
        ).non_query()

    users = await db.sql_statement("SELECT id, name, email FROM users").select_many(ModelMapper(User))
    print(f"select_many: {users}\n")

    count = await db.sql_statement("SELECT COUNT(*) FROM users").scalar(int)
    print(f"scalar: {count}\n")

    names = CollectionSet(lambda record: record["name"], max_rows=10)
    await db.sql_statement("SELECT name FROM users ORDER BY name").select_multi_set(names)
    print(f"select_multi_set: {names.items}\n")

    await db.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    asyncio.run(main())

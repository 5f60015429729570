"""
Example 02: Multi-Result-Set Commands

This example demonstrates select_multi_set with a SQL Server stored
procedure returning an order header and its lines:

    CREATE PROCEDURE get_order @order_id INT AS
    BEGIN
        SELECT id, customer, total FROM orders WHERE id = @order_id;
        IF @@ROWCOUNT = 0 RETURN;
        SELECT product, quantity FROM order_lines WHERE order_id = @order_id;
    END

Set ROWSET_SQLSERVER_HOST (and ROWSET_SQLSERVER_USER / _PASSWORD /
_DATABASE) to run it against a server. Without it the same specs are
applied to a single-set SQLite query, where the missing lines set is
tolerated by stop_on_empty.
"""

from rowset import (
    CollectionSet,
    ConnectionConfig,
    Database,
    ResultSetSpec,
    SingleSet,
)
import os


def load_order(command):
    header = SingleSet(lambda r: (r["id"], r["customer"], r["total"]), mandatory=False, stop_on_empty=True)
    lines = CollectionSet(lambda r: (r["product"], r["quantity"]), stop_on_empty=True)
    command.select_multi_set(header, lines)
    return header, lines


def main():
    print("=== Multi-Result-Set Commands ===\n")

    host = os.environ.get("ROWSET_SQLSERVER_HOST")
    if host:
        config = ConnectionConfig(
            driver="sqlserver",
            host=host,
            user=os.environ.get("ROWSET_SQLSERVER_USER"),
            password=os.environ.get("ROWSET_SQLSERVER_PASSWORD"),
            database=os.environ.get("ROWSET_SQLSERVER_DATABASE", "master"),
            extra={"TrustServerCertificate": "yes"},
        )
        db = Database.from_config(config)
        command = db.stored_procedure("get_order", {"order_id": 1})
    else:
        db = Database.from_config(ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1))
        db.sql_statement("CREATE TABLE orders (id INTEGER, customer TEXT, total REAL)").non_query()
        db.sql_statement("INSERT INTO orders VALUES (1, 'Alice', 12.5)").non_query()
        command = db.sql_statement("SELECT id, customer, total FROM orders WHERE id = :id", {"id": 1})

    header, lines = load_order(command)
    if header.has_value:
        print(f"Order header: {header.value}")
        print(f"Order lines ({len(lines.items)}): {lines.items}\n")
    else:
        print("Order not found\n")

    # Plain ResultSetSpec with hooks and bounds; None skips a result set unread
    seen = []
    spec = ResultSetSpec(
        on_row=lambda record: seen.append(record.to_dict()),
        on_complete=lambda: print(f"Result set complete: {seen}"),
        min_rows=1,
        max_rows=10,
    )
    db.sql_statement("SELECT 1 AS a, 'x' AS b").select_multi_set(spec)

    db.close()


if __name__ == "__main__":
    main()

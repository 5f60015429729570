"""
Example 03: Native Type Classification

This example demonstrates mapping database column type names to canonical
names and Python types.
"""

from rowset import UnsupportedTypeError, canonical_type, canonical_type_name, classify


def main():
    print("=== Native Type Classification ===\n")

    for name in ["NVARCHAR(255)", "decimal(18,2)", "DATETIME2", "BIGINT", "TINYINT", "ROWVERSION", "BIT", "UNIQUEIDENTIFIER"]:
        print(f"{name:20} {classify(name).value:10} {canonical_type_name(name):15} {canonical_type(name).__name__}")
    print()

    try:
        classify("GEOGRAPHY")
    except UnsupportedTypeError as e:
        print(f"Unsupported: {e}")


if __name__ == "__main__":
    main()

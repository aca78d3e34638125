"""Example 01: Basic put and scan.

This example demonstrates the service lifecycle against a running HBase
Thrift gateway:
- ClientServiceConfig with explicit ZooKeeper settings
- enable() / disable() via the context manager
- put() with a repeated column (the later value wins)
- scan() with a column selector and an inclusive minimum timestamp

Requires an HBase Thrift server on localhost:9090 and a table ``events``
with column family ``f``.
"""

from hbase_service import ClientServiceConfig, ColumnSelector, HBaseClientService, WriteRequest


def print_row(row_key, cells):
    # Views are only valid until this function returns; copy what you keep.
    columns = ", ".join(
        f"{c.column_key().decode()}@{c.timestamp}={c.value.decode()}" for c in cells
    )
    print(f"  {bytes(row_key).decode()}: {columns}")


def main():
    """Run basic usage example."""
    print("=" * 80)
    print("EXAMPLE 01: BASIC PUT AND SCAN")
    print("=" * 80)

    config = ClientServiceConfig(
        zookeeper_quorum="localhost",
        zookeeper_client_port=2181,
        zookeeper_znode_parent="/hbase",
        client_retries=3,
        overrides={"hbase.thrift.port": "9090"},
    )

    with HBaseClientService() as service:
        service.enable(config)
        print(f"\n✓ Service enabled, tables: {service.list_tables()}")

        print("\n1. Writing three cells across two rows:")
        service.put(
            "events",
            [
                WriteRequest("r1", "f", "q1", b"a"),
                WriteRequest("r1", "f", "q1", b"b"),
                WriteRequest("r2", "f", "q1", b"c"),
            ],
        )
        print("   ✓ One batch, two mutations (r1:f:q1 keeps 'b')")

        print("\n2. Scanning family 'f' from timestamp 0:")
        rows = service.scan("events", [ColumnSelector("f")], None, 0, print_row)
        print(f"   ✓ {rows} row(s) delivered")

        print("\n3. Scanning with a filter:")
        rows = service.scan("events", None, "PrefixFilter('r2')", 0, print_row)
        print(f"   ✓ {rows} row(s) delivered")

    print("\n✓ Service disabled")


if __name__ == "__main__":
    main()

"""Example 02: Incremental scans with boundary tracking.

Each pass resumes from the newest timestamp the previous pass saw. The lower
bound is inclusive, so rows at exactly that timestamp come back again;
BoundaryTracker drops the ones already processed.

Requires an HBase Thrift server on localhost:9090 and a table ``events``
with column family ``f``.
"""

import time

from hbase_service import BoundaryTracker, ClientServiceConfig, HBaseClientService

POLL_SECONDS = 5
PASSES = 3


def main():
    """Run incremental scan example."""
    print("=" * 80)
    print("EXAMPLE 02: INCREMENTAL SCANS")
    print("=" * 80)

    config = ClientServiceConfig(
        zookeeper_quorum="localhost",
        zookeeper_client_port=2181,
        zookeeper_znode_parent="/hbase",
        client_retries=3,
    )
    tracker = BoundaryTracker()

    def handle(row_key, cells):
        fresh = tracker.observe(row_key, cells)
        if fresh:
            print(f"  {bytes(row_key).decode(errors='replace')}: {len(fresh)} new cell(s)")

    with HBaseClientService() as service:
        service.enable(config)
        for n in range(1, PASSES + 1):
            min_time = tracker.begin_scan()
            print(f"\nPass {n} from min_time={min_time}:")
            service.scan("events", None, None, min_time, handle)
            time.sleep(POLL_SECONDS)

    print(f"\n✓ Next pass would start at {tracker.next_min_time}")


if __name__ == "__main__":
    main()

"""Batched multi-row writes."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from contextlib import closing

from hbase_service.errors import WriteError
from hbase_service.store import StoreConnection
from hbase_service.types import Mutation, WriteRequest

logger = logging.getLogger(__name__)


def build_mutations(writes: Iterable[WriteRequest]) -> list[Mutation]:
    """Merge writes into one mutation per row key, in first-seen row order.

    A repeated (family, qualifier) within a row keeps the value of the later
    write.
    """
    by_row: dict[str, Mutation] = {}
    for write in writes:
        mutation = by_row.get(write.row)
        if mutation is None:
            mutation = Mutation(row=write.row.encode("utf-8"))
            by_row[write.row] = mutation
        mutation.add_column(
            write.family.encode("utf-8"),
            write.qualifier.encode("utf-8"),
            bytes(write.value),
        )
    return list(by_row.values())


class PutBatcher:
    """Submits merged mutations as a single batch per call."""

    def put(
        self, connection: StoreConnection, table_name: str, writes: Iterable[WriteRequest]
    ) -> list[Mutation]:
        mutations = build_mutations(writes)
        if not mutations:
            logger.debug("No writes for table %s; nothing submitted", table_name)
            return mutations

        logger.debug(
            "Submitting %d mutation(s) covering %d column(s) to %s",
            len(mutations),
            sum(len(m) for m in mutations),
            table_name,
        )
        try:
            with closing(connection.table(table_name)) as table:
                table.put_mutations(mutations)
        except Exception as e:
            raise WriteError(table_name, str(e)) from e
        return mutations

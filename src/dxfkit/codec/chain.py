"""
Record Chains
=============

A Chain is the ordered, owning collection of the records of one type in a
drawing (all CIRCLE entities, all LAYER entries, ...).

The chain owns its records outright: each record's `chain` attribute is
its link back to the owner and its "next" record is derived from the
chain's order, so no caller can forge a link to another record.

    >>> chain = Chain("CIRCLE")
    >>> chain.append(Record(get_schema("CIRCLE"), radius=1.0))
    >>> chain.append(Record(get_schema("CIRCLE"), radius=2.0))
    >>> [r["radius"] for r in chain]
    [1.0, 2.0]
    >>> chain.release()      # releases both records exactly once
    >>> len(chain)
    0

Releasing
---------
release() walks the records in order. For each one it checks that the
record's link still points at this chain, detaches it, then releases it.
A link pointing anywhere else (manual chain surgery gone wrong) stops the
release with DanglingLinkError instead of corrupting another chain.

Records held by a caller after release() are released; using them is
unsafe and unsupported.

Copyright (c) 2026 dxfkit Contributors
"""

from typing import Iterator, Optional
import logging

from dxfkit.errors import DanglingLinkError
from dxfkit.codec.records import Record

logger = logging.getLogger(__name__)


class Chain:
    """
    Ordered, owning collection of records of one type.

    Attributes:
        record_type: Type keyword every member must have
    """

    def __init__(self, record_type: str):
        self.record_type = record_type
        self._records: list[Record] = []

    def append(self, record: Record) -> Record:
        """
        Append a record at the end of the chain.

        Returns:
            The appended record

        Raises:
            TypeError: If the record is of another type
            DanglingLinkError: If the record already belongs to a chain
        """
        if record.record_type != self.record_type:
            raise TypeError(
                f"cannot append a {record.record_type} record to a "
                f"{self.record_type} chain"
            )
        if record.chain is not None:
            raise DanglingLinkError(
                f"{record.record_type} record already belongs to a chain"
            )
        if record.released:
            raise DanglingLinkError(f"{record.record_type} record was released")
        record.chain = self
        self._records.append(record)
        return record

    @property
    def head(self) -> Optional[Record]:
        """The first record, or None for an empty chain."""
        return self._records[0] if self._records else None

    def next_of(self, record: Record) -> Optional[Record]:
        """The record following `record`, or None if it is the last."""
        for index, member in enumerate(self._records):
            if member is record:
                if index + 1 < len(self._records):
                    return self._records[index + 1]
                return None
        raise DanglingLinkError(
            f"{record.record_type} record links to a chain that does not hold it"
        )

    def for_each(self) -> Iterator[Record]:
        """
        Traverse the chain from its head.

        Each call starts a new traversal.
        """
        for record in list(self._records):
            yield record

    def __iter__(self) -> Iterator[Record]:
        return self.for_each()

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def __getitem__(self, index: int) -> Record:
        return self._records[index]

    def release(self) -> None:
        """
        Release every record exactly once, in chain order.

        Releasing an empty chain is a no-op.

        Raises:
            DanglingLinkError: If a record's link does not point at this
                chain; records before it have already been released
        """
        while self._records:
            record = self._records[0]
            if record.chain is not self:
                raise DanglingLinkError(
                    f"{record.record_type} record in a {self.record_type} chain "
                    f"links elsewhere; release stopped"
                )
            self._records.pop(0)
            record.chain = None
            record.release()
        logger.debug(f"Released {self.record_type} chain")

    def __repr__(self) -> str:
        return f"Chain({self.record_type!r}, {len(self._records)} records)"

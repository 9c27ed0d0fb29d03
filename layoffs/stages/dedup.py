"""
Duplicate elimination.

Records are partitioned by their nine-field identity key, ranked by source
order within each partition, and only the first-ranked record survives. A key
that contains a null never matches another record's key, so every record with
a null field forms its own partition and always survives.
"""

from __future__ import annotations

from typing import Dict, Hashable, List, Sequence, Tuple

from layoffs.domain.models import LayoffRecord
from layoffs.stages.abstract import AbstractPipelineStage


def _partition_key(index: int, record: LayoffRecord) -> Hashable:
    if record.has_null_field:
        # null != null: a unique key per record
        return ("__row__", index)
    return record.identity_key


def partition_by_identity(records: Sequence[LayoffRecord]) -> Dict[Hashable, List[int]]:
    """
    Group source positions by identity key, in source order.

    The position of an index in its group's list is its duplicate rank minus one.
    """
    groups: Dict[Hashable, List[int]] = {}
    for index, record in enumerate(records):
        groups.setdefault(_partition_key(index, record), []).append(index)
    return groups


def rank_duplicates(records: Sequence[LayoffRecord]) -> List[Tuple[LayoffRecord, int]]:
    """
    Pair every record with its duplicate rank (1-based), in source order.
    """
    ranks: Dict[int, int] = {}
    for positions in partition_by_identity(records).values():
        for rank, index in enumerate(positions, start=1):
            ranks[index] = rank
    return [(record, ranks[index]) for index, record in enumerate(records)]


def find_duplicates(records: Sequence[LayoffRecord]) -> List[LayoffRecord]:
    """Records with rank > 1, i.e. the ones deduplication would drop."""
    return [record for record, rank in rank_duplicates(records) if rank > 1]


class Deduplicator(AbstractPipelineStage):
    """
    Keep exactly one record per identity key.
    """

    name: str = "dedup"
    description: str = "Drop records whose nine fields all match an earlier record."

    def apply(self, records: Sequence[LayoffRecord]) -> List[LayoffRecord]:
        heads = sorted(positions[0] for positions in partition_by_identity(records).values())
        return [records[index] for index in heads]


__all__ = ["Deduplicator", "find_duplicates", "partition_by_identity", "rank_duplicates"]

"""Blocking index: only records sharing (primaryMuscleGroup, category) are compared.

Full pairwise comparison is quadratic in catalog size; blocking reduces it to the
sum of squared block sizes. True duplicates filed under different muscle groups or
categories are never compared, which is an accepted limitation.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Iterator, Mapping, Sequence

from .models import BlockKey, CatalogRecord


def build_blocks(records: Iterable[CatalogRecord]) -> dict[BlockKey, list[int]]:
    """Map each BlockKey to the ids of its records, in catalog order."""
    blocks: dict[BlockKey, list[int]] = defaultdict(list)
    for record in records:
        blocks[record.block_key].append(record.id)
    return dict(blocks)


def build_position_blocks(records: Sequence[CatalogRecord]) -> dict[BlockKey, list[int]]:
    """Like ``build_blocks`` but holding positions into ``records``.

    The engine compares by position so a repeated id cannot shadow another record.
    """
    blocks: dict[BlockKey, list[int]] = defaultdict(list)
    for position, record in enumerate(records):
        blocks[record.block_key].append(position)
    return dict(blocks)


def comparable_blocks(blocks: Mapping[BlockKey, Sequence[int]]) -> dict[BlockKey, Sequence[int]]:
    """Blocks with at least two members; singletons cannot hold a duplicate."""
    return {key: ids for key, ids in blocks.items() if len(ids) >= 2}


def block_pairs(ids: Sequence[int]) -> Iterator[tuple[int, int]]:
    """Unordered pairs (i < j by position) within one block."""
    for i in range(len(ids)):
        for j in range(i + 1, len(ids)):
            yield ids[i], ids[j]


def pair_count(blocks: Mapping[BlockKey, Sequence[int]]) -> int:
    return sum(len(ids) * (len(ids) - 1) // 2 for ids in blocks.values())

"""
Aggregation pipelines

Store-agnostic stage descriptions applied to the records matched by a
predicate. Result rows are plain dicts keyed by `_id` plus one key per
accumulator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Sum:
    field: str


@dataclass(frozen=True)
class Count:
    pass


@dataclass(frozen=True)
class CountIf:
    """Count records whose `field` equals `value`."""

    field: str
    value: Any


Accumulator = Union[Sum, Count, CountIf]


@dataclass(frozen=True)
class Group:
    """Group by a field (or everything when `by` is None) and accumulate.

    A `by=None` group over zero records yields no rows.
    """

    by: Optional[str]
    accumulators: dict[str, Accumulator] = field(default_factory=dict)


@dataclass(frozen=True)
class Bucket:
    """Count records into ranges bounded above by `boundaries`.

    Bucket `i` holds values in `(boundaries[i-1], boundaries[i]]`; bucket 0 is
    unbounded below and bucket `len(boundaries)` unbounded above. Rows carry
    the bucket index as `_id`; empty buckets may be omitted.
    """

    field: str
    boundaries: tuple[float, ...]
    output: str = "count"


@dataclass(frozen=True)
class Sort:
    """Order rows by keys; a leading '-' sorts that key descending."""

    keys: tuple[str, ...]


Stage = Union[Group, Bucket, Sort]
Pipeline = list[Stage]

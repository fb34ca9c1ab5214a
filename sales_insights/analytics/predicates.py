"""
Predicates

Store-agnostic filter descriptions. The core only composes these objects;
each record store accessor decides how to evaluate them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class MonthEquals:
    """Calendar month of a timestamp field equals `month`, year ignored."""

    field: str
    month: int


@dataclass(frozen=True)
class TextContains:
    """Case-insensitive literal substring match on a text field."""

    field: str
    term: str


@dataclass(frozen=True)
class NumberEquals:
    field: str
    value: float


@dataclass(frozen=True)
class AllOf:
    """Every clause must match. An empty AllOf matches everything."""

    clauses: tuple["Predicate", ...] = ()


@dataclass(frozen=True)
class AnyOf:
    """At least one clause must match. An empty AnyOf matches nothing."""

    clauses: tuple["Predicate", ...] = ()


Predicate = Union[MonthEquals, TextContains, NumberEquals, AllOf, AnyOf]

SEARCHABLE_TEXT_FIELDS = ("title", "description")

# Plain decimal notation only; float() would also take "1_0", "1e3" or "infinity".
_DECIMAL = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)")


def parse_price(term: str) -> Optional[float]:
    """Return the term as a float when it is a plain decimal number, else None."""
    if not _DECIMAL.fullmatch(term):
        return None
    return float(term)


def normalize_search(search: Optional[str]) -> Optional[str]:
    if search is None:
        return None
    term = search.strip()
    return term or None


def build_filter(month: int, search: Optional[str] = None) -> Predicate:
    """Compose the month filter with an optional free-text/price search.

    Args:
        month: Resolved month ordinal (1-12)
        search: Optional search term; blank terms are ignored

    Returns:
        MonthEquals alone, or AllOf(month, AnyOf(title, description[, price]))
        when a search term is present. The price clause is only included when
        the term is a plain decimal number.
    """
    base = MonthEquals(field="dateOfSale", month=month)
    term = normalize_search(search)
    if term is None:
        return base

    clauses: list[Predicate] = [TextContains(field=field, term=term) for field in SEARCHABLE_TEXT_FIELDS]
    price = parse_price(term)
    if price is not None:
        clauses.append(NumberEquals(field="price", value=price))

    return AllOf(clauses=(base, AnyOf(clauses=tuple(clauses))))

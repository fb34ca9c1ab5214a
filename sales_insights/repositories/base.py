from typing import Any, Optional, Protocol

from sales_insights.analytics.pipeline import Pipeline
from sales_insights.analytics.predicates import Predicate


class TransactionStore(Protocol):
    """Read capability the analytics core needs from a record store.

    Implementations must tolerate concurrent calls from worker threads.
    """

    def query(
        self,
        predicate: Predicate,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Return matching records in the store's natural order."""
        ...

    def count(self, predicate: Predicate) -> int:
        ...

    def aggregate(self, predicate: Predicate, pipeline: Pipeline) -> list[dict[str, Any]]:
        ...

    def replace_all(self, records: list[dict[str, Any]]) -> int:
        """Replace the whole collection. Used by the seed step only."""
        ...

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from sales_insights.core.exceptions import FeedError
from sales_insights.core.logging import LogContext, get_logger
from sales_insights.repositories.base import TransactionStore
from sales_insights.schemas.models import Transaction

logger = get_logger("sales_insights.services.seed")


def build_session(retries: int = 3) -> requests.Session:
    """HTTP session that retries transient feed failures with backoff."""
    session = requests.Session()
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=0.8,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class SeedService:
    """Bulk-loads the product transaction feed into a store.

    This is the only writer of the store; the analytics core only reads.
    """

    def __init__(
        self,
        repository: TransactionStore,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.repository = repository
        self.session = session or build_session()
        self.timeout = timeout

    def seed_from_url(self, url: str) -> int:
        with LogContext(logger, "seed from feed", url=url):
            try:
                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()
                payload = response.json()
            except requests.RequestException as e:
                raise FeedError(
                    f"Failed to fetch transaction feed: {e}",
                    details={"url": url, "error": str(e)},
                ) from e
            except ValueError as e:
                raise FeedError(
                    "Transaction feed is not valid JSON.",
                    details={"url": url, "error": str(e)},
                ) from e
            return self.seed_records(payload)

    def seed_from_file(self, path: Path) -> int:
        with LogContext(logger, "seed from file", path=str(path)):
            try:
                payload = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                raise FeedError(
                    f"Failed to read transaction file: {e}",
                    details={"path": str(path), "error": str(e)},
                ) from e
            return self.seed_records(payload)

    def seed_records(self, payload: Any) -> int:
        """Validate every record, then replace the store contents.

        Raises:
            FeedError: If the payload is not a list, any record is invalid or
                two records share an id. Nothing is written in that case.
        """
        records = self.validate_records(payload)
        count = self.repository.replace_all(records)
        logger.info(f"Seeded {count} transactions")
        return count

    @staticmethod
    def validate_records(payload: Any) -> list[dict[str, Any]]:
        if not isinstance(payload, list):
            raise FeedError(
                "Transaction feed must be a JSON array.",
                details={"type": type(payload).__name__},
            )

        records: list[dict[str, Any]] = []
        # Keyed by str(id): Firestore document ids are strings, so 1 and "1" collide
        seen_ids: dict[str, int] = {}
        for index, item in enumerate(payload):
            try:
                transaction = Transaction.model_validate(item)
            except ValidationError as e:
                raise FeedError(
                    f"Invalid transaction at position {index}.",
                    details={
                        "index": index,
                        "errors": e.errors(include_url=False, include_context=False, include_input=False),
                    },
                ) from e

            key = str(transaction.id)
            if key in seen_ids:
                raise FeedError(
                    f"Duplicate transaction id {transaction.id!r} at position {index}.",
                    details={"index": index, "id": transaction.id, "first_index": seen_ids[key]},
                )
            seen_ids[key] = index
            records.append(transaction.model_dump(by_alias=True, mode="json"))
        return records

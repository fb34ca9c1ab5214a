import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from sales_insights.analytics.pipeline import Pipeline
from sales_insights.analytics.predicates import Predicate
from sales_insights.core.exceptions import StoreUnavailableError
from sales_insights.core.logging import get_logger
from sales_insights.repositories.frame_evaluator import count_records, run_pipeline, select_records

logger = get_logger("sales_insights.repositories.local")


class LocalRepository:
    """Transaction store backed by a single JSON file.

    Each read loads a fresh snapshot of the file, so concurrent reads never
    share mutable state.
    """

    FILENAME = "transactions.json"

    def __init__(self, base_dir: Path | None = None) -> None:
        self.data_dir = base_dir or Path(__file__).resolve().parents[2] / "data"
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.path = self.data_dir / self.FILENAME

    def query(
        self,
        predicate: Predicate,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        return select_records(self._load(), predicate, skip=skip, limit=limit)

    def count(self, predicate: Predicate) -> int:
        return count_records(self._load(), predicate)

    def aggregate(self, predicate: Predicate, pipeline: Pipeline) -> list[dict[str, Any]]:
        return run_pipeline(self._load(), predicate, pipeline)

    def replace_all(self, records: list[dict[str, Any]]) -> int:
        payload = json.dumps(records, ensure_ascii=False, indent=2)
        try:
            # Write beside the target and swap, so readers never see a partial file.
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error(f"Failed to write {self.path}: {e}")
            raise StoreUnavailableError(
                "Local transaction store is not writable.",
                details={"path": str(self.path), "error": str(e)},
            ) from e
        logger.info(f"Stored {len(records)} transactions in {self.path}")
        return len(records)

    def _load(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            logger.warning(f"No transaction file at {self.path}; treating store as empty")
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {self.path}: {e}")
            raise StoreUnavailableError(
                "Local transaction store could not be read.",
                details={"path": str(self.path), "error": str(e)},
            ) from e
        if not isinstance(data, list):
            raise StoreUnavailableError(
                "Local transaction store is corrupt: expected a JSON array.",
                details={"path": str(self.path)},
            )
        return data

"""
Firestore Repository

Transaction store backed by a Firestore collection.

Data Structure:
    transactions/{transaction_id}  - One document per Transaction

Firestore cannot filter on the month of a timestamp, so each read streams a
snapshot of the collection and evaluates the predicate/pipeline with pandas.
"""

from typing import Any, Optional

import firebase_admin
from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from sales_insights.analytics.pipeline import Pipeline
from sales_insights.analytics.predicates import Predicate
from sales_insights.core.exceptions import StoreUnavailableError
from sales_insights.core.logging import get_logger
from sales_insights.repositories.frame_evaluator import count_records, run_pipeline, select_records

logger = get_logger("sales_insights.repositories.firestore")


class FirestoreRepository:
    """Repository using Firestore for transaction persistence."""

    # Firestore batch write limit
    BATCH_SIZE = 500

    def __init__(self, collection: str = "transactions", db: Any = None) -> None:
        if db is None:
            # Initialize Firebase Admin SDK with Application Default Credentials
            if not firebase_admin._apps:
                firebase_admin.initialize_app()
            db = firestore.client()

        self.db = db
        self.collection = collection

    def query(
        self,
        predicate: Predicate,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        return select_records(self._snapshot(), predicate, skip=skip, limit=limit)

    def count(self, predicate: Predicate) -> int:
        return count_records(self._snapshot(), predicate)

    def aggregate(self, predicate: Predicate, pipeline: Pipeline) -> list[dict[str, Any]]:
        return run_pipeline(self._snapshot(), predicate, pipeline)

    def replace_all(self, records: list[dict[str, Any]]) -> int:
        """
        Delete every document in the collection, then write `records`.

        Args:
            records: Transaction documents; each must carry an 'id'

        Returns:
            Number of documents written
        """
        collection_ref = self.db.collection(self.collection)
        try:
            self._delete_collection(collection_ref)

            # Process in batches to stay within Firestore limits
            for i in range(0, len(records), self.BATCH_SIZE):
                batch = self.db.batch()
                for idx, record in enumerate(records[i:i + self.BATCH_SIZE]):
                    # _index keeps the feed order as the natural query order
                    doc = dict(record, _index=i + idx)
                    batch.set(collection_ref.document(str(record["id"])), doc)
                batch.commit()
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Firestore write failed: {e}")
            raise StoreUnavailableError(
                "Firestore is unavailable for writes.",
                details={"collection": self.collection, "error": str(e)},
            ) from e

        logger.info(f"Wrote {len(records)} transactions to Firestore collection '{self.collection}'")
        return len(records)

    def _snapshot(self) -> list[dict[str, Any]]:
        """Load all documents ordered by their feed position."""
        try:
            docs = self.db.collection(self.collection).order_by("_index").stream()
            records = []
            for doc in docs:
                record = doc.to_dict()
                record.pop("_index", None)
                records.append(record)
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Firestore read failed: {e}")
            raise StoreUnavailableError(
                "Firestore is unavailable.",
                details={"collection": self.collection, "error": str(e)},
            ) from e
        return records

    def _delete_collection(self, collection_ref, batch_size: int = BATCH_SIZE) -> None:
        """Delete all documents in a collection."""
        while True:
            docs = list(collection_ref.limit(batch_size).stream())
            for doc in docs:
                doc.reference.delete()
            if len(docs) < batch_size:
                return

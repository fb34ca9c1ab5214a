"""Unit tests for the local and Firestore transaction stores."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as google_exceptions

from sales_insights.analytics.aggregations import STATISTICS_PIPELINE
from sales_insights.analytics.predicates import MonthEquals
from sales_insights.core.exceptions import StoreUnavailableError
from sales_insights.repositories.local_repo import LocalRepository

MARCH = MonthEquals("dateOfSale", 3)


class TestLocalRepository:
    """Tests for the JSON file store."""

    def test_missing_file_is_empty_store(self, tmp_path):
        repo = LocalRepository(tmp_path)
        assert repo.query(MARCH) == []
        assert repo.count(MARCH) == 0
        assert repo.aggregate(MARCH, STATISTICS_PIPELINE) == []

    def test_replace_all_round_trips_records(self, tmp_path, march_records):
        repo = LocalRepository(tmp_path)
        assert repo.replace_all(march_records) == len(march_records)
        assert json.loads(repo.path.read_text(encoding="utf-8")) == march_records
        assert repo.count(MARCH) == 4

    def test_replace_all_overwrites(self, local_repo):
        local_repo.replace_all([])
        assert local_repo.count(MARCH) == 0
        assert list(local_repo.data_dir.glob("*.tmp")) == []

    def test_corrupt_file_raises_store_unavailable(self, tmp_path):
        repo = LocalRepository(tmp_path)
        repo.path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreUnavailableError) as exc_info:
            repo.count(MARCH)
        assert exc_info.value.kind == "store_unavailable"

    def test_non_array_file_raises_store_unavailable(self, tmp_path):
        repo = LocalRepository(tmp_path)
        repo.path.write_text('{"id": 1}', encoding="utf-8")
        with pytest.raises(StoreUnavailableError):
            repo.query(MARCH)


def _doc(data: dict) -> MagicMock:
    doc = MagicMock()
    doc.to_dict.return_value = dict(data)
    return doc


class TestFirestoreRepository:
    """Tests for the Firestore store with a mocked client."""

    @pytest.fixture
    def mock_db(self, march_records):
        db = MagicMock()
        collection = db.collection.return_value
        docs = [_doc(dict(record, _index=idx)) for idx, record in enumerate(march_records)]
        collection.order_by.return_value.stream.return_value = docs
        collection.limit.return_value.stream.return_value = []
        return db

    @pytest.fixture
    def repo(self, mock_db):
        from sales_insights.repositories.firestore_repo import FirestoreRepository

        return FirestoreRepository(collection="transactions", db=mock_db)

    def test_query_strips_internal_index(self, repo, mock_db):
        records = repo.query(MARCH, skip=0, limit=2)
        assert [r["id"] for r in records] == [1, 2]
        assert all("_index" not in r for r in records)
        mock_db.collection.assert_called_with("transactions")
        mock_db.collection.return_value.order_by.assert_called_with("_index")

    def test_count_and_aggregate(self, repo):
        assert repo.count(MARCH) == 4
        rows = repo.aggregate(MARCH, STATISTICS_PIPELINE)
        assert rows[0]["totalSaleAmount"] == 1249.0

    def test_read_failure_raises_store_unavailable(self, repo, mock_db):
        stream = mock_db.collection.return_value.order_by.return_value.stream
        stream.side_effect = google_exceptions.ServiceUnavailable("firestore down")
        with pytest.raises(StoreUnavailableError) as exc_info:
            repo.count(MARCH)
        assert exc_info.value.details["collection"] == "transactions"

    def test_replace_all_writes_in_batches(self, repo, mock_db):
        records = [{"id": i, "price": 1} for i in range(1201)]
        assert repo.replace_all(records) == 1201
        batch = mock_db.batch.return_value
        assert batch.commit.call_count == 3
        assert batch.set.call_count == 1201
        _, written = batch.set.call_args_list[0].args
        assert written["_index"] == 0

    def test_replace_all_deletes_existing_documents(self, repo, mock_db):
        existing = [MagicMock(), MagicMock()]
        mock_db.collection.return_value.limit.return_value.stream.return_value = existing
        repo.replace_all([])
        for doc in existing:
            doc.reference.delete.assert_called_once()

    def test_write_failure_raises_store_unavailable(self, repo, mock_db):
        mock_db.batch.return_value.commit.side_effect = google_exceptions.DeadlineExceeded("slow")
        with pytest.raises(StoreUnavailableError):
            repo.replace_all([{"id": 1}])

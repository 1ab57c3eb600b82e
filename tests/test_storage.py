"""
Tests for the Chroma vector store, local file store and fail-soft metrics
"""

import pytest

from chat_agent.infra.file_store import LocalFileStore
from chat_agent.infra.vector_store import VectorStore, collection_name_for
from chat_agent.models.domain import DocumentChunk
from chat_agent.utils.metrics import get_metrics_summary, record_degradation, reset_metrics


def chunk(owner, index, text, embedding):
    return DocumentChunk(
        id=f"{owner}-doc-{index}",
        owner_user_id=owner,
        source_file_name="doc.txt",
        chunk_index=index,
        text=text,
        embedding=embedding,
    )


@pytest.fixture
def vector_store(tmp_path):
    return VectorStore(persist_directory=tmp_path / "chroma")


class TestVectorStore:
    def test_query_orders_by_similarity(self, vector_store):
        vector_store.upsert("user-1", [
            chunk(1, 0, "north", [1.0, 0.0, 0.0]),
            chunk(1, 1, "east", [0.0, 1.0, 0.0]),
            chunk(1, 2, "north-east", [0.7, 0.7, 0.0]),
        ])

        matches = vector_store.query("user-1", [1.0, 0.0, 0.0], top_k=2)
        assert [m.id for m in matches] == ["1-doc-0", "1-doc-2"]
        assert matches[0].score == pytest.approx(1.0, abs=1e-4)
        assert matches[0].metadata["text"] == "north"
        assert matches[0].metadata["userId"] == 1
        assert matches[0].metadata["chunkIndex"] == 0

    def test_namespaces_are_isolated(self, vector_store):
        vector_store.upsert("user-1", [chunk(1, 0, "mine", [1.0, 0.0, 0.0])])
        assert vector_store.query("user-2", [1.0, 0.0, 0.0], top_k=5) == []

    def test_upsert_overwrites_same_id(self, vector_store):
        vector_store.upsert("user-1", [chunk(1, 0, "old", [1.0, 0.0, 0.0])])
        vector_store.upsert("user-1", [chunk(1, 0, "new", [1.0, 0.0, 0.0])])
        assert vector_store.count("user-1") == 1
        assert vector_store.query("user-1", [1.0, 0.0, 0.0], top_k=1)[0].metadata["text"] == "new"

    def test_top_k_larger_than_namespace(self, vector_store):
        vector_store.upsert("user-1", [chunk(1, 0, "only", [0.0, 0.0, 1.0])])
        assert len(vector_store.query("user-1", [0.0, 0.0, 1.0], top_k=10)) == 1

    def test_delete_namespace(self, vector_store):
        vector_store.upsert("user-1", [chunk(1, 0, "gone", [1.0, 0.0, 0.0])])
        vector_store.delete_namespace("user-1")
        assert vector_store.count("user-1") == 0

    def test_collection_names(self):
        assert collection_name_for("user-42") == "user-42"
        assert collection_name_for("a") == "ns_a"
        assert collection_name_for("team docs/2025") == "team_docs_2025"


class TestLocalFileStore:
    def test_upload_keeps_extension(self, tmp_path):
        store = LocalFileStore(upload_dir=tmp_path, url_prefix="/uploads/")
        url = store.upload(b"ID3", "ai-response-1.MP3", "audio/mpeg")

        assert url.startswith("/uploads/")
        assert url.endswith(".mp3")
        assert (tmp_path / url.rsplit("/", 1)[1]).read_bytes() == b"ID3"

    def test_empty_upload_stores_nothing(self, tmp_path):
        store = LocalFileStore(upload_dir=tmp_path, url_prefix="/uploads")
        assert store.upload(b"", "empty.wav", "audio/wav") is None
        assert list(tmp_path.iterdir()) == []


class TestMetrics:
    def test_counts_by_component_and_reason(self):
        record_degradation("tool:sendEmail", "exception")
        record_degradation("tool:sendEmail", "exception")
        record_degradation("orchestrator", "ceiling")

        summary = get_metrics_summary()
        assert summary["total_degradations"] == 3
        assert summary["by_component"] == {
            "tool:sendEmail": {"exception": 2},
            "orchestrator": {"ceiling": 1},
        }

    def test_reset(self):
        record_degradation("voice", "synthesis")
        reset_metrics()
        assert get_metrics_summary() == {"total_degradations": 0, "by_component": {}}

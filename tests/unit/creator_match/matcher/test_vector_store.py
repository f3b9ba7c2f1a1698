"""
Unit tests for the embedding column / ANN index health checks.

The repository is a MagicMock so each test can assert exactly which DDL
would have been issued.
"""
import pytest
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from creator_match.config_loader import VectorStoreConfig
from creator_match.exceptions import SchemaError
from creator_match.matcher.vector_store import VectorStore

HNSW_DEFINITION = (
    "CREATE INDEX creators_profile_embedding_idx ON public.creators "
    "USING hnsw (((profile_embedding)::halfvec(3)) halfvec_cosine_ops) WITH (m='16', ef_construction='64')"
)


@pytest.fixture
def repo():
    mock = MagicMock()
    mock.get_column_type.return_value = "vector(3)"
    mock.get_index_definition.return_value = HNSW_DEFINITION
    return mock


@pytest.fixture
def store(repo):
    return VectorStore(repo, VectorStoreConfig(hnsw_m=16, hnsw_ef_construction=64), dimensions=3)


class TestEnsureEmbeddingColumn:

    def test_existing_column_left_alone(self, store, repo):
        assert store.ensure_embedding_column() is False
        repo.add_embedding_column.assert_not_called()

    def test_missing_column_created(self, store, repo):
        repo.get_column_type.return_value = None

        assert store.ensure_embedding_column() is True
        repo.add_embedding_column.assert_called_once_with("creators", "profile_embedding", 3)

    def test_wrong_dimension_raises(self, store, repo):
        repo.get_column_type.return_value = "vector(1536)"

        with pytest.raises(SchemaError, match="vector\\(1536\\)"):
            store.ensure_embedding_column()
        repo.add_embedding_column.assert_not_called()


class TestEnsureIndex:

    def test_correct_index_no_ddl(self, store, repo):
        assert store.ensure_index() is False
        repo.drop_index.assert_not_called()
        repo.create_index.assert_not_called()

    def test_missing_index_created_with_hnsw_params(self, store, repo):
        repo.get_index_definition.return_value = None

        assert store.ensure_index() is True
        repo.drop_index.assert_not_called()
        repo.create_index.assert_called_once_with(
            "creators",
            "creators_profile_embedding_idx",
            "profile_embedding",
            "hnsw",
            "halfvec_cosine_ops",
            {'m': 16, 'ef_construction': 64},
            cast_type="halfvec",
            dimensions=3
        )

    def test_wrong_operator_class_dropped_and_recreated(self, store, repo):
        repo.get_index_definition.return_value = HNSW_DEFINITION.replace("halfvec_cosine_ops", "halfvec_l2_ops")

        assert store.ensure_index() is True
        repo.drop_index.assert_called_once_with("creators_profile_embedding_idx")
        repo.create_index.assert_called_once()

    def test_wrong_method_dropped_and_recreated(self, store, repo):
        repo.get_index_definition.return_value = HNSW_DEFINITION.replace("hnsw", "ivfflat")

        assert store.ensure_index() is True
        repo.drop_index.assert_called_once()

    def test_raw_vector_index_rebuilt_as_halfvec(self, store, repo):
        repo.get_index_definition.return_value = (
            "CREATE INDEX creators_profile_embedding_idx ON public.creators "
            "USING hnsw (profile_embedding vector_cosine_ops)"
        )

        assert store.ensure_index() is True
        repo.drop_index.assert_called_once()
        assert repo.create_index.call_args.kwargs == {'cast_type': 'halfvec', 'dimensions': 3}

    def test_cast_dimension_change_rebuilds(self, repo):
        store = VectorStore(repo, VectorStoreConfig(), dimensions=4)
        repo.get_column_type.return_value = "vector(4)"

        assert store.ensure_index() is True
        repo.drop_index.assert_called_once()

    def test_raw_vector_index_when_cast_disabled(self, repo):
        repo.get_index_definition.return_value = (
            "CREATE INDEX creators_profile_embedding_idx ON public.creators "
            "USING hnsw (profile_embedding vector_cosine_ops)"
        )
        config = VectorStoreConfig(index_cast=None, operator_class="vector_cosine_ops")

        assert VectorStore(repo, config, dimensions=3).ensure_index() is False

    def test_ivfflat_gets_no_hnsw_params(self, repo):
        repo.get_index_definition.return_value = None
        store = VectorStore(repo, VectorStoreConfig(index_method="ivfflat", hnsw_m=16), dimensions=3)

        store.ensure_index()

        assert repo.create_index.call_args.args[-1] is None


class TestEnsureIndexHealth:

    def test_healthy_schema_is_idempotent(self, store, repo):
        store.ensure_index_health()
        store.ensure_index_health()

        assert repo.ensure_vector_extension.call_count == 2
        repo.add_embedding_column.assert_not_called()
        repo.drop_index.assert_not_called()
        repo.create_index.assert_not_called()

    def test_database_error_wrapped(self, store, repo):
        repo.ensure_vector_extension.side_effect = OperationalError("CREATE EXTENSION", {}, Exception("denied"))

        with pytest.raises(SchemaError) as exc_info:
            store.ensure_index_health()
        assert isinstance(exc_info.value.__cause__, OperationalError)


def test_stats(repo):
    repo.count_creators.side_effect = lambda embedded_only=False: 4 if embedded_only else 10

    assert VectorStore(repo).stats() == {
        'total_creators': 10,
        'embedded_creators': 4,
        'missing_embeddings': 6,
    }

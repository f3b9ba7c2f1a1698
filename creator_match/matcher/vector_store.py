#!/usr/bin/env python3
"""
Vector Store - keeps the creator embedding column and its ANN index healthy.

Both checks are idempotent: when the schema already matches the configuration
no DDL is issued. A column of the wrong type is never altered in place; that
requires a migration, so it raises SchemaError instead.
"""

import logging
import re
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from creator_match.config_loader import VectorStoreConfig
from creator_match.exceptions import SchemaError

logger = logging.getLogger(__name__)


class VectorStore:
    """Bootstrap and health checks for the creator embedding storage.

    Args:
        repo: CreatorRepository bound to an open session
        config: Table/column/index settings
        dimensions: Vector length the embedding provider produces
    """

    def __init__(self, repo, config: Optional[VectorStoreConfig] = None, dimensions: int = 3072):
        self.repo = repo
        self.config = config or VectorStoreConfig()
        self.dimensions = dimensions

    @property
    def expected_column_type(self) -> str:
        return f"vector({self.dimensions})"

    def ensure_embedding_column(self) -> bool:
        """
        Create the vector column when it is missing.

        Returns:
            True if the column was created

        Raises:
            SchemaError: the column exists with another type or dimension
        """
        cfg = self.config
        current = self.repo.get_column_type(cfg.table, cfg.column)

        if current is None:
            logger.info(f"{cfg.table}.{cfg.column} not found, creating {self.expected_column_type}")
            self.repo.add_embedding_column(cfg.table, cfg.column, self.dimensions)
            return True

        if current != self.expected_column_type:
            raise SchemaError(
                f"{cfg.table}.{cfg.column} is {current}, expected {self.expected_column_type}"
            )

        logger.debug(f"{cfg.table}.{cfg.column} already {current}")
        return False

    def _index_target(self) -> str:
        """Indexed column or cast expression, as pg_indexes renders it minus parentheses."""
        cfg = self.config
        if cfg.index_cast is None:
            return cfg.column
        return f"{cfg.column}::{cfg.index_cast}{self.dimensions}"

    def index_matches(self, index_definition: str) -> bool:
        cfg = self.config
        # pg_indexes wraps expressions and casts in varying parentheses
        flat = re.sub(r"[()]", "", index_definition)
        return (
            f"USING {cfg.index_method}" in flat
            and f" {self._index_target()} {cfg.operator_class}" in flat
        )

    def _index_params(self) -> Dict[str, int]:
        params = {}
        if self.config.hnsw_m is not None:
            params['m'] = self.config.hnsw_m
        if self.config.hnsw_ef_construction is not None:
            params['ef_construction'] = self.config.hnsw_ef_construction
        return params

    def ensure_index(self) -> bool:
        """
        Make sure the ANN index exists with the configured method and operator class.

        A misconfigured index is dropped and recreated.

        Returns:
            True if the index was (re)created
        """
        cfg = self.config
        definition = self.repo.get_index_definition(cfg.table, cfg.index_name)

        if definition is not None:
            if self.index_matches(definition):
                logger.debug(f"Index {cfg.index_name} already correct")
                return False
            logger.warning(
                f"Index {cfg.index_name} is not {cfg.index_method}/{cfg.operator_class} "
                f"({definition}); dropping and recreating"
            )
            self.repo.drop_index(cfg.index_name)

        logger.info(f"Creating {cfg.index_method} index {cfg.index_name} on {cfg.table}.{cfg.column}")
        self.repo.create_index(
            cfg.table,
            cfg.index_name,
            cfg.column,
            cfg.index_method,
            cfg.operator_class,
            self._index_params() if cfg.index_method == 'hnsw' else None,
            cast_type=cfg.index_cast,
            dimensions=self.dimensions
        )
        return True

    def ensure_index_health(self) -> None:
        """
        Extension, column and index bootstrap in one call.

        Raises:
            SchemaError: on a wrong column type or any database failure
        """
        try:
            self.repo.ensure_vector_extension()
            self.ensure_embedding_column()
            self.ensure_index()
        except SQLAlchemyError as e:
            logger.error(f"Vector store bootstrap failed: {e}")
            raise SchemaError(f"Vector store bootstrap failed: {e}") from e

    def stats(self) -> Dict[str, int]:
        total = self.repo.count_creators()
        embedded = self.repo.count_creators(embedded_only=True)
        return {
            'total_creators': total,
            'embedded_creators': embedded,
            'missing_embeddings': total - embedded,
        }

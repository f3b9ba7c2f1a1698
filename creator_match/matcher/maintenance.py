#!/usr/bin/env python3
"""
Embedding Maintenance - fills in missing creator embeddings.

Creators are processed one at a time, each in its own unit of work, so a
failure on one creator never rolls back another creator's vector. Failures
are logged and counted; the batch always runs to the end.
"""

import logging
import time
from typing import Callable, ContextManager, Optional

from creator_match.config_loader import MaintenanceConfig
from creator_match.exceptions import DataError
from creator_match.llm.interfaces import EmbeddingProvider
from creator_match.matcher.models import MaintenanceReport
from creator_match.matcher.profile_text import build_profile_text

logger = logging.getLogger(__name__)


class EmbeddingMaintenanceJob:
    """
    Generates and stores embeddings for creators that have none.

    Args:
        uow_factory: Callable returning a context manager that yields a
            CreatorRepository and commits on clean exit (e.g. creator_uow)
        provider: Embedding provider
        config: Inter-call delay and progress interval
        sleep: Injected for tests
    """

    def __init__(
        self,
        uow_factory: Callable[[], ContextManager],
        provider: EmbeddingProvider,
        config: Optional[MaintenanceConfig] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.uow_factory = uow_factory
        self.provider = provider
        self.config = config or MaintenanceConfig()
        self._sleep = sleep

    def embed_creator(self, creator_id: int) -> bool:
        """
        Regenerate one creator's embedding from its current record.

        Returns:
            True if a vector was stored, False if the profile text was empty

        Raises:
            DataError: unknown creator or a vector of the wrong length
            ProviderError: the embedding call failed
        """
        with self.uow_factory() as repo:
            record = repo.get_creator_record(creator_id)
            if record is None:
                raise DataError(f"Creator {creator_id} not found")

            profile_text = build_profile_text(record)
            if not profile_text.strip():
                logger.warning(f"Skipping creator {creator_id}: empty profile text")
                return False

            embedding = self.provider.generate_embedding(profile_text)
            if len(embedding) != self.provider.dimensions:
                raise DataError(
                    f"Embedding for creator {creator_id} has {len(embedding)} dimensions, "
                    f"expected {self.provider.dimensions}"
                )

            if not repo.save_creator_embedding(creator_id, embedding):
                raise DataError(f"Creator {creator_id} disappeared before its embedding was saved")

            logger.debug(f"Stored embedding for creator {creator_id} ({len(profile_text)} chars)")
            return True

    def run(self) -> MaintenanceReport:
        """Embed every creator whose profile_embedding is NULL."""
        with self.uow_factory() as repo:
            creator_ids = repo.get_creator_ids_without_embedding()

        report = MaintenanceReport()
        total = len(creator_ids)
        logger.info(f"Found {total} creators without embeddings")

        if total == 0:
            return report

        for position, creator_id in enumerate(creator_ids, start=1):
            report.attempted += 1
            try:
                if self.embed_creator(creator_id):
                    report.succeeded += 1
                else:
                    report.skipped += 1
            except Exception as e:
                report.failed += 1
                report.errors[creator_id] = str(e)
                logger.error(f"Embedding failed for creator {creator_id}: {e}")

            if position % self.config.progress_every == 0 or position == total:
                logger.info(
                    f"Progress: {position}/{total} creators processed "
                    f"({round(position / total * 100)}%). Succeeded: {report.succeeded}, "
                    f"skipped: {report.skipped}, failed: {report.failed}"
                )

            if position < total and self.config.delay_seconds > 0:
                self._sleep(self.config.delay_seconds)

        logger.info(
            f"Embedding maintenance finished: attempted={report.attempted} "
            f"succeeded={report.succeeded} skipped={report.skipped} failed={report.failed}"
        )
        return report

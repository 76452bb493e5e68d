"""
Sync pipeline orchestrating discovery, polling, processing, indexing and
checkpoint advancement for every configured source
"""
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from ..config import SyncSettings
from ..exceptions import FailureKind, SyncException
from ..models.schemas import SourceConfig, SourceResult, SourceStatus, SyncRunResult
from ..processors import RowProcessor
from ..services import ChangelogService, CheckpointStore, SearchIndexService
from ..utils.timestamps import utc_now


logger = logging.getLogger(__name__)


class SyncPipeline:
    """One run: DISCOVER_SOURCES, then POLL, PROCESS, INDEX, ADVANCE per source"""

    def __init__(
        self,
        settings: SyncSettings,
        checkpoint_store: CheckpointStore,
        changelog_service: ChangelogService,
        row_processor: RowProcessor,
        search_index_service: SearchIndexService
    ):
        """
        Initialize sync pipeline

        Args:
            settings: Sync settings
            checkpoint_store: Source configurations and checkpoints
            changelog_service: Changelog poller
            row_processor: Row to document conversion
            search_index_service: Bulk index writer
        """
        self.settings = settings
        self.checkpoint_store = checkpoint_store
        self.changelog_service = changelog_service
        self.row_processor = row_processor
        self.search_index_service = search_index_service

        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

        logger.info(" SyncPipeline initialized")

    def run(self) -> SyncRunResult:
        """
        Run one pass over every discovered source

        Never raises; every failure is recorded in the result.

        Returns:
            SyncRunResult: Per-source outcomes
        """
        start_time = time.time()
        run_result = SyncRunResult(started_at=utc_now())

        try:
            sources = self.discover_sources(run_result)

            if not sources:
                logger.info("No source configurations found, nothing to sync")
            elif self.settings.max_workers > 1:
                with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
                    run_result.sources.extend(executor.map(self.sync_source, sources))
            else:
                for source in sources:
                    run_result.sources.append(self.sync_source(source))
        except Exception as e:
            logger.error("Unexpected error during sync run", exc_info=True)
            run_result.sources.append(SourceResult(
                index_name=self.settings.config_index_prefix,
                status=SourceStatus.FAILED,
                error=str(e),
                failure_kind=FailureKind.UNEXPECTED
            ))

        run_result.processing_time = time.time() - start_time
        self._log_summary(run_result)
        return run_result

    def discover_sources(self, run_result: Optional[SyncRunResult] = None) -> List[SourceConfig]:
        """
        Read source configurations from every configuration index

        An index that cannot be listed or read is recorded as a failed
        outcome in ``run_result`` and does not stop the others.

        Args:
            run_result: Run result collecting discovery failures

        Returns:
            list: Discovered sources
        """
        prefix = self.settings.config_index_prefix
        try:
            indices = self.checkpoint_store.list_config_indices(prefix)
        except SyncException as e:
            logger.error(f"Error listing configuration indices with prefix {prefix}: {e}")
            self._record_discovery_failure(run_result, prefix, e)
            return []

        logger.info(f"Found {len(indices)} configuration indices with prefix {prefix}")

        sources = []
        for index_name in indices:
            try:
                configs = self.checkpoint_store.fetch_source_configs(index_name)
            except SyncException as e:
                logger.error(f"Error reading source configurations from {index_name}: {e}")
                self._record_discovery_failure(run_result, index_name, e)
                continue
            logger.info(f"Found {len(configs)} sources in {index_name}")
            sources.extend(configs)

        return sources

    def sync_source(self, source: SourceConfig) -> SourceResult:
        """
        Sync one source; never raises

        The checkpoint is only advanced after every document of the poll
        has been written.

        Args:
            source: Source configuration as read at the start of the run

        Returns:
            SourceResult: Outcome of this source
        """
        start_time = time.time()
        result = SourceResult(
            index_name=source.index_name,
            config_id=source.id,
            table_name=source.table_name,
            field_name=source.field_name,
            status=SourceStatus.SUCCESS,
            checkpoint_before=source.last_checkpoint,
            checkpoint_after=source.last_checkpoint
        )

        lock = self._lock_for(source.source_key)
        if not lock.acquire(blocking=False):
            logger.warning(f"Source {source.source_key} is already being synced, skipping")
            result.status = SourceStatus.SKIPPED
            return result

        try:
            logger.info(f"Processing {source.table_name}.{source.field_name} ({source.field_type.value}) for {source.source_key}")

            batch = self.changelog_service.fetch_changes(source)
            result.rows_fetched = len(batch.rows)

            if not batch.has_changes:
                logger.info(f"No updated rows in {source.table_name}_changelog")
                result.status = SourceStatus.NO_CHANGES
                return result

            processed = self.row_processor.process_rows(batch.rows, source)
            result.rows_skipped = processed.rows_skipped

            if processed.documents:
                result.documents_indexed = self.search_index_service.push(
                    processed.documents,
                    source.destination_index
                )
            else:
                logger.info(f"No documents to index for {source.source_key}")

            result.checkpoint_advanced = self.checkpoint_store.advance_checkpoint(source, batch.new_checkpoint)
            if result.checkpoint_advanced:
                result.checkpoint_after = batch.new_checkpoint

        except SyncException as e:
            logger.error(f"Sync failed for {source.source_key} ({e.kind.value}): {e}")
            result.status = SourceStatus.FAILED
            result.error = str(e)
            result.failure_kind = e.kind
        except Exception as e:
            logger.error(f"Unexpected error syncing {source.source_key}", exc_info=True)
            result.status = SourceStatus.FAILED
            result.error = str(e)
            result.failure_kind = FailureKind.UNEXPECTED
        finally:
            lock.release()
            result.processing_time = time.time() - start_time

        logger.info(
            f" {source.source_key}: {result.status.value} "
            f"({result.rows_fetched} rows, {result.documents_indexed} documents) "
            f"in {result.processing_time:.2f}s"
        )
        return result

    def _lock_for(self, source_key: str) -> threading.Lock:
        with self._locks_guard:
            if source_key not in self._locks:
                self._locks[source_key] = threading.Lock()
            return self._locks[source_key]

    @staticmethod
    def _record_discovery_failure(run_result: Optional[SyncRunResult], index_name: str, error: SyncException):
        if run_result is None:
            return
        run_result.sources.append(SourceResult(
            index_name=index_name,
            status=SourceStatus.FAILED,
            error=str(error),
            failure_kind=error.kind
        ))

    def _log_summary(self, run_result: SyncRunResult):
        total_time = run_result.processing_time or 0.0

        logger.info("")
        logger.info("=" * 80)
        logger.info("📊 CHANGELOG SYNC SUMMARY")
        logger.info("=" * 80)
        logger.info(f"📈 Sources: {len(run_result.sources)}")
        logger.info(f" Synced: {run_result.count(SourceStatus.SUCCESS)}")
        logger.info(f"💤 No Changes: {run_result.count(SourceStatus.NO_CHANGES)}")
        logger.info(f"⏭️  Skipped: {run_result.count(SourceStatus.SKIPPED)}")
        logger.info(f" Failed: {run_result.count(SourceStatus.FAILED)}")
        logger.info(f"📄 Documents Indexed: {run_result.documents_indexed}")
        logger.info(f"⏱️  Total Time: {total_time:.2f}s")

        failures = [s for s in run_result.sources if s.status == SourceStatus.FAILED]
        if failures:
            logger.info("")
            logger.info("FAILED SOURCES:")
            for failure in failures:
                kind = failure.failure_kind.value if failure.failure_kind else "unknown"
                logger.info(f"   • {failure.index_name}/{failure.config_id or '-'} [{kind}]: {failure.error}")

        logger.info("=" * 80)
        logger.info("")

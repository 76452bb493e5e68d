#!/usr/bin/env python3
"""
Main entry point for the changelog indexer
Mirrors PostgreSQL changelog tables into the search index, once or on a fixed interval
"""
import argparse
import logging
import signal
import sys
import threading
from datetime import datetime

from .config import SyncSettings
from .exceptions import SyncException
from .parsers import ExtractorRegistry
from .pipeline import SyncPipeline
from .processors import ContentClassifier, RowProcessor, TextChunker
from .services import ChangelogService, CheckpointStore, S3Service, SearchIndexService


logger = logging.getLogger(__name__)


def configure_logging(settings: SyncSettings):
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def build_pipeline(settings: SyncSettings) -> SyncPipeline:
    """
    Wire every service from one settings object

    Raises:
        SyncException: If a service cannot be initialized
    """
    storage_service = S3Service(settings) if settings.stage_binary_originals else None

    row_processor = RowProcessor(
        registry=ExtractorRegistry(),
        classifier=ContentClassifier(),
        chunker=TextChunker(settings.chunk_size),
        storage_service=storage_service,
        stage_binary_originals=settings.stage_binary_originals,
        delete_chunk_span=settings.delete_chunk_span
    )

    return SyncPipeline(
        settings=settings,
        checkpoint_store=CheckpointStore(settings),
        changelog_service=ChangelogService(settings),
        row_processor=row_processor,
        search_index_service=SearchIndexService(settings)
    )


def check_services(pipeline: SyncPipeline):
    """
    Fail fast when the checkpoint store or the staging bucket is unreachable

    Raises:
        SyncException: If a service check fails
    """
    logger.info("🔍 Checking service connections...")
    pipeline.checkpoint_store.check_connection()
    logger.info("✅ Elasticsearch reachable")

    storage_service = pipeline.row_processor.storage_service
    if storage_service is not None:
        storage_service.check_connection()
        logger.info(f"✅ S3 bucket {storage_service.bucket_name} reachable")


class SyncRunner:
    """Runs the pipeline once or every ``sync_interval_minutes``"""

    def __init__(self, pipeline: SyncPipeline, interval_minutes: int):
        self.pipeline = pipeline
        self.interval_seconds = interval_minutes * 60
        self._stop = threading.Event()

    def run_forever(self):
        logger.info(f"⏱️  Sync interval: {self.interval_seconds // 60} minutes")
        logger.info("✨ Service is running. Press Ctrl+C to stop.")
        while not self._stop.is_set():
            self.pipeline.run()
            self._stop.wait(self.interval_seconds)
        logger.info(f"📊 Session ended at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    def stop(self, signum=None, frame=None):
        if signum is not None:
            logger.info(f"Received signal {signum}")
        logger.info("🛑 Stopping changelog indexer...")
        self._stop.set()


def list_sources(pipeline: SyncPipeline):
    for source in pipeline.discover_sources():
        checkpoint = source.last_checkpoint or '(none)'
        print(
            f"{source.source_key}\t{source.database}.{source.table_name}.{source.field_name}"
            f"\t{source.field_type.value}\t-> {source.destination_index}\tupdatedAt={checkpoint}"
        )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Mirror PostgreSQL changelog tables into the search index"
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--once', action='store_true', help="Run a single sync pass and exit")
    mode.add_argument('--list-sources', action='store_true', help="Print discovered sources and exit")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)

    try:
        settings = SyncSettings.from_env()
        configure_logging(settings)
        settings.validate_settings()
    except SyncException as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f" Configuration validation failed: {e}")
        logger.error("Please check your .env file and ensure all required variables are set")
        sys.exit(1)

    logger.info("=" * 60)
    logger.info("🚀 Starting Changelog Indexer")
    logger.info("=" * 60)
    settings.log_config()

    try:
        pipeline = build_pipeline(settings)
        check_services(pipeline)
    except SyncException as e:
        logger.error(f" Service initialization failed: {e}")
        sys.exit(1)

    if args.list_sources:
        list_sources(pipeline)
        return

    if args.once:
        pipeline.run()
        return

    runner = SyncRunner(pipeline, settings.sync_interval_minutes)
    signal.signal(signal.SIGINT, runner.stop)
    signal.signal(signal.SIGTERM, runner.stop)
    runner.run_forever()


if __name__ == "__main__":
    main()

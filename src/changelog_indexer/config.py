"""
Configuration for the changelog indexer
Loads all settings from .env file into one explicit settings object
"""
import os
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .exceptions import ConfigurationException


logger = logging.getLogger(__name__)

# Project root .env file
root_dir = Path(__file__).parent.parent.parent
DEFAULT_ENV_FILE = root_dir / '.env'


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == 'true'


class SyncSettings(BaseModel):
    """Settings shared by the pipeline and its services"""

    # Elasticsearch (source configurations and checkpoints)
    elasticsearch_host: str = 'localhost'
    elasticsearch_port: int = 9200
    elasticsearch_username: Optional[str] = None
    elasticsearch_password: Optional[str] = Field(default=None, repr=False)
    config_index_prefix: str = 'datasource_postgresql_connection_'
    config_fetch_size: int = 1000

    # Search index bulk endpoint (indexed documents)
    search_endpoint: Optional[str] = None
    search_api_key: Optional[str] = Field(default=None, repr=False)
    search_api_version: str = '2021-04-30-Preview'
    search_batch_size: int = 1000
    tenant_index_prefix: str = 'tenant_'

    # S3 (binary originals)
    s3_bucket_name: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = Field(default=None, repr=False)
    aws_region: str = 'us-east-1'
    s3_endpoint_url: Optional[str] = None
    s3_key_prefix: str = ''
    s3_public_base_url: Optional[str] = None
    stage_binary_originals: bool = True

    # Pipeline
    chunk_size: int = 30000
    delete_chunk_span: int = 100
    max_workers: int = 1
    sync_interval_minutes: int = 5
    db_sslmode: str = 'require'
    db_connect_timeout: int = 10
    http_timeout: int = 30

    # Logging
    log_level: str = 'INFO'
    log_file: Optional[str] = 'changelog_indexer.log'

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "SyncSettings":
        """
        Build settings from environment variables

        Args:
            env_file: Optional .env file, defaults to the project root .env

        Returns:
            SyncSettings: Loaded settings
        """
        load_dotenv(env_file or DEFAULT_ENV_FILE)

        try:
            return cls(
                elasticsearch_host=os.getenv('ELASTICSEARCH_HOST', 'localhost'),
                elasticsearch_port=int(os.getenv('ELASTICSEARCH_PORT', 9200)),
                elasticsearch_username=os.getenv('ELASTICSEARCH_USERNAME'),
                elasticsearch_password=os.getenv('ELASTICSEARCH_PASSWORD'),
                config_index_prefix=os.getenv('CONFIG_INDEX_PREFIX', 'datasource_postgresql_connection_'),
                config_fetch_size=int(os.getenv('CONFIG_FETCH_SIZE', 1000)),
                search_endpoint=os.getenv('SEARCH_ENDPOINT'),
                search_api_key=os.getenv('SEARCH_API_KEY'),
                search_api_version=os.getenv('SEARCH_API_VERSION', '2021-04-30-Preview'),
                search_batch_size=int(os.getenv('SEARCH_BATCH_SIZE', 1000)),
                tenant_index_prefix=os.getenv('TENANT_INDEX_PREFIX', 'tenant_'),
                s3_bucket_name=os.getenv('S3_BUCKET_NAME'),
                aws_access_key_id=os.getenv('AWS_ACCESS_KEY_ID'),
                aws_secret_access_key=os.getenv('AWS_SECRET_ACCESS_KEY'),
                aws_region=os.getenv('AWS_REGION', 'us-east-1'),
                s3_endpoint_url=os.getenv('S3_ENDPOINT_URL') or None,
                s3_key_prefix=os.getenv('S3_KEY_PREFIX', ''),
                s3_public_base_url=os.getenv('S3_PUBLIC_BASE_URL') or None,
                stage_binary_originals=_env_bool('STAGE_BINARY_ORIGINALS', 'true'),
                chunk_size=int(os.getenv('CHUNK_SIZE', 30000)),
                delete_chunk_span=int(os.getenv('DELETE_CHUNK_SPAN', 100)),
                max_workers=int(os.getenv('MAX_WORKERS', 1)),
                sync_interval_minutes=int(os.getenv('SYNC_INTERVAL_MINUTES', 5)),
                db_sslmode=os.getenv('DB_SSLMODE', 'require'),
                db_connect_timeout=int(os.getenv('DB_CONNECT_TIMEOUT', 10)),
                http_timeout=int(os.getenv('HTTP_TIMEOUT', 30)),
                log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
                log_file=os.getenv('LOG_FILE', 'changelog_indexer.log') or None
            )
        except ValueError as e:
            raise ConfigurationException("Invalid environment configuration", original_error=e)

    def validate_settings(self) -> bool:
        """Validate that all required configuration is present"""
        required_vars = [
            ('SEARCH_ENDPOINT', self.search_endpoint),
            ('SEARCH_API_KEY', self.search_api_key),
        ]
        if self.stage_binary_originals:
            required_vars.append(('S3_BUCKET_NAME', self.s3_bucket_name))

        missing = [var for var, val in required_vars if not val]
        if missing:
            raise ConfigurationException(f"Missing required environment variables: {', '.join(missing)}")

        positive = [
            ('CHUNK_SIZE', self.chunk_size),
            ('DELETE_CHUNK_SPAN', self.delete_chunk_span),
            ('MAX_WORKERS', self.max_workers),
            ('SYNC_INTERVAL_MINUTES', self.sync_interval_minutes),
            ('SEARCH_BATCH_SIZE', self.search_batch_size),
            ('CONFIG_FETCH_SIZE', self.config_fetch_size),
        ]
        invalid = [var for var, val in positive if val <= 0]
        if invalid:
            raise ConfigurationException(f"Settings must be positive: {', '.join(invalid)}")

        return True

    @property
    def elasticsearch_url(self) -> str:
        host = self.elasticsearch_host
        if host.startswith("http://") or host.startswith("https://"):
            return host.rstrip('/')
        return f"http://{host}:{self.elasticsearch_port}"

    def log_config(self):
        """Log current configuration (sensitive values masked)"""
        logger.info("=== Changelog Indexer Configuration ===")
        logger.info(f"Elasticsearch: {self.elasticsearch_url}")
        logger.info(f"Config Index Prefix: {self.config_index_prefix}")
        logger.info(f"Search Endpoint: {self.search_endpoint}")
        logger.info(f"Search API Key: {'***' if self.search_api_key else '(not set)'}")
        logger.info(f"Tenant Index Prefix: {self.tenant_index_prefix}")
        logger.info(f"S3 Bucket: {self.s3_bucket_name or '(not set)'}")
        logger.info(f"Stage Binary Originals: {self.stage_binary_originals}")
        logger.info(f"Chunk Size: {self.chunk_size}")
        logger.info(f"Max Workers: {self.max_workers}")
        logger.info(f"Sync Interval: {self.sync_interval_minutes} minutes")
        logger.info("=" * 40)

"""Services for the changelog sync pipeline"""

from .s3_service import S3Service, generate_preview_url
from .checkpoint_store import CheckpointStore
from .changelog_service import ChangelogService
from .search_index_service import SearchIndexService

__all__ = [
    "S3Service",
    "generate_preview_url",
    "CheckpointStore",
    "ChangelogService",
    "SearchIndexService"
]

"""Pipeline orchestration"""

from .sync_pipeline import SyncPipeline

__all__ = ["SyncPipeline"]

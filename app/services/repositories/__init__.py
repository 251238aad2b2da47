"""Repository listing and detail services."""

from app.services.repositories.detail_aggregator import RepositoryDetailAggregator
from app.services.repositories.list_service import RepositoryListService
from app.services.repositories.query_service import RepositoryQueryService
from app.services.repositories.scheduler import DetailScheduler, PendingTask, build_detail_scheduler

__all__ = [
    "RepositoryDetailAggregator",
    "RepositoryListService",
    "RepositoryQueryService",
    "DetailScheduler",
    "PendingTask",
    "build_detail_scheduler",
]

"""FastAPI application entry point"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional
import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from app.config.settings import settings
from app.github.errors import NotFoundError, UpstreamError
from app.services.repositories import RepositoryQueryService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

_query_service: Optional[RepositoryQueryService] = None


def get_query_service() -> RepositoryQueryService:
    """Shared query service (one GitHub client, one detail scheduler)."""
    global _query_service
    if _query_service is None:
        _query_service = RepositoryQueryService()
    return _query_service


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    global _query_service
    if _query_service is not None:
        await _query_service.aclose()
        _query_service = None


app = FastAPI(
    title=settings.APP_NAME,
    description="Aggregates GitHub repository metadata, file counts, YAML samples and webhooks",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# CORS configuration (browser client)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "endpoints": {
            "health": "/api/health",
            "stats": "/api/stats",
            "repositories": "GET /api/repositories",
            "repo_details": "GET /api/repositories/{owner}/{name}",
        }
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint for serverless platforms"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }


@app.get("/api/stats")
async def get_stats(service: RepositoryQueryService = Depends(get_query_service)):
    """Detail scheduler occupancy and counters"""
    return service.scheduler.stats()


@app.get("/api/repositories")
async def list_repositories(
    service: RepositoryQueryService = Depends(get_query_service),
) -> List[Dict[str, Any]]:
    """Repositories owned by the configured GitHub account (first page only)"""
    try:
        repositories = await service.repositories()
    except UpstreamError as e:
        logger.error(f"Error fetching repositories: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail="Failed to fetch repositories")
    return [repo.to_dict() for repo in repositories]


@app.get("/api/repositories/{owner}/{name}")
async def get_repo_details(
    owner: str,
    name: str,
    service: RepositoryQueryService = Depends(get_query_service),
) -> Dict[str, Any]:
    """Repository details; admitted through the bounded detail scheduler"""
    try:
        detail = await service.repo_details(owner, name)
    except NotFoundError as e:
        logger.info(f"Repository {owner}/{name} not found")
        raise HTTPException(status_code=404, detail=str(e))
    except UpstreamError as e:
        logger.error(f"Error fetching details for {owner}/{name}: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail=f"Failed to fetch repository details: {e.message}")
    return detail.to_dict()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=4000,
        reload=settings.DEBUG
    )

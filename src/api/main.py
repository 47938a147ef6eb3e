"""
FastAPI application for the embedding clustering service.

Exposes endpoints for:
- Health and metadata.
- k-means++ clustering of pre-computed embeddings.
- Clustering followed by per-cluster outlier detection.
- In-memory API performance metrics.
"""

import logging
from contextlib import asynccontextmanager
from time import perf_counter
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from src.clustering.config import get_api_config, get_cluster_options
from src.clustering.engine import cluster_embeddings_async
from src.clustering.outliers import detect_outliers
from src.clustering.types import ClusterOptions, ClusteringError, Point, partition_to_dict
from src.common.logging_utils import setup_logging
from src.monitoring.api_metrics import get_api_metrics_summary, record_api_request

setup_logging()
logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"
_defaults: ClusterOptions = get_cluster_options()
_rate_limit: str = get_api_config()["rate_limit"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    logger.info(
        "Clustering API started (default n_clusters=%d, rate limit %s)",
        _defaults.n_clusters,
        _rate_limit,
    )
    yield
    logger.info("Clustering API shutting down")


app = FastAPI(
    title="Embedding Clustering API",
    description="k-means++ clustering and outlier detection for text embeddings",
    version=API_VERSION,
    lifespan=lifespan,
)

# Rate limiting
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ClusterInputItem(BaseModel):
    """A text label with its embedding vector."""

    text: str
    embedding: List[float]


class ClusteringRequest(BaseModel):
    """Request body for k-means++ clustering."""

    model_config = ConfigDict(populate_by_name=True)

    inputs: List[ClusterInputItem]
    n_clusters: Optional[int] = Field(None, alias="nClusters")
    random_state: Optional[int] = Field(None, alias="randomState")


class OutlierClusteringRequest(ClusteringRequest):
    """Request body for clustering followed by outlier detection."""

    min_cluster_size: Optional[int] = Field(None, alias="minClusterSize")
    std_dev_threshold: Optional[float] = Field(None, alias="stdDevThreshold")


def _options_for(body: ClusteringRequest) -> ClusterOptions:
    """Request values override the config.yaml defaults."""
    opts = ClusterOptions(
        n_clusters=body.n_clusters or _defaults.n_clusters,
        min_cluster_size=_defaults.min_cluster_size,
        std_dev_threshold=_defaults.std_dev_threshold,
        max_iterations=_defaults.max_iterations,
        random_state=body.random_state if body.random_state is not None else _defaults.random_state,
    )
    if isinstance(body, OutlierClusteringRequest):
        if body.min_cluster_size is not None:
            opts.min_cluster_size = body.min_cluster_size
        if body.std_dev_threshold is not None:
            opts.std_dev_threshold = body.std_dev_threshold
    return opts


def _to_points(items: List[ClusterInputItem]) -> List[Point]:
    return [Point(text=item.text, embedding=item.embedding) for item in items]


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log incoming requests and responses with latency, and track metrics."""
    start = perf_counter()
    try:
        response = await call_next(request)
    except Exception:  # noqa: BLE001
        duration_ms = (perf_counter() - start) * 1000
        record_api_request(request.url.path, request.method, 500, duration_ms)
        logger.exception(
            "Unhandled error during request %s %s after %.2fms",
            request.method,
            request.url.path,
            duration_ms,
        )
        raise

    duration_ms = (perf_counter() - start) * 1000
    record_api_request(request.url.path, request.method, response.status_code, duration_ms)
    logger.info(
        "HTTP %s %s -> %s in %.2fms",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


@app.get("/")
async def root():
    """API info."""
    return {"message": "Embedding Clustering API", "version": API_VERSION}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/clustering/kmeanspp")
@limiter.limit(_rate_limit)
async def cluster_kmeanspp(request: Request, body: ClusteringRequest):
    """
    Group similar text embeddings with k-means++ clustering.

    The cluster count is clamped to 2-6 and never exceeds the number of inputs.
    """
    opts = _options_for(body)
    try:
        partition = await cluster_embeddings_async(_to_points(body.inputs), opts.clustering())
    except ClusteringError as exc:
        logger.warning("Rejected clustering request: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.exception("Clustering failed: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return partition_to_dict(partition)


@app.post("/clustering/outliers")
@limiter.limit(_rate_limit)
async def cluster_with_outliers(request: Request, body: OutlierClusteringRequest):
    """Cluster embeddings, then flag outliers within each cluster."""
    opts = _options_for(body)
    try:
        partition = await cluster_embeddings_async(_to_points(body.inputs), opts.clustering())
        partition = detect_outliers(partition, opts.outliers())
    except ClusteringError as exc:
        logger.warning("Rejected outlier-detection request: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.exception("Outlier detection failed: %s", exc)
        raise HTTPException(status_code=500, detail="Internal server error")
    return partition_to_dict(partition)


@app.get("/api/monitoring/metrics")
@limiter.limit(_rate_limit)
async def get_metrics(request: Request):
    """Get API performance metrics."""
    window_seconds = request.query_params.get("window_seconds")
    try:
        window = float(window_seconds) if window_seconds else None
    except ValueError:
        raise HTTPException(status_code=400, detail="window_seconds must be a number")
    return get_api_metrics_summary(window_seconds=window)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

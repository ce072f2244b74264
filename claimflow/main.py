"""
Claim Supplement Workflow & Commission Service

FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from claimflow.api import parties_router, router as claims_router, supplements_router
from claimflow.config import settings

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management."""
    logger.info("Starting Claim Supplement Workflow Service")
    yield
    logger.info("Shutting down Claim Supplement Workflow Service")


# Create FastAPI application
app = FastAPI(
    title="Claim Supplement Workflow Service",
    description="""
    Tracks insurance-claim supplements through the approval workflow and
    computes contractor billing and estimator commission.

    ## Features

    - **Workflow**: Claims move through a fixed status graph from missing_info to completed;
      illegal moves are rejected with the legal alternatives
    - **Suspension**: Any active claim can be suspended; resuming restarts triage
    - **Recalculation**: Approving, partially approving or denying a supplement recomputes
      the claim's value, increase, billing and commission from all of its supplements
    - **Commission types**: estimate, final invoice, reinspection (roof squares grew) or supplement

    ## Workflow

    1. Register a contractor and an estimator with `POST /contractors` and `POST /estimators`
    2. Create a claim with `POST /claims`
    3. Add supplements with `POST /claims/{id}/supplements`
    4. Approve or deny them with `POST /supplements/{id}/status`
    5. Move the claim along with `POST /claims/{id}/status`
    """,
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(parties_router)
app.include_router(claims_router)
app.include_router(supplements_router)


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with system info."""
    return {
        "system": "Claim Supplement Workflow Service",
        "version": "1.0.0",
        "status": "operational",
        "docs": "/docs"
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}

"""FastAPI routes - lean API for offer analysis, archive and comparison."""

import logging
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Field

from offer_engine.context import AppContext
from offer_engine.errors import ErrorKind, OfferEngineError, SelectionLimitExceeded
from offer_engine.models import AnalysisResult, CamelModel, OfferInput, SavedOffer
from offer_engine.ranking.comparison import ComparisonTable
from offer_engine.validation import validate_offer

LOGGER = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.INVALID_RESPONSE: 502,
    ErrorKind.ENGINE_UNAVAILABLE: 503,
    ErrorKind.STORAGE_CORRUPT: 500,
}


# Request/Response models
class SaveOfferRequest(CamelModel):
    """An analysis the user chose to keep."""
    input: OfferInput
    result: AnalysisResult


class CompareRequest(CamelModel):
    """Offer ids to compare, in column order."""
    ids: list[str] = Field(default_factory=list)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def create_app(context_factory: Callable[[], AppContext] = AppContext.create) -> FastAPI:
    """Build the API. The context is created in the lifespan, not at import."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifecycle."""
        app.state.context = context_factory()
        yield
        # Cleanup on shutdown
        await app.state.context.close()

    app = FastAPI(
        title="Offer Engine",
        description="Job offer analysis: net pay, cost of living, risk and a verdict",
        version="0.1.0",
        lifespan=lifespan
    )

    # CORS for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(OfferEngineError)
    async def engine_error_handler(request: Request, exc: OfferEngineError):
        LOGGER.warning("%s on %s: %s", exc.kind.value, request.url.path, exc.message)
        return JSONResponse(status_code=ERROR_STATUS.get(exc.kind, 500), content={"detail": exc.to_dict()})

    @app.exception_handler(SelectionLimitExceeded)
    async def selection_error_handler(request: Request, exc: SelectionLimitExceeded):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    # Routes
    @app.get("/")
    async def root():
        """Health check."""
        return {
            "status": "running",
            "service": "offer-engine",
            "description": "Job offer analysis and side-by-side comparison"
        }

    @app.get("/health")
    async def health(context: AppContext = Depends(get_context)):
        """Detailed health check."""
        config = context.settings
        return {
            "status": "healthy",
            "store": context.store.get_stats(),
            "config": {
                "provider": config.analysis_provider,
                "openai_configured": bool(config.openai_api_key),
                "perplexity_configured": bool(config.perplexity_api_key),
                "search_enabled": config.enable_search,
            }
        }

    @app.post("/analyze", response_model=AnalysisResult)
    async def analyze(offer: OfferInput, context: AppContext = Depends(get_context)):
        """Run one offer through the analysis engine."""
        return await context.client.analyze(offer)

    @app.get("/offers", response_model=list[SavedOffer])
    async def list_offers(context: AppContext = Depends(get_context)):
        """Archived analyses, newest first."""
        return context.store.list()

    @app.post("/offers", response_model=SavedOffer, status_code=201)
    async def save_offer(request: SaveOfferRequest, context: AppContext = Depends(get_context)):
        """Archive an analysis unless the same offer is already saved."""
        offer = validate_offer(request.input)
        existing = context.store.find_duplicate(offer)
        if existing:
            raise HTTPException(
                status_code=409,
                detail={"message": "Offer already saved", "id": existing.id}
            )
        return context.store.save(offer, request.result)

    @app.get("/offers/{offer_id}", response_model=SavedOffer)
    async def get_offer(offer_id: str, context: AppContext = Depends(get_context)):
        offer = context.store.get(offer_id)
        if not offer:
            raise HTTPException(status_code=404, detail="Offer not found")
        return offer

    @app.delete("/offers/{offer_id}")
    async def delete_offer(offer_id: str, context: AppContext = Depends(get_context)):
        if not context.store.delete(offer_id):
            raise HTTPException(status_code=404, detail="Offer not found")
        return {"status": "deleted", "id": offer_id}

    @app.delete("/offers")
    async def clear_offers(context: AppContext = Depends(get_context)):
        context.store.clear()
        return {"status": "cleared"}

    @app.post("/compare", response_model=ComparisonTable)
    async def compare(request: CompareRequest, context: AppContext = Depends(get_context)):
        """Side-by-side table for up to three archived offers."""
        return context.comparison.project(context.store.list(), request.ids)

    return app


app = create_app()

# Run with: uvicorn offer_engine.api.routes:app --reload

"""FastAPI service exposing the market analysis pipeline."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from marketlens.analysis.analyzer import Analyzer
from marketlens.api.schemas import ErrorResponse, HealthResponse, MarketAnalysisRequest
from marketlens.config import get_settings
from marketlens.database.db import close_db
from marketlens.exceptions import MarketLensError, NoModelAnalysesError
from marketlens.utils.logger import setup_logger

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

_analyzer: Optional[Analyzer] = None


def get_analyzer() -> Analyzer:
    """Get or create the analyzer singleton."""
    global _analyzer
    if _analyzer is None:
        _analyzer = Analyzer(get_settings())
    return _analyzer


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logger()
    yield
    global _analyzer
    if _analyzer is not None:
        _analyzer.price_client.close()
        _analyzer = None
    close_db()


app = FastAPI(title="MarketLens API", version="0.1.0", lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


def _error_json(message: str, status_code: int) -> JSONResponse:
    """Return consistent error JSON: { error }."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=CORS_HEADERS,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Rejected request to {request.url.path}: {exc.errors()}")
    return _error_json("Invalid request body", 400)


@app.exception_handler(MarketLensError)
async def marketlens_error_handler(request: Request, exc: MarketLensError) -> JSONResponse:
    logger.error(f"Error handling {request.url.path}: {exc}")
    return _error_json(str(exc), 500)


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    settings = get_settings()
    return HealthResponse(status="ok", models=[m.display_name for m in settings.analysis_models])


@app.options("/market-analysis")
def market_analysis_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@app.post("/market-analysis")
async def market_analysis(
    body: MarketAnalysisRequest,
    analyzer: Analyzer = Depends(get_analyzer),
) -> JSONResponse:
    """Run the multi-model analysis for one market."""
    if not body.market_title or not body.market_title.strip():
        return _error_json("Market title is required", 400)

    try:
        result = await analyzer.analyze(
            market_title=body.market_title,
            market_id=body.market_id or "",
            yes_percentage=body.yes_percentage,
            no_percentage=body.no_percentage,
            volume=body.volume_text,
            outcomes=body.outcomes,
        )
    except NoModelAnalysesError as e:
        return _error_json(str(e), 500)
    except Exception as e:
        logger.exception(f"Error in market analysis: {e}")
        return _error_json(str(e) or "Unknown error", 500)

    return JSONResponse(content=result.to_response_dict(), headers=CORS_HEADERS)

from datetime import datetime, timezone
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Depends, Path, status, APIRouter
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from slowapi import Limiter, _rate_limit_exceeded_handler, errors
from slowapi.util import get_remote_address

# Import core modules
import config
from core_logic import (
    logger, setup_logging, HumanIDError, CombinationOverflowError, UnknownWordError,
    SearchExhaustedError,
)
from encoding import Generator, get_generator
from models import (
    EncodePayload, DecodePayload, HumanIDResponse, DecodeResponse, CombinationsResponse,
)

# --- GLOBAL INSTANCES ---
limiter = Limiter(key_func=get_remote_address)

# --- LIFESPAN AND APP SETUP ---

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    setup_logging(config.LOG_LEVEL, config.LOG_FILE)
    try:
        config.config.validate()
        get_generator()
        logger.info("Application started successfully")
        yield
    finally:
        logger.info("Application shutdown complete")

# Main app instance
app = FastAPI(
    title="HumanID",
    lifespan=lifespan
)

# --- MIDDLEWARE ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(errors.RateLimitExceeded, _rate_limit_exceeded_handler)


# --- ERROR MAPPING ---

def status_for(exc: HumanIDError) -> int:
    if isinstance(exc, (UnknownWordError, SearchExhaustedError)):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, CombinationOverflowError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(HumanIDError)
async def humanid_error_handler(request: Request, exc: HumanIDError):
    code = status_for(exc)
    logger.warning(f"{request.method} {request.url.path} failed ({code}): {exc}")
    return JSONResponse(status_code=code, content={"detail": str(exc)})


# --- ROUTERS DEFINITION (API) ---

api_router = APIRouter(prefix="/api/v1", tags=["API"])


@api_router.get("/combinations/{adjectives}", response_model=CombinationsResponse)
@limiter.limit(config.RATE_LIMIT_COMBINATIONS)
async def api_combinations(
    request: Request,
    adjectives: int = Path(..., ge=0, description="Number of adjectives"),
    generator: Generator = Depends(get_generator),
):
    """Combination count and full domain size for an adjective count (0 when unusable)"""
    combinations = generator.max_combinations(adjectives)
    try:
        domain_size = generator.domain_size(adjectives)
    except HumanIDError:
        domain_size = 0
    return CombinationsResponse(adjectives=adjectives, combinations=combinations, domain_size=domain_size)


@api_router.post("/encode", response_model=HumanIDResponse)
@limiter.limit(config.RATE_LIMIT_ENCODE)
async def api_encode(
    request: Request,
    payload: EncodePayload,
    generator: Generator = Depends(get_generator),
):
    """Encode an index as a human ID"""
    if payload.scrambled:
        human_id = generator.encode_scrambled(payload.index, payload.adjectives)
    else:
        human_id = generator.encode(payload.index, payload.adjectives)
    return HumanIDResponse(
        human_id=human_id,
        index=payload.index,
        adjectives=payload.adjectives,
        scrambled=payload.scrambled,
    )


@api_router.post("/decode", response_model=DecodeResponse)
@limiter.limit(config.RATE_LIMIT_DECODE)
async def api_decode(
    request: Request,
    payload: DecodePayload,
    generator: Generator = Depends(get_generator),
):
    """Decode a human ID produced by the bijective encoder"""
    index = generator.decode(payload.human_id)
    return DecodeResponse(human_id=payload.human_id, index=index, scrambled=False)


# Plain def: the search is CPU bound and runs in the threadpool
@api_router.post("/decode/scrambled", response_model=DecodeResponse)
@limiter.limit(config.RATE_LIMIT_SCRAMBLED_DECODE)
def api_decode_scrambled(
    request: Request,
    payload: DecodePayload,
    generator: Generator = Depends(get_generator),
):
    """Decode a human ID produced by the scrambled encoder"""
    domain_size = generator.scrambled_domain_size(payload.human_id)
    if domain_size > config.MAX_SCRAMBLED_SEARCH_DOMAIN:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Scrambled decoding is limited to domains of {config.MAX_SCRAMBLED_SEARCH_DOMAIN} values",
        )
    index = generator.decode_from_scrambled(payload.human_id)
    return DecodeResponse(human_id=payload.human_id, index=index, scrambled=True)


# --- ROUTERS DEFINITION (SERVICE) ---

web_router = APIRouter()


@web_router.get("/health")
async def health_check(generator: Generator = Depends(get_generator)):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "adjectives": generator.word_bank.base_a,
        "nouns": generator.word_bank.base_n,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


app.include_router(api_router)
app.include_router(web_router)


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host="0.0.0.0", port=8000, log_level=config.LOG_LEVEL.lower())

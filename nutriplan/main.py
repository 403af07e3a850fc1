"""
NutriPlan API - Main Entry Point

AI-backed diet planning: meal plans, meal analysis, recipes and chat.
"""
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from nutriplan.core.config import settings
from nutriplan.core.logger import logger
from nutriplan.core.limiter import limiter
from nutriplan.models.schemas import HealthResponse
from nutriplan.routes import actions
from nutriplan.services.completion_service import CompletionClient


# Validate configuration on startup
try:
    settings.validate()
    logger.info("Configuration validated successfully")
except ValueError as e:
    logger.error(f"Configuration error: {e}")
    raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One completion client per process, shared by all requests
    app.state.completion_client = CompletionClient.from_settings()
    logger.info("Completion client ready")
    yield
    await app.state.completion_client.close()


# Create FastAPI app
app = FastAPI(
    title="NutriPlan API",
    description="AI-backed diet planning and nutrition tracking",
    version="1.0.0",
    lifespan=lifespan,
)

# Attach rate limiter and its error handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error as {"error": ...}."""
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors, reported as 400."""
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": f"Invalid request body: {problems}"})


app.include_router(actions.router, tags=["Actions"])


@app.get("/")
@limiter.limit("60/minute")
def root(request: Request):
    """Health check endpoint."""
    return {"message": "NutriPlan API running"}


@app.get("/health", response_model=HealthResponse)
def health():
    """
    Detailed health status.
    Returns 'degraded' if required environment variables are missing.
    """
    required_vars = ["OPENAI_API_KEY"]
    missing = [v for v in required_vars if not os.environ.get(v)]

    if missing:
        return JSONResponse(
            status_code=200,
            content={
                "status": "degraded",
                "service": "nutriplan-api",
                "version": "1.0.0",
                "missing_config": missing,
                "message": f"Missing required environment variables: {', '.join(missing)}"
            }
        )

    return {
        "status": "healthy",
        "service": "nutriplan-api",
        "version": "1.0.0"
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "nutriplan.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False
    )

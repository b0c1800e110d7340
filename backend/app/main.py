"""Main FastAPI application."""
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.api import projects, credits, images
from app.database import Base, engine
from app import models  # noqa: F401  (registers tables on Base.metadata)
from app.utils.exceptions import AppException, InvalidArgumentError
from app.utils.logger import logger

# Create database tables locally (in production, use migrations)
if settings.environment == "development":
    Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="MominAI Builder API",
    description="Project history, workspace and quota backend for the AI app builder",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render domain errors as {"detail": {"kind", "message", ...}}."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed requests as invalid_argument with the field errors attached."""
    errors = jsonable_encoder([{k: v for k, v in error.items() if k != "ctx"} for error in exc.errors()])
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else "Invalid request"
    error = InvalidArgumentError(message, errors=errors)
    return JSONResponse(status_code=error.status_code, content={"detail": error.to_detail()})


# Include routers
app.include_router(projects.router)
app.include_router(credits.router)
app.include_router(images.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "MominAI Builder API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}

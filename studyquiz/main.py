"""
Main FastAPI application
AI-generated study quizzes with attempt tracking and personalized review summaries
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import time

from studyquiz.config import settings
from studyquiz.database import Database
from studyquiz.errors import ErrorKind, QuizEngineError
from studyquiz.api import contents, quizzes

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Every error kind must appear here
ERROR_LOG_LEVELS = {
    ErrorKind.VALIDATION: logging.INFO,
    ErrorKind.NOT_FOUND: logging.INFO,
    ErrorKind.FORBIDDEN: logging.WARNING,
    ErrorKind.POLICY: logging.INFO,
    ErrorKind.GENERATION_FAILURE: logging.ERROR,
    ErrorKind.INTERNAL_INVARIANT: logging.ERROR,
}


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the application

    Args:
        database: Database to use instead of one opened from DATABASE_URL
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

        db = database or Database(settings.DATABASE_URL)
        try:
            db.open()
            db.create_all()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {str(e)}")
            raise

        app.state.database = db
        logger.info("Application startup complete")

        yield

        logger.info("Shutting down application")
        if database is None:
            db.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Backend for AI-generated study quizzes with progression and review summaries",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests with timing"""

        start_time = time.time()

        # Process request
        response = await call_next(request)

        # Calculate duration
        duration = time.time() - start_time

        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Duration: {duration:.3f}s"
        )

        return response

    # Application error handler
    @app.exception_handler(QuizEngineError)
    async def quiz_engine_error_handler(request: Request, exc: QuizEngineError):
        """Map every error kind to its response"""

        log_level = ERROR_LOG_LEVELS[exc.kind]
        logger.log(
            log_level,
            f"{request.method} {request.url.path} failed ({exc.kind.value}): {exc.message}"
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.kind.value,
                "message": exc.message,
                "status_code": exc.status_code,
            }
        )

    # Request body validation handler
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Malformed request bodies are validation errors like any other"""

        return JSONResponse(
            status_code=400,
            content={
                "error": ErrorKind.VALIDATION.value,
                "message": "Invalid request",
                "status_code": 400,
                "details": jsonable_encoder(exc.errors()),
            }
        )

    # HTTP exception handler
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Format HTTP exceptions consistently"""

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "http_error",
                "message": exc.detail,
                "status_code": exc.status_code
            }
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors gracefully"""

        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "detail": str(exc) if settings.DEBUG else None
            }
        )

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """
        Health check endpoint for monitoring

        Returns service status
        """
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "timestamp": time.time()
        }

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "message": "Study Quiz Engine API",
            "version": settings.APP_VERSION,
            "docs": "/docs",
            "health": "/health"
        }

    # Include routers
    app.include_router(contents.router)
    app.include_router(quizzes.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "studyquiz.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )

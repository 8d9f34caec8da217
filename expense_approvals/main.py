"""
Main FastAPI Application Entry Point
Expense Approvals Service
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from typing import Optional
import time

from expense_approvals.config.settings import settings
from expense_approvals.container import Container, build_container
from expense_approvals.exceptions import (
    DuplicateIdentity,
    ExpenseApprovalsError,
    Forbidden,
    IdentityNotFound,
    InactiveAccount,
    InvalidCredentials,
    InvalidTransition,
    MissingReason,
    NotFound,
    TokenInvalid,
    ValidationError,
)
from expense_approvals.services.validation_service import field_errors
from expense_approvals.utils.logger import setup_logger
from expense_approvals.middleware.logging_middleware import LoggingMiddleware

# Import routes
from expense_approvals.routes import auth, expense

# Setup logger
logger = setup_logger()

ERROR_STATUS_CODES = {
    DuplicateIdentity: status.HTTP_409_CONFLICT,
    InvalidCredentials: status.HTTP_401_UNAUTHORIZED,
    InactiveAccount: status.HTTP_401_UNAUTHORIZED,
    TokenInvalid: status.HTTP_401_UNAUTHORIZED,
    IdentityNotFound: status.HTTP_401_UNAUTHORIZED,
    Forbidden: status.HTTP_403_FORBIDDEN,
    NotFound: status.HTTP_404_NOT_FOUND,
    InvalidTransition: status.HTTP_400_BAD_REQUEST,
    MissingReason: status.HTTP_400_BAD_REQUEST,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
}

# Never tell a client whether the token or the account behind it was the problem
UNAUTHENTICATED_ERRORS = (TokenInvalid, IdentityNotFound)


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    Build the application

    Args:
        container: Pre-wired services; when omitted the services are built
            from settings and tables are created on startup
    """
    owns_database = container is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan events for application startup and shutdown
        """
        # Startup
        logger.info(f"Starting {settings.APP_NAME}...")

        if owns_database:
            try:
                from expense_approvals.config.database import create_tables
                create_tables()
                logger.info("Database tables created successfully")
            except Exception as e:
                logger.error(f"Failed to create database tables: {str(e)}")
                raise

        logger.info("Application started successfully")

        yield

        # Shutdown
        logger.info(f"Shutting down {settings.APP_NAME}...")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Expense claims with admin approval",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan
    )
    app.state.container = container or build_container(settings)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add logging middleware
    app.add_middleware(LoggingMiddleware)

    # Exception handlers
    @app.exception_handler(ExpenseApprovalsError)
    async def domain_exception_handler(request: Request, exc: ExpenseApprovalsError):
        """Map core errors to HTTP responses"""
        status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)

        if isinstance(exc, UNAUTHENTICATED_ERRORS):
            logger.warning(f"Unauthenticated request to {request.url.path}: {exc.error_code}")
            return JSONResponse(
                status_code=status_code,
                content={
                    "success": False,
                    "error_code": "UNAUTHENTICATED",
                    "message": "Could not validate credentials",
                },
                headers={"WWW-Authenticate": "Bearer"},
            )

        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report request parsing errors in the same shape as ValidationError"""
        errors = field_errors(exc.errors())
        logger.info(f"Request validation failed on {request.url.path}: {[e['field'] for e in errors]}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ValidationError(errors).to_dict(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions"""
        logger.opt(exception=exc).error(f"Unhandled exception: {exc!r}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Internal server error",
                "detail": str(exc) if settings.DEBUG else "An error occurred"
            }
        )

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "timestamp": time.time()
        }

    # Root endpoint
    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint"""
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": settings.APP_VERSION,
            "docs": "/api/docs",
            "health": "/health"
        }

    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(expense.router, prefix="/api/expenses", tags=["Expenses"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "expense_approvals.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )

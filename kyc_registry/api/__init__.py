"""
KYC Registry API Application Factory
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..errors import KYCRegistryError, Unauthorized, Ineligible, NotFound, AlreadyExists, DuplicateRequest
from ..logging_config import get_logger, setup_logging
from ..system import RegistrySystem
from .admin import router as admin_router
from .customers import router as customers_router
from .requests import router as requests_router
from .banks import router as banks_router
from .schemas import ErrorResponse


logger = get_logger("kyc_registry.api")

ERROR_STATUS = {
    Unauthorized: 403,
    Ineligible: 403,
    NotFound: 404,
    AlreadyExists: 409,
    DuplicateRequest: 409,
}

ERROR_RESPONSES = {
    status_code: {"model": ErrorResponse}
    for status_code in sorted(set(ERROR_STATUS.values()))
}


def create_app(system: Optional[RegistrySystem] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    system = system or RegistrySystem()

    app = FastAPI(
        title="KYC Registry API",
        description="Permissioned registry of customer KYC status attested by member banks",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.system = system

    @app.exception_handler(KYCRegistryError)
    async def registry_error_handler(request: Request, exc: KYCRegistryError):
        status_code = ERROR_STATUS.get(type(exc), 400)
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.code}: {exc.message}")
        body = ErrorResponse(error=exc.code, detail=exc.message)
        return JSONResponse(status_code=status_code, content=body.model_dump())

    app.include_router(admin_router, prefix="/admin", tags=["Admin"],
                       responses=ERROR_RESPONSES)
    app.include_router(customers_router, prefix="/customers", tags=["Customers"],
                       responses=ERROR_RESPONSES)
    app.include_router(requests_router, prefix="/requests", tags=["KYC Requests"],
                       responses=ERROR_RESPONSES)
    app.include_router(banks_router, prefix="/banks", tags=["Banks"],
                       responses=ERROR_RESPONSES)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "kyc_registry_api",
            "version": "1.0.0",
            "number_of_banks": system.store.number_of_banks
        }

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None):
    """Run the API with uvicorn using the configured settings"""
    import uvicorn

    system = RegistrySystem()
    config = system.config
    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)
    logger.info(f"Starting KYC registry API, administrator {config.admin_identity}")

    uvicorn.run(create_app(system), host=host or config.api_host, port=port or config.api_port)

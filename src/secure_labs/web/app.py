import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from secure_labs import __version__
from secure_labs.errors import InternalError, LabError
from secure_labs.types import ErrorCategory, ErrorResponse, HealthResponse, LabName
from secure_labs.web import access_control, auth_lab, canonicalization
from secure_labs.web.dependencies import Dependencies, create_dependencies
from secure_labs.web.headers import LAB_HEADERS, SecurityHeadersMiddleware

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

LAB_TITLES = {
    LabName.CANONICALIZATION: "Canonicalization Lab",
    LabName.AUTH: "FastBank Auth Lab",
    LabName.ACCESS_CONTROL: "Access Control Lab",
}


def create_lifespan(deps: Dependencies):
    """Create lifespan function with injected dependencies."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{LAB_TITLES[deps.config.lab]} starting on port {deps.config.port}")
        if deps.config.lab is LabName.CANONICALIZATION:
            logger.info(f"Serving files from {deps.file_ops.base_dir}")
            if deps.config.insecure_demo:
                logger.warning("Insecure demo route /read-no-validate is enabled")
        try:
            yield
        finally:
            logger.info(f"{LAB_TITLES[deps.config.lab]} shutting down")

    return lifespan


async def lab_error_handler(request: Request, exc: LabError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump(mode="json"))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 validation errors."""
    messages = [str(error.get("msg", "invalid value")) for error in exc.errors()]
    body = ErrorResponse(error=ErrorCategory.VALIDATION_ERROR, message="; ".join(messages) or "Invalid request")
    return JSONResponse(status_code=400, content=body.model_dump(mode="json"))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    response = await lab_error_handler(request, InternalError())
    # Starlette runs this handler outside the user middleware stack, so the
    # security headers are not added for us
    response.headers.update(LAB_HEADERS[request.app.state.deps.config.lab])
    return response


def create_app(deps: Dependencies | None = None) -> FastAPI:
    """Create the FastAPI app for the lab named in the dependency config."""
    if deps is None:
        deps = create_dependencies()

    lab = deps.config.lab
    app = FastAPI(title=LAB_TITLES[lab], version=__version__, lifespan=create_lifespan(deps))

    # Store dependencies in app state for route access
    app.state.deps = deps

    app.add_middleware(SecurityHeadersMiddleware, headers=LAB_HEADERS[lab])
    app.add_exception_handler(LabError, lab_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health/", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="ok", version=__version__)

    if lab is LabName.CANONICALIZATION:
        app.include_router(canonicalization.router)
        if deps.config.insecure_demo:
            app.include_router(canonicalization.insecure_router)
    elif lab is LabName.AUTH:
        app.include_router(auth_lab.router)
    elif lab is LabName.ACCESS_CONTROL:
        app.include_router(access_control.router)

    return app

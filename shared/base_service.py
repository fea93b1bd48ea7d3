"""
Base service class for fedipost services.
"""

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional
import time
import os

from prometheus_client import CONTENT_TYPE_LATEST

from shared.config import ServiceConfig, get_config
from shared.logging import clear_context, configure_logging, get_logger, set_request_id
from shared.metrics import get_metrics_collector
from shared.errors import FediPostException, ValidationError

REQUEST_ID_HEADER = "X-Request-ID"


class BaseService:
    """FastAPI scaffolding shared by fedipost services.

    Provides request-id propagation, access logging, Prometheus metrics,
    optional tracing, ``/health`` and ``/metrics``, and the mapping from
    ``FediPostException`` to JSON error responses. Subclasses add their
    routes and override ``_check_dependencies``.
    """

    def __init__(self, service_name: str, port: int, config: Optional[ServiceConfig] = None):
        self.service_name = service_name
        self.port = port
        self.config = config or get_config(service_name, port)
        self.logger = get_logger(f"{service_name}.http")
        self.metrics = get_metrics_collector(service_name)
        self._start_time = time.time()

        configure_logging(service_name, self.config.log_level)

        self.app = FastAPI(
            title=f"{service_name.title()} Service",
            description=f"fedipost - {service_name.title()} Service",
            version="1.0.0",
            docs_url="/docs" if self.config.env == "local" else None,
            redoc_url="/redoc" if self.config.env == "local" else None,
        )

        if self.config.enable_tracing:
            from shared.tracing import configure_tracing
            configure_tracing(
                service_name,
                self.config.otel_exporter,
                enable_console=self.config.enable_console_tracing,
                app=self.app,
            )

        self._setup_middleware()
        self._setup_routes()
        self.app.add_exception_handler(FediPostException, self._handle_service_error)
        self.app.add_exception_handler(RequestValidationError, self._handle_request_validation)
        self.app.add_exception_handler(Exception, self._handle_unexpected)

    def _setup_middleware(self):
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if self.config.env == "local" else [],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        @self.app.middleware("http")
        async def request_context(request: Request, call_next):
            request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
            started = time.time()
            try:
                response = await call_next(request)
                elapsed = time.time() - started
                self.metrics.record_http_request(
                    request.method, request.url.path, response.status_code, elapsed
                )
                self.logger.info(
                    "HTTP request",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=round(elapsed * 1000, 2),
                )
                response.headers[REQUEST_ID_HEADER] = request_id
                return response
            finally:
                clear_context()

    def _setup_routes(self):
        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            try:
                dependencies = await self._check_dependencies()
            except Exception as e:
                self.logger.error("Health check failed", error=str(e))
                self.metrics.record_health_check("error")
                return JSONResponse(
                    status_code=503,
                    content={"service": self.service_name, "status": "error", "error": str(e)},
                )
            self.metrics.record_health_check("ok")
            return self._health_payload(dependencies)

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            return Response(content=self.metrics.export(), media_type=CONTENT_TYPE_LATEST)

    def _health_payload(self, dependencies: Dict[str, str]) -> Dict[str, Any]:
        return {
            "service": self.service_name,
            "status": "ok",
            "uptime_seconds": time.time() - self._start_time,
            "dependencies": dependencies,
            "version": "1.0.0",
            "commit": os.getenv("GIT_COMMIT", "unknown"),
        }

    async def _handle_service_error(self, request: Request, exc: FediPostException) -> JSONResponse:
        log = self.logger.error if exc.status_code >= 500 else self.logger.warning
        log("Request failed", path=request.url.path, code=exc.code, message=exc.message, details=exc.details)
        self.metrics.record_error(exc.code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump())

    async def _handle_request_validation(self, request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed request bodies are reported like any other validation error."""
        errors = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg")}
            for err in exc.errors()
        ]
        return await self._handle_service_error(
            request, ValidationError("Invalid request", details={"errors": errors})
        )

    async def _handle_unexpected(self, request: Request, exc: Exception) -> JSONResponse:
        self.logger.error("Unhandled exception", path=request.url.path, error=str(exc), exc_info=True)
        self.metrics.record_error("INTERNAL_ERROR")
        return JSONResponse(
            status_code=500,
            content={"code": "INTERNAL_ERROR", "message": "Internal server error", "details": {}},
        )

    async def _check_dependencies(self) -> Dict[str, str]:
        """Report dependency status; raise to mark the service unhealthy."""
        return {}

    def run(self):
        """Run the service."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower(),
        )

import argparse
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .core.config import Settings, settings as default_settings
from .core.handlers import register_exception_handlers
from .core.logging_config import configure_logging
from .core.metrics import ServiceMetrics, metrics_middleware
from .db.database import Database
from .routers.health import router as health_router
from .routers.products import router as products_router
from .routers.stock import router as stock_router
from .routers.suppliers import router as suppliers_router

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceDefinition:
    name: str
    title: str
    router: APIRouter
    prefix: str
    tag: str


SERVICES = {
    "products": ServiceDefinition("products-service", "Products API", products_router, "/api/products", "products"),
    "stock": ServiceDefinition("stock-service", "Stock API", stock_router, "/api/stock", "stock"),
    "suppliers": ServiceDefinition("suppliers-service", "Suppliers API", suppliers_router, "/api/suppliers", "suppliers"),
}


def create_app(service: str, settings: Optional[Settings] = None) -> FastAPI:
    if service not in SERVICES:
        raise ValueError(f"Unknown service {service!r}; expected one of {sorted(SERVICES)}")
    definition = SERVICES[service]
    settings = settings or default_settings

    configure_logging(settings.log_level)
    database = Database(settings.database_url, echo=settings.database_echo)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.create_all()
        logger.info("%s ready", definition.name)
        yield
        await database.dispose()

    app = FastAPI(
        title=definition.title,
        description=f"Inventory {definition.tag} service",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.service_name = definition.name
    app.state.settings = settings
    app.state.database = database
    app.state.metrics = ServiceMetrics(definition.name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(metrics_middleware)
    register_exception_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(definition.router, prefix=definition.prefix, tags=[definition.tag])
    return app


def run(service: str, settings: Optional[Settings] = None) -> None:
    settings = settings or default_settings
    app = create_app(service, settings)
    port = settings.port_for(service)
    logger.info("%s running on port %s", SERVICES[service].name, port)
    logger.info("Metrics available at http://localhost:%s/metrics", port)
    uvicorn.run(app, host=settings.host, port=port)


def run_products() -> None:
    run("products")


def run_stock() -> None:
    run("stock")


def run_suppliers() -> None:
    run("suppliers")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run one of the inventory services")
    parser.add_argument("service", choices=sorted(SERVICES))
    args = parser.parse_args()
    run(args.service)

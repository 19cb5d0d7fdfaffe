import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from shopbill.middleware import RequestIdMiddleware
from shopbill.db import Base, make_engine, make_session_factory
from shopbill.config import settings
from shopbill.services.errors import ServiceError
import shopbill.models  # noqa: F401  registers tables

from shopbill.routers import auth, admin, products, suppliers, bills, receive_stock

logger = logging.getLogger("shopbill")


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(engine: Engine | None = None) -> FastAPI:
    """Build the API around ``engine`` (defaults to one built from ``DB_URL``)."""
    _configure_logging()
    engine = engine if engine is not None else make_engine(settings.DB_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Base.metadata.create_all(bind=engine)
        logger.info("database ready (%s), env=%s", engine.url.get_backend_name(), settings.APP_ENV)
        yield
        engine.dispose()

    app = FastAPI(title="Shopbill API", version="1.0.0", lifespan=lifespan)
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ServiceError)
    async def service_error(request: Request, exc: ServiceError):
        content = {"detail": exc.message}
        if exc.status_code >= 500 and settings.APP_ENV != "prod" and exc.__cause__ is not None:
            content["error"] = type(exc.__cause__).__name__
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        content = {"detail": str(exc) or "Internal Server Error"}
        if settings.APP_ENV != "prod":
            content["error"] = type(exc).__name__
        return JSONResponse(status_code=500, content=content)

    app.include_router(auth.router)
    app.include_router(admin.router)
    app.include_router(products.router)
    app.include_router(suppliers.router)
    app.include_router(bills.router)
    app.include_router(receive_stock.router)

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    return app

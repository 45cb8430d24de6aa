# bidmarket/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, PlainTextResponse

from bidmarket import __version__
from bidmarket.core.db import create_schema, make_engine, make_sessionmaker
from bidmarket.core.errors import MarketplaceError
from bidmarket.core.settings import Settings, settings as default_settings
from bidmarket.api import bids, collections, users

logger = logging.getLogger("http")


# -------------------------------------------------------------------
# Startup / shutdown: the app owns the engine
# -------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Only run DDL in environments that allow it (local/dev)
    if app.state.settings.RUN_DDL_ON_START:
        await create_schema(app.state.engine)
    yield
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    # -------------------------------------------------------------------
    # FastAPI app setup
    # -------------------------------------------------------------------
    app = FastAPI(title="Bidmarket", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = make_engine(settings)
    app.state.sessionmaker = make_sessionmaker(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------
    # Log every request
    # -------------------------------------------------------------------
    @app.middleware("http")
    async def log_every_request(request: Request, call_next):
        logger.info("[REQ] %s %s", request.method, request.url.path)
        response = await call_next(request)
        route = request.scope.get("route")
        logger.info(
            "[RES] %s for %s (route=%s)",
            response.status_code,
            request.url.path,
            getattr(route, "path", None),
        )
        return response

    # -------------------------------------------------------------------
    # Errors -> {"error": "..."}
    # -------------------------------------------------------------------
    @app.exception_handler(MarketplaceError)
    async def handle_marketplace_error(request: Request, exc: MarketplaceError):
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            {"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
            status_code=400,
        )

    # -------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------
    app.include_router(bids.router)
    app.include_router(collections.router)
    app.include_router(users.router)

    # -------------------------------------------------------------------
    # Health check
    # -------------------------------------------------------------------
    @app.get("/health", include_in_schema=False)
    async def health():
        return PlainTextResponse("ok")

    return app


app = create_app()

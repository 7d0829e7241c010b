# app/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.core.json import UTF8JSONResponse
from app.core.config import Settings
from app.core.errors import FeedError, StorageError, ValidationError
from app.db.init_db import init_models
from app.db.session import build_engine, build_sessionmaker

# routers
from app.users.router import auth_router, router as users_router
from app.feed.router import router as feed_router
from app.comments.router import router as comments_router

log = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("🚀 Iniciando servicio…")
    await init_models(app.state.engine)
    log.info("✅ Startup listo.")
    yield
    await app.state.engine.dispose()
    log.info("👋 Servicio detenido.")


def _error_response(err: FeedError) -> UTF8JSONResponse:
    return UTF8JSONResponse(status_code=err.status_code, content={"detail": err.detail})


async def feed_error_handler(request: Request, exc: FeedError):
    return _error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # body mal formado = ValidationError (400), igual que las reglas del service
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "invalid input")
    return _error_response(ValidationError(f"{field}: {msg}" if field else msg))


async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    log.exception(f"❌ error de base de datos en {request.method} {request.url.path}")
    return _error_response(StorageError())


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Arma la app con su config. Engine, sessionmaker y settings viven en
    app.state: nada de estado global a nivel de módulo.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="FoodieGram API",
        default_response_class=UTF8JSONResponse,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings.DATABASE_URL)
    app.state.sessionmaker = build_sessionmaker(app.state.engine)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(FeedError, feed_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)

    @app.get("/")
    async def root():
        return {"msg": "FoodieGram Backend API is running! 🍜"}

    @app.get(f"{settings.API_PREFIX}/health")
    async def health():
        return {"ok": True, "service": "foodiegram"}

    # routers
    app.include_router(auth_router, prefix=settings.API_PREFIX)      # /api/auth/...
    app.include_router(users_router, prefix=settings.API_PREFIX)     # /api/users/...
    app.include_router(feed_router, prefix=settings.API_PREFIX)      # /api/posts/...
    app.include_router(comments_router, prefix=settings.API_PREFIX)  # /api/posts/{id}/comment...

    return app


app = create_app()

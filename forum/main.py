from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.requests import Request
from starlette.responses import JSONResponse

from forum.api import auth, posts, profile
from forum.api.schemas import fail, ok
from forum.core.errors import ForumError
from forum.core.logging import configure_logging, log
from forum.core.middleware import SecurityHeadersMiddleware, TimingMiddleware
from forum.core.settings import settings
from forum.db.mongo import close_client, ensure_indexes, get_database

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.init_store:
        await ensure_indexes(await get_database())
    yield
    await close_client()


def create_app(init_store: bool = True) -> FastAPI:
    app = FastAPI(title="Forum API", version="0.1.0", lifespan=lifespan)
    app.state.init_store = init_store

    @app.exception_handler(ForumError)
    async def forum_error_handler(request: Request, exc: ForumError):
        return JSONResponse(fail(exc.message), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{where}: {first.get('msg', 'invalid')}" if where else "Invalid request"
        return JSONResponse(fail(message), status_code=422)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        log.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(fail("Internal server error"), status_code=500)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(TimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router)
    app.include_router(posts.router)
    app.include_router(profile.router)
    app.mount(
        settings.uploads_url_prefix,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    @app.get("/health")
    async def health():
        return ok({"ok": True})

    return app


app = create_app()

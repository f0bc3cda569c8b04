"""HTTP API for deck generation and housekeeping (FastAPI).

Every JSON response carries ``success``. Library errors are mapped to
status codes in one exception handler, so route handlers stay linear.
Handlers that touch the filesystem are plain ``def`` and run in the
thread pool.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from . import __version__
from .api import generate_from_recipe, generate_from_request
from .dispatch import describe_templates
from .errors import (
    ConfigValidationError,
    DeckError,
    DeckFinalized,
    DeckNotFound,
    InvalidFilename,
    SlideError,
    UnknownBrand,
    UnknownRecipe,
)
from .recipes import RECIPES
from .settings import Settings, load_settings
from .storage import DeckStore
from .writer import PPTX_MEDIA_TYPE

_STATUS = (
    (ConfigValidationError, 400),
    (UnknownRecipe, 404),
    (DeckNotFound, 404),
    (UnknownBrand, 400),
    (SlideError, 400),
    (InvalidFilename, 400),
    (DeckFinalized, 409),
)


def status_for(exc: DeckError) -> int:
    for cls, code in _STATUS:
        if isinstance(exc, cls):
            return code
    return 500


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RecipeRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = "corporate"
    config: Optional[Dict[str, Any]] = None
    values: Dict[str, Any] = Field(default_factory=dict)


class CleanupRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    max_age_days: Optional[float] = Field(default=None, alias="maxAgeDays", ge=0)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DeckStore:
    return request.app.state.store


router = APIRouter(tags=["presentations"])


@router.post("/generate")
def generate_presentation(payload: Any = Body(None), settings: Settings = Depends(get_settings)):
    result = generate_from_request(payload, output_dir=settings.output_dir, policy=settings.dispatch_policy)
    body = result.as_dict(settings.base_url)
    body["message"] = f"Presentation created successfully with {result.slide_count} slides"
    return body


@router.post("/recipes/{name}")
def generate_recipe(
    name: str,
    payload: Optional[RecipeRequest] = None,
    settings: Settings = Depends(get_settings),
):
    payload = payload or RecipeRequest()
    result = generate_from_recipe(
        name,
        output_dir=settings.output_dir,
        presentation_type=payload.type,
        values=payload.values,
        config=payload.config,
        policy=settings.dispatch_policy,
    )
    body = result.as_dict(settings.base_url)
    body["recipe"] = name
    return body


@router.get("/recipes")
def list_recipes():
    return {
        "success": True,
        "recipes": [{"name": r.name, "description": r.description} for r in RECIPES.values()],
    }


@router.get("/list")
def list_presentations(store: DeckStore = Depends(get_store), settings: Settings = Depends(get_settings)):
    presentations = [entry.as_dict(settings.base_url) for entry in store.list()]
    return {"success": True, "count": len(presentations), "presentations": presentations}


@router.get("/download/{filename}")
def download_presentation(filename: str, store: DeckStore = Depends(get_store)):
    path = store.path_for(filename)
    return FileResponse(path, media_type=PPTX_MEDIA_TYPE, filename=filename)


@router.delete("/delete/{filename}")
def delete_presentation(filename: str, store: DeckStore = Depends(get_store)):
    store.delete(filename)
    return {"success": True, "message": f"Deleted {filename}"}


@router.post("/cleanup")
def cleanup_presentations(
    payload: Optional[CleanupRequest] = None,
    store: DeckStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    max_age_days = settings.max_age_days
    if payload is not None and payload.max_age_days is not None:
        max_age_days = payload.max_age_days
    deleted = store.cleanup(max_age_days)
    return {
        "success": True,
        "deletedCount": deleted,
        "message": f"Deleted {deleted} files older than {max_age_days:g} days",
    }


@router.get("/health")
def presentations_health(store: DeckStore = Depends(get_store)):
    return {"success": True, "status": "healthy", "presentationCount": store.count(), "timestamp": _now()}


@router.get("/templates")
def list_templates():
    return {"success": True, "templates": describe_templates()}


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    store = DeckStore(settings.output_dir)
    store.ensure()

    app = FastAPI(title="brandeck", version=__version__, description="Branded slide-deck generation service")
    app.state.settings = settings
    app.state.store = store

    # Browser clients (chat front-ends) call the API cross-origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DeckError)
    async def deck_error_handler(request: Request, exc: DeckError):
        status = status_for(exc)
        content: Dict[str, Any] = {"success": False, "error": str(exc)}
        if isinstance(exc, ConfigValidationError):
            content = {"success": False, "error": "Invalid request", "details": exc.issues}
        elif isinstance(exc, SlideError):
            content.update({"method": exc.method, "index": exc.index})
        if status >= 500:
            logger.error("{method} {path} failed: {error}", method=request.method, path=request.url.path, error=exc)
        else:
            logger.warning("{method} {path} rejected ({status}): {error}", method=request.method, path=request.url.path, status=status, error=exc)
        return JSONResponse(status_code=status, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        issues = []
        for err in exc.errors():
            where = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
            issues.append(f"{where}: {err.get('msg')}" if where else str(err.get("msg")))
        return JSONResponse(status_code=400, content={"success": False, "error": "Invalid request", "details": issues})

    app.include_router(router, prefix=settings.base_url)

    @app.get("/")
    def root():
        prefix = settings.base_url
        return {
            "name": "brandeck",
            "version": __version__,
            "status": "running",
            "endpoints": {
                "generate": f"POST {prefix}/generate",
                "recipes": f"POST {prefix}/recipes/{{name}}",
                "list": f"GET {prefix}/list",
                "download": f"GET {prefix}/download/{{filename}}",
                "delete": f"DELETE {prefix}/delete/{{filename}}",
                "cleanup": f"POST {prefix}/cleanup",
                "health": f"GET {prefix}/health",
                "templates": f"GET {prefix}/templates",
            },
        }

    @app.get("/health")
    def health():
        return {"status": "ok", "timestamp": _now()}

    logger.info(
        "Deck service ready: output_dir={out}, policy={policy}",
        out=settings.output_dir,
        policy=settings.dispatch_policy.value,
    )
    return app


_UVICORN_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}


def serve(settings: Settings) -> None:
    import uvicorn

    level = settings.log_level.lower()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=level if level in _UVICORN_LEVELS else "info",
    )

from __future__ import annotations

import base64
import binascii
import logging
import os
from functools import lru_cache
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from slideforge.ai.base import ContentGenerator
from slideforge.ai.client import get_content_generator
from slideforge.config import settings
from slideforge.errors import (GenerationFailure, NotFound,
                               PersistenceWriteFailure, ValidationError)
from slideforge.files import SourceFile
from slideforge.images.acquisition import ImageAcquisition
from slideforge.logging_setup import configure_logging
from slideforge.models import (GenerateRequest, ImageSearchRequest,
                               ImageSearchResponse, LoginRequest,
                               SignupRequest)
from slideforge.normalize import normalize_presentation
from slideforge.pipeline import (ContentSource, default_image_acquisition,
                                 generate_presentation)
from slideforge.storage import PersistenceService, get_store
from slideforge.theme import available_themes

logger = logging.getLogger(__name__)

app = FastAPI(title="SlideForge AI Presentation Editor")


@lru_cache(maxsize=1)
def get_persistence() -> PersistenceService:
    return PersistenceService(get_store())


@lru_cache(maxsize=1)
def get_images() -> ImageAcquisition:
    return default_image_acquisition()


@lru_cache(maxsize=1)
def get_generator() -> ContentGenerator:
    return get_content_generator()


@app.exception_handler(ValidationError)
async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(NotFound)
async def _not_found(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "Presentation not found."})


@app.exception_handler(PersistenceWriteFailure)
async def _write_failed(request: Request, exc: PersistenceWriteFailure) -> JSONResponse:
    return JSONResponse(status_code=507, content={"detail": str(exc)})


@app.exception_handler(GenerationFailure)
async def _generation_failed(request: Request, exc: GenerationFailure) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.get("/health")
def health() -> dict:
    return {"ok": True}


@app.get("/themes")
def themes() -> list[str]:
    return available_themes()


# --- auth (local stand-in, not hardened) ---

@app.post("/auth/signup")
def signup(req: SignupRequest, persistence: PersistenceService = Depends(get_persistence)) -> dict:
    user = persistence.signup(req.name, req.email, req.password)
    if user is None:
        raise HTTPException(
            status_code=409, detail="An account with this email already exists.")
    return user.to_document()


@app.post("/auth/login")
def login(req: LoginRequest, persistence: PersistenceService = Depends(get_persistence)) -> dict:
    user = persistence.login(req.email, req.password)
    if user is None:
        raise HTTPException(
            status_code=401, detail="Invalid email or password.")
    return user.to_document()


@app.post("/auth/logout")
def logout(persistence: PersistenceService = Depends(get_persistence)) -> dict:
    persistence.logout()
    return {"ok": True}


@app.get("/auth/me")
def me(persistence: PersistenceService = Depends(get_persistence)) -> dict:
    user = persistence.current_user()
    if user is None:
        raise HTTPException(status_code=401, detail="Not logged in.")
    return user.to_document()


# --- presentations ---

def _source_from_request(req: GenerateRequest) -> ContentSource:
    file = None
    if req.file is not None:
        try:
            data = base64.b64decode(req.file.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError("Uploaded file is not valid base64.") from e
        file = SourceFile(name=req.file.name,
                          content_type=req.file.content_type, data=data)
    return ContentSource(kind=req.kind, payload=req.text, title=req.title, file=file)


@app.post("/presentations/generate")
async def generate(
    req: GenerateRequest,
    persistence: PersistenceService = Depends(get_persistence),
    images: ImageAcquisition = Depends(get_images),
    generator: ContentGenerator = Depends(get_generator),
) -> dict:
    source = _source_from_request(req)
    try:
        presentation = await generate_presentation(
            source,
            req.slide_count,
            req.image_mode,
            user_id=req.user_id,
            theme=req.theme,
            content_generator=generator,
            images=images,
            persistence=persistence,
        )
    except (GenerationFailure, PersistenceWriteFailure) as e:
        logger.error("Presentation generation failed: %s", e)
        raise HTTPException(
            status_code=502, detail="Failed to generate presentation. Please try again.") from e
    return presentation.to_document()


@app.get("/presentations")
def list_presentations(user_id: str, persistence: PersistenceService = Depends(get_persistence)) -> list[dict]:
    return [m.to_document() for m in persistence.list_presentation_meta(user_id)]


@app.get("/presentations/{presentation_id}")
def get_presentation(presentation_id: str, persistence: PersistenceService = Depends(get_persistence)) -> dict:
    return persistence.require_presentation(presentation_id).to_document()


@app.put("/presentations/{presentation_id}")
def save_presentation(
    presentation_id: str,
    body: dict[str, Any] = Body(...),
    persistence: PersistenceService = Depends(get_persistence),
) -> dict:
    presentation = normalize_presentation({**body, "id": presentation_id})
    return persistence.save_presentation(presentation).to_document()


@app.delete("/presentations/{presentation_id}")
def delete_presentation(presentation_id: str, persistence: PersistenceService = Depends(get_persistence)) -> dict:
    persistence.delete_presentation(presentation_id)
    return {"deleted": True}


# --- images ---

@app.post("/images/search")
async def search_images(req: ImageSearchRequest, images: ImageAcquisition = Depends(get_images)) -> dict:
    outcome = await images.search(req.query)
    return ImageSearchResponse(
        found=outcome.found,
        images=outcome.images,
        provider=outcome.provider,
        message=outcome.message,
    ).to_document()


@app.on_event("startup")
def _startup() -> None:
    configure_logging(settings.log_level)
    os.makedirs(settings.store_dir, exist_ok=True)

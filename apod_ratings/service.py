"""HTTP API exposing images, users and ratings."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, StrictInt

from .config import Settings, load_settings
from .errors import ProviderError, StoreError
from .images import ImageProvider
from .models import Image
from .provider import APODClient
from .store import DataStore

logger = logging.getLogger("apod_ratings.service")

APPLICATION_JSON = "application/json"


class UserRequest(BaseModel):
    email: str


class UserResponse(BaseModel):
    email: str


class RatingKeyRequest(BaseModel):
    email: str
    image_url: str = Field(..., alias="imageURL")


class RatingRequest(RatingKeyRequest):
    rating: StrictInt


class RatingResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    image_url: str = Field(..., alias="imageURL")
    rating: int


class ImageResponse(BaseModel):
    date: str
    explanation: str
    title: str
    url: str


class ImageListResponse(BaseModel):
    images: List[ImageResponse]


def _image_to_response(image: Image) -> ImageResponse:
    return ImageResponse(**image.to_dict())


def _get_store(request: Request) -> DataStore:
    return request.app.state.store


def require_json(request: Request) -> None:
    """Reject request bodies that are not declared as JSON."""

    content_type = request.headers.get("content-type", "")
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type != APPLICATION_JSON:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"need content-type '{APPLICATION_JSON}', but got '{content_type}' instead",
        )


def _bad_request(exc: StoreError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts: List[str] = []
    for error in exc.errors():
        location = [str(item) for item in error.get("loc", ()) if item not in ("body", "query")]
        field = ".".join(location) or "body"
        parts.append(f"{field}: {error.get('msg', 'invalid value')}")
    return "Invalid request: " + "; ".join(parts) if parts else "Invalid request"


def register_api_routes(app: FastAPI) -> None:
    """Expose the JSON API endpoints on the provided FastAPI application."""

    json_body = [Depends(require_json)]

    @app.get("/healthz")
    def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/image", response_model=ImageResponse)
    def fetch_image(store: DataStore = Depends(_get_store)) -> ImageResponse:
        try:
            image = store.images.fetch_and_cache()
        except ProviderError as exc:
            logger.warning("Fetching APOD image failed: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail={"code": "provider_error", "message": str(exc)},
            ) from exc
        return _image_to_response(image)

    @app.get("/images", response_model=ImageListResponse)
    def list_images(store: DataStore = Depends(_get_store)) -> ImageListResponse:
        return ImageListResponse(
            images=[_image_to_response(image) for image in store.images.list_images()]
        )

    @app.post(
        "/user",
        status_code=status.HTTP_201_CREATED,
        response_model=UserResponse,
        dependencies=json_body,
    )
    def create_user(
        request: UserRequest,
        store: DataStore = Depends(_get_store),
    ) -> UserResponse:
        try:
            record = store.users.create_user(request.email)
        except StoreError as exc:
            raise _bad_request(exc) from exc
        return UserResponse(email=record.email)

    @app.delete(
        "/user",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        dependencies=json_body,
    )
    def delete_user(
        request: UserRequest,
        store: DataStore = Depends(_get_store),
    ) -> Response:
        try:
            store.users.delete_user(request.email)
        except StoreError as exc:
            raise _bad_request(exc) from exc
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.post(
        "/rating",
        status_code=status.HTTP_201_CREATED,
        response_model=RatingResponse,
        dependencies=json_body,
    )
    def create_rating(
        request: RatingRequest,
        store: DataStore = Depends(_get_store),
    ) -> RatingResponse:
        try:
            store.users.create_rating(request.email, request.image_url, request.rating)
        except StoreError as exc:
            raise _bad_request(exc) from exc
        return RatingResponse(
            email=request.email.strip(),
            image_url=request.image_url.strip(),
            rating=request.rating,
        )

    @app.get("/rating", response_model=Dict[str, int])
    def list_ratings(
        email: Optional[str] = Query(default=None),
        store: DataStore = Depends(_get_store),
    ) -> Dict[str, int]:
        if email is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="need query parameter 'email'",
            )
        try:
            return store.users.list_ratings(email)
        except StoreError as exc:
            raise _bad_request(exc) from exc

    @app.put(
        "/rating",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        dependencies=json_body,
    )
    def update_rating(
        request: RatingRequest,
        store: DataStore = Depends(_get_store),
    ) -> Response:
        try:
            store.users.update_rating(request.email, request.image_url, request.rating)
        except StoreError as exc:
            raise _bad_request(exc) from exc
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete(
        "/rating",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        dependencies=json_body,
    )
    def delete_rating(
        request: RatingKeyRequest,
        store: DataStore = Depends(_get_store),
    ) -> Response:
        try:
            store.users.delete_rating(request.email, request.image_url)
        except StoreError as exc:
            raise _bad_request(exc) from exc
        return Response(status_code=status.HTTP_204_NO_CONTENT)


def create_app(
    *,
    settings: Settings | None = None,
    store: DataStore | None = None,
    provider: ImageProvider | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application with a fresh, empty data store."""

    if store is None:
        if provider is None:
            app_settings = settings or load_settings()
            provider = APODClient(
                app_settings.api_key,
                api_url=app_settings.api_url,
                timeout=app_settings.request_timeout,
            )
        store = DataStore.create(provider)

    app = FastAPI(
        title="APOD Ratings API",
        version="0.1.0",
        description="Rate NASA's Astronomy Picture of the Day.",
    )
    app.state.store = store

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": _describe_validation_errors(exc),
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    register_api_routes(app)
    return app


__all__ = ["create_app", "register_api_routes", "require_json"]

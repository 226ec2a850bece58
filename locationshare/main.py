import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .auth import get_current_user
from .config import Settings, get_settings
from .errors import register_error_handlers
from .identity import IdentityVerifier
from .models import Health, LocationIn, LocationOut, LocationRecord
from .storage import LocationStore

log = logging.getLogger(__name__)

VERSION = "1.0.0"


# === Helpers ===


def location_out(record: LocationRecord) -> LocationOut:
    return LocationOut(
        user_id=record.user_id,
        latitude=record.latitude,
        longitude=record.longitude,
        timestamp=record.timestamp,
    )


def get_store(request: Request) -> LocationStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


# === Health ===

public = APIRouter()


@public.get("/health", response_model=Health)
def health() -> Health:
    return Health(status="healthy")


# === Location endpoints ===

api = APIRouter(prefix="/api", dependencies=[Depends(get_current_user)])


@api.get("/sharedlocations/{user_id}", response_model=List[LocationOut])
def get_shared_locations(
    user_id: str,
    store: LocationStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    records = store.list(user_id) if settings.filter_shared_locations else store.list()
    return [location_out(r) for r in records]


async def location_body(request: Request, user: str = Depends(get_current_user)) -> LocationIn:
    """Decode the write body once the caller is authenticated.

    An empty body is a record of zero values.
    """
    body = await request.body()
    if not body.strip():
        return LocationIn()
    try:
        return LocationIn.model_validate_json(body)
    except ValidationError as ex:
        log.info("Rejected location from %s: %s", user, ex.errors())
        raise HTTPException(status_code=400, detail="Invalid input") from ex


@api.post(
    "/locations",
    response_model=LocationOut,
    status_code=201,
    openapi_extra={
        "requestBody": {
            "required": False,
            "content": {"application/json": {"schema": LocationIn.model_json_schema()}},
        }
    },
)
def update_user_location(
    payload: LocationIn = Depends(location_body),
    user: str = Depends(get_current_user),
    store: LocationStore = Depends(get_store),
):
    if payload.user_id != user:
        log.warning("User %s wrote a location for user %r", user, payload.user_id)
    record = store.append(payload.to_record())
    return location_out(record)


# === Application ===


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if app.state.verifier is None:
        app.state.verifier = IdentityVerifier.from_service_account_file(
            settings.firebase_credentials, settings.firebase_project_id
        )
    log.info("Serving %d seeded locations", len(app.state.store))
    yield
    log.info("Shutting down")


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    log.info(
        "%s %s %d %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - start) * 1000,
    )
    return response


def create_app(
    settings: Optional[Settings] = None,
    verifier: Optional[IdentityVerifier] = None,
    store: Optional[LocationStore] = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Location Share API", version=VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.verifier = verifier
    app.state.store = store if store is not None else LocationStore.with_fixtures()

    app.middleware("http")(log_requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["Origin", "Content-Type", "Accept", "Authorization"],
    )
    register_error_handlers(app)

    app.include_router(public)
    app.include_router(api)
    return app


app = create_app()

"""Tour endpoints.

Each handler exercises one framework feature: path and query parameters,
form and multipart binding, JSON binding with validation, cookies, route
level dependencies, request capabilities and the cancellable parallel task.
"""

from __future__ import annotations

import html
import logging
import secrets
import shutil
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Annotated

from fastapi import (
    APIRouter,
    Cookie,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    Request,
    UploadFile,
)
from fastapi.responses import FileResponse, HTMLResponse, PlainTextResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from starlette.responses import Response

from webtour import __version__
from webtour.concurrency import Cancelled, CancellationReason
from webtour.server.config import ServerSettings
from webtour.server.middleware import RequestCapabilities, get_capabilities
from webtour.server.models import (
    AdminInfo,
    HealthStatus,
    SearchResult,
    TimestampResult,
    UserDTO,
    UserIn,
    ValidatedUser,
)
from webtour.server.parallel import make_greeting_task, request_cancellation

logger = logging.getLogger(__name__)

router = APIRouter()

basic_auth = HTTPBasic(realm="Restricted")

# Status used by nginx for "client closed request"; nobody is left to read it.
CLIENT_CLOSED_REQUEST = 499


def _settings(request: Request) -> ServerSettings:
    settings = getattr(request.app.state, "settings", None)
    if not isinstance(settings, ServerSettings):
        raise HTTPException(status_code=500, detail="Server settings not configured")
    return settings


def track(request: Request) -> None:
    logger.info("request to /users", extra={"method": request.method})


def require_admin(
    request: Request,
    credentials: Annotated[HTTPBasicCredentials, Depends(basic_auth)],
) -> str:
    settings = _settings(request)
    user_ok = secrets.compare_digest(
        credentials.username.encode("utf-8"), settings.admin_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"), settings.admin_password.encode("utf-8")
    )
    if not (user_ok and password_ok):
        raise HTTPException(
            status_code=401,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": 'Basic realm="Restricted"'},
        )
    return credentials.username


@router.get("/health", response_model=HealthStatus)
def health() -> HealthStatus:
    return HealthStatus(status="ok", version=__version__)


@router.get("/hello", response_class=PlainTextResponse)
def hello() -> str:
    return "Hello, World"


@router.get("/logger", response_class=PlainTextResponse)
def logger_demo() -> str:
    logger.info("logger func is called")
    return "logger!"


@router.get("/users", response_class=PlainTextResponse, dependencies=[Depends(track)])
def list_users() -> str:
    return "/users"


@router.get("/users/{user_id}", response_class=PlainTextResponse)
def get_user(user_id: str) -> str:
    return user_id


@router.post("/users", response_model=UserDTO)
def save_user(user: UserIn) -> UserDTO:
    # Copy into a separate model so fields that must not be bound stay at their defaults.
    return UserDTO(name=user.name, email=user.email, is_admin=False)


@router.post("/validate-users", response_model=ValidatedUser)
def validate_user(user: ValidatedUser) -> ValidatedUser:
    return user


@router.get("/show", response_class=PlainTextResponse)
def show(team: str = "", member: str = "") -> str:
    return f"team:{team}, member:{member}"


@router.get("/query-param", response_class=PlainTextResponse)
def query_param(name: str = "") -> str:
    return name


@router.post("/save", response_class=HTMLResponse)
def save(
    request: Request,
    avatar: Annotated[UploadFile, File()],
    name: Annotated[str, Form()] = "",
) -> str:
    settings = _settings(request)

    filename = Path(avatar.filename or "").name
    if not filename:
        raise HTTPException(status_code=400, detail="avatar file name is required")

    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    destination = settings.upload_dir / filename
    with destination.open("wb") as dst:
        shutil.copyfileobj(avatar.file, dst)

    logger.info("Saved upload", extra={"path": str(destination), "form_name": name})
    return f"<b>Thank you! {html.escape(name)}</b>"


@router.post("/form", response_class=PlainTextResponse)
def form_value(name: Annotated[str, Form()] = "") -> str:
    return name


@router.get("/api/search", response_model=SearchResult)
def search(
    request: Request,
    ids: Annotated[list[int], Query()] = [],  # noqa: B006 (FastAPI copies defaults)
    active: bool = False,
    length: int | None = None,
) -> SearchResult:
    if length is None:
        length = _settings(request).search_default_length
    return SearchResult(ids=ids, active=active, length=length)


@router.get("/timestamp", response_model=TimestampResult)
def timestamp(timestamp: datetime) -> TimestampResult:
    return TimestampResult(timestamp=timestamp)


@router.get("/context", response_class=PlainTextResponse)
def context(capabilities: Annotated[RequestCapabilities, Depends(get_capabilities)]) -> str:
    capabilities.foo()
    capabilities.bar()
    return "OK"


@router.get("/parallel_context", response_model=None)
async def parallel_context(request: Request) -> Response:
    settings = _settings(request)
    task = make_greeting_task(settings.parallel_work_seconds)

    async with request_cancellation(
        request,
        timeout_seconds=settings.parallel_timeout_seconds,
        poll_seconds=settings.disconnect_poll_seconds,
    ) as token:
        outcome = await task.run_async(request.method, token)

    if isinstance(outcome, Cancelled):
        if outcome.reason is CancellationReason.DEADLINE_EXCEEDED:
            raise HTTPException(status_code=504, detail="parallel work timed out")
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    if outcome.failed:
        logger.error("Parallel work failed", extra={"error": str(outcome.error)})
        raise HTTPException(status_code=500, detail="parallel work failed")

    return PlainTextResponse(f"Result: {outcome.value}")


@router.get("/write_cookie", response_class=PlainTextResponse)
def write_cookie(request: Request) -> Response:
    settings = _settings(request)
    response = PlainTextResponse("write a cookie")
    response.set_cookie(
        "username",
        "job",
        expires=datetime.now(tz=UTC) + timedelta(hours=settings.cookie_ttl_hours),
    )
    return response


@router.get("/read_cookie", response_class=PlainTextResponse)
def read_cookie(username: Annotated[str | None, Cookie()] = None) -> str:
    if username is None:
        raise HTTPException(status_code=404, detail="cookie 'username' not found")
    logger.info("cookie", extra={"cookie_name": "username", "cookie_value": username})
    return "read a cookie"


@router.get("/read_all_cookie", response_class=PlainTextResponse)
def read_all_cookies(request: Request) -> str:
    for name, value in request.cookies.items():
        logger.info("cookie", extra={"cookie_name": name, "cookie_value": value})
    return "read all the cookies"


@router.get("/admin", response_model=AdminInfo)
def admin(user: Annotated[str, Depends(require_admin)]) -> AdminInfo:
    return AdminInfo(user=user)


@router.get("/", include_in_schema=False, response_model=None)
def index(request: Request) -> FileResponse:
    page = _settings(request).index_file
    if not page.is_file():
        raise HTTPException(status_code=404, detail="index.html not found")
    return FileResponse(page)

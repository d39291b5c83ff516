"""
FastAPI app: contact pages, sign-in session, and the assistant webhook.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
import re
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, Form, Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from api.webhook import router as webhook_router
from yumcontacts.application import (
    AssistantDispatcher,
    ContactForm,
    ContactRepository,
    ContactService,
    UserProfile,
)
from yumcontacts.config import Config, configure_logging
from yumcontacts.domain import (
    MAX_CONTACT_ID,
    ContactError,
    ContactNotFound,
    InvalidArgument,
    PayloadError,
    StorageError,
    UnexpectedRowCount,
)
from yumcontacts.infrastructure import create_repository, format_phone

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
SESSION_PROFILE_KEY = "profile"

_CONTACT_ID_PATTERN = re.compile(r"[0-9]+")

# Page routes; every app built by create_app includes them.
router = APIRouter()

_STATUS_BY_ERROR: tuple[tuple[type[ContactError], int], ...] = (
    (ContactNotFound, 404),
    (InvalidArgument, 400),
    (PayloadError, 400),
    (UnexpectedRowCount, 409),
    (StorageError, 503),
)


def status_for_error(exc: ContactError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


def parse_contact_id(raw: str) -> int:
    if not _CONTACT_ID_PATTERN.fullmatch(raw or ""):
        raise InvalidArgument(f"bad contact id: {raw!r}")
    contact_id = int(raw)
    if contact_id > MAX_CONTACT_ID:
        raise InvalidArgument(f"bad contact id: {raw!r}")
    return contact_id


def profile_from_session(request: Request) -> UserProfile | None:
    """Return the signed-in user, or None if nobody is signed in."""
    data = request.session.get(SESSION_PROFILE_KEY)
    if not data or not data.get("id"):
        return None
    return UserProfile(id=data["id"], display_name=data.get("display_name", ""))


def _profile_id(display_name: str) -> str:
    """Stable user id for a display name."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"yum-contacts:user:{display_name}"))


def _safe_redirect(target: str | None, default: str = "/contacts") -> str:
    """Only follow local redirects."""
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return default


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=302)


def get_service(request: Request) -> ContactService:
    return request.app.state.service


def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates


def contact_form(
    firstname: Annotated[str, Form()] = "",
    lastname: Annotated[str, Form()] = "",
    address: Annotated[str, Form()] = "",
    email: Annotated[str, Form()] = "",
    phone: Annotated[str, Form()] = "",
    created_by: Annotated[str, Form(alias="createdBy")] = "",
    created_by_id: Annotated[str, Form(alias="createdByID")] = "",
) -> ContactForm:
    """Contact fields from the add/edit form (see templates/edit.html)."""
    return ContactForm(
        first_name=firstname,
        last_name=lastname,
        address=address,
        email=email,
        phone=phone,
        created_by=created_by,
        created_by_id=created_by_id,
    )


ServiceDep = Annotated[ContactService, Depends(get_service)]
TemplatesDep = Annotated[Jinja2Templates, Depends(get_templates)]
FormDep = Annotated[ContactForm, Depends(contact_form)]


def _build_templates(config: Config) -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters["phone"] = lambda raw: format_phone(raw, config.default_phone_region)
    return templates


def create_app(
    config: Config | None = None,
    *,
    repository: ContactRepository | None = None,
) -> FastAPI:
    """Build the app. The repository is created from config at startup unless one is given."""
    if config is None:
        config = Config.from_env()
    configure_logging(config.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        repo = repository if repository is not None else create_repository(config)
        service = ContactService(repo)
        app.state.repository = repo
        app.state.service = service
        app.state.dispatcher = AssistantDispatcher(
            service,
            source=config.assistant_source,
            format_phone=lambda raw: format_phone(raw, config.default_phone_region),
        )
        try:
            yield
        finally:
            repo.close()

    app = FastAPI(title="Yum Contacts", lifespan=lifespan)
    app.state.config = config
    app.state.templates = _build_templates(config)
    app.add_middleware(
        SessionMiddleware,
        secret_key=config.session_secret,
        https_only=config.session_https_only,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    @app.exception_handler(ContactError)
    async def contact_error_handler(request: Request, exc: ContactError):
        status = status_for_error(exc)
        logger.warning(
            "Handler error: status code: %d, message: %s, underlying err: %r",
            status,
            exc,
            exc.__cause__,
        )
        return PlainTextResponse(str(exc), status_code=status)

    app.include_router(router)
    app.include_router(webhook_router)
    return app


@router.get("/")
def index():
    return _redirect("/contacts")


@router.get("/_ah/health", response_class=PlainTextResponse)
def health():
    return "ok"


@router.get("/contacts")
def list_contacts(request: Request, service: ServiceDep, templates: TemplatesDep):
    """Display all contacts, ordered by name."""
    contacts = service.list_contacts()
    return templates.TemplateResponse(
        request,
        "list.html",
        {"contacts": contacts, "profile": profile_from_session(request), "mine": False},
    )


@router.get("/contacts/mine")
def list_mine(request: Request, service: ServiceDep, templates: TemplatesDep):
    """Display contacts created by the signed-in user."""
    user = profile_from_session(request)
    if user is None:
        return _redirect("/login?redirect=/contacts/mine")
    contacts = service.list_contacts_created_by(user.id)
    return templates.TemplateResponse(
        request,
        "list.html",
        {"contacts": contacts, "profile": user, "mine": True},
    )


@router.get("/contacts/add")
def add_form(request: Request, templates: TemplatesDep):
    return templates.TemplateResponse(
        request,
        "edit.html",
        {"contact": None, "profile": profile_from_session(request)},
    )


@router.post("/contacts")
def create_contact(request: Request, service: ServiceDep, form: FormDep):
    contact_id = service.create_contact(form, profile_from_session(request))
    return _redirect(f"/contacts/{contact_id}")


@router.get("/contacts/{contact_id}/edit")
def edit_form(contact_id: str, request: Request, service: ServiceDep, templates: TemplatesDep):
    contact = service.get_contact(parse_contact_id(contact_id))
    return templates.TemplateResponse(
        request,
        "edit.html",
        {"contact": contact, "profile": profile_from_session(request)},
    )


# Registered before the update route: "/contacts/{id}" would otherwise match "5:delete".
@router.post("/contacts/{contact_id}:delete")
def delete_contact(contact_id: str, service: ServiceDep):
    service.delete_contact(parse_contact_id(contact_id))
    return _redirect("/contacts")


@router.get("/contacts/{contact_id}")
def contact_detail(contact_id: str, request: Request, service: ServiceDep, templates: TemplatesDep):
    contact = service.get_contact(parse_contact_id(contact_id))
    return templates.TemplateResponse(
        request,
        "detail.html",
        {"contact": contact, "profile": profile_from_session(request)},
    )


@router.api_route("/contacts/{contact_id}", methods=["POST", "PUT"])
def update_contact(contact_id: str, request: Request, service: ServiceDep, form: FormDep):
    contact = service.update_contact(
        parse_contact_id(contact_id), form, profile_from_session(request)
    )
    return _redirect(f"/contacts/{contact.id}")


@router.get("/login")
def login_form(request: Request, templates: TemplatesDep, redirect: str = "/contacts"):
    return templates.TemplateResponse(
        request,
        "login.html",
        {"redirect": _safe_redirect(redirect), "profile": profile_from_session(request)},
    )


@router.post("/login")
def login(
    request: Request,
    display_name: Annotated[str, Form()] = "",
    redirect: Annotated[str, Form()] = "/contacts",
):
    name = display_name.strip()
    if not name:
        raise InvalidArgument("display name is required to sign in")
    request.session[SESSION_PROFILE_KEY] = {"id": _profile_id(name), "display_name": name}
    logger.info("Signed in %s", name)
    return _redirect(_safe_redirect(redirect))


@router.post("/logout")
def logout(request: Request):
    request.session.pop(SESSION_PROFILE_KEY, None)
    return _redirect("/contacts")


app = create_app()

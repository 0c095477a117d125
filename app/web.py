from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from app.schemas import LoginForm
from services.live import DashboardUser, LiveSession, LiveSessionRegistry, build_default_registry


SESSION_COOKIE = "dashboard_session"
ROW_POLL_INTERVAL_MS = 1000

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_registry() -> LiveSessionRegistry:
    return build_default_registry()


def get_session(
    session_id: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
    registry: LiveSessionRegistry = Depends(get_registry),
) -> Optional[LiveSession]:
    return registry.get(session_id)


def state_color(state: Optional[str]) -> str:
    return "green" if state == "NORMAL" else "red"


templates.env.filters["state_color"] = state_color


router = APIRouter(include_in_schema=False)


@router.get("/ui/login", name="ui_login", response_class=HTMLResponse)
async def ui_login(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "ui/login.html", {"error": None})


@router.post("/ui/login", name="ui_login_submit", response_class=HTMLResponse)
async def ui_login_submit(
    request: Request,
    email: str = Form(""),
    preferred_username: str = Form(""),
    session_id: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
    registry: LiveSessionRegistry = Depends(get_registry),
) -> Response:
    try:
        form = LoginForm(email=email.strip(), preferred_username=preferred_username.strip())
    except ValidationError as exc:
        field = exc.errors()[0]["loc"][0]
        return templates.TemplateResponse(
            request,
            "ui/login.html",
            {"error": f"Please enter a valid {str(field).replace('_', ' ')}.", "email": email},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    session = registry.open(
        DashboardUser(email=form.email, preferred_username=form.preferred_username),
        replaces=session_id,
    )
    response = RedirectResponse(
        request.url_for("ui_index"), status_code=status.HTTP_303_SEE_OTHER
    )
    response.set_cookie(SESSION_COOKIE, session.session_id, httponly=True, samesite="lax")
    return response


@router.post("/ui/logout", name="ui_logout")
async def ui_logout(
    request: Request,
    session_id: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
    registry: LiveSessionRegistry = Depends(get_registry),
) -> RedirectResponse:
    registry.close(session_id)
    response = RedirectResponse(
        request.url_for("ui_login"), status_code=status.HTTP_303_SEE_OTHER
    )
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    session: Optional[LiveSession] = Depends(get_session),
) -> Response:
    if session is None:
        return RedirectResponse(
            request.url_for("ui_login"), status_code=status.HTTP_303_SEE_OTHER
        )
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "user": session.user,
            "rows": session.tracker.view(),
            "poll_interval_ms": ROW_POLL_INTERVAL_MS,
        },
    )


@router.get("/ui/rows", name="ui_rows", response_class=HTMLResponse)
async def ui_rows(
    request: Request,
    session: Optional[LiveSession] = Depends(get_session),
) -> HTMLResponse:
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in to view live device status.",
        )
    return templates.TemplateResponse(
        request,
        "ui/_rows.html",
        {"rows": session.tracker.view()},
    )

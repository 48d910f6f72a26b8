"""
Server-rendered admin pages and the login flow.
"""
import structlog
from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse

from portfolio.auth import authenticate, get_session_user, is_admin, login, logout, require_admin_page
from portfolio.config import Settings
from portfolio.models.session import SessionUser
from portfolio.web.dependencies import get_settings
from portfolio.web.templating import render

# Set up structured logger
logger = structlog.get_logger()

router = APIRouter(tags=["admin-pages"])

LOGIN_PATH = "/admin/login"
DASHBOARD_PATH = "/admin/dashboard"
LOGIN_ERROR = "Invalid email or password"


@router.get("/admin")
async def admin_root():
    return RedirectResponse(DASHBOARD_PATH, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/admin/login")
async def login_page(request: Request):
    """Login form; an admin who is already signed in goes to the dashboard."""
    if is_admin(get_session_user(request)):
        return RedirectResponse(DASHBOARD_PATH, status_code=status.HTTP_303_SEE_OTHER)
    return render(request, "admin/login.html")


@router.post("/admin/login")
async def login_submit(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    settings: Settings = Depends(get_settings),
):
    user = authenticate(email, password, settings.auth)
    if user is None:
        return render(
            request,
            "admin/login.html",
            {"error": LOGIN_ERROR, "email": email},
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    login(request, user)
    return RedirectResponse(DASHBOARD_PATH, status_code=status.HTTP_303_SEE_OTHER)


@router.post("/admin/logout")
async def logout_submit(request: Request):
    logout(request)
    return RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/admin/dashboard")
async def dashboard_page(request: Request, user: SessionUser = Depends(require_admin_page)):
    return render(request, "admin/dashboard.html", {"user": user})


@router.get("/admin/videos")
async def videos_page(request: Request, user: SessionUser = Depends(require_admin_page)):
    return render(request, "admin/videos.html", {"user": user})


@router.get("/admin/vectors")
async def vectors_page(request: Request, user: SessionUser = Depends(require_admin_page)):
    return render(request, "admin/vectors.html", {"user": user})


@router.get("/loading")
async def loading_page(request: Request):
    """Spinner shown while a page is being prepared."""
    return render(request, "loading.html")

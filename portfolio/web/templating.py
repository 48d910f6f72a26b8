"""
Jinja2 template rendering.

Every page receives the session user so the base layout can show who is
signed in.
"""
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates

from portfolio.auth import get_session_user
from portfolio.models.vector import VectorType
from portfolio.models.video import VideoCategory

# Setup templates
templates = Jinja2Templates(directory=Path(__file__).parent / "templates")
templates.env.globals["video_categories"] = [c.value for c in VideoCategory]
templates.env.globals["vector_types"] = VectorType.values()


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
):
    """Render a template with the current session user."""
    page_context = {"user": get_session_user(request)}
    page_context.update(context or {})
    return templates.TemplateResponse(request, name, page_context, status_code=status_code)

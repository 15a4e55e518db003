from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
templates.env.filters["money"] = lambda value: f"{value or 0:,.2f}"


def is_htmx(request: Request) -> bool:
    return request.headers.get("HX-Request") == "true"


def render(request: Request, name: str, context: dict = None, status_code: int = 200):
    """Render a page, or only its content block for htmx swaps."""
    context = dict(context or {})
    context["layout"] = "partial.html" if is_htmx(request) else "base.html"
    return templates.TemplateResponse(request, name, context, status_code=status_code)

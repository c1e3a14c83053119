"""Frontend view routes for serving HTML templates."""
from datetime import datetime
from pathlib import Path
from typing import Optional
from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from certverify.config import get_version, get_settings
from certverify.utils.certificate_id import normalize_certificate_id, SUB_PROGRAM_LABELS, MAX_SERIAL


router = APIRouter(tags=["Views"])

# Configure Jinja2 templates - path is relative to backend directory
templates_path = Path(__file__).parent.parent.parent.parent.parent / "frontend" / "templates"
templates = Jinja2Templates(directory=str(templates_path))

# Add global context processors
templates.env.globals["app_version"] = get_version()
_settings = get_settings()
templates.env.globals["app_environment"] = _settings.ENVIRONMENT
templates.env.globals["issuer_name"] = _settings.ISSUER_NAME


@router.get("/", response_class=HTMLResponse)
async def verify_page(
    request: Request,
    id: Optional[str] = Query(None, max_length=32)
):
    """Render the public verification page. ?id= pre-fills and submits the lookup."""
    return templates.TemplateResponse(
        request,
        "pages/verify.html",
        {
            "initial_id": normalize_certificate_id(id) if id else "",
            "sub_programs": SUB_PROGRAM_LABELS,
            "max_serial": MAX_SERIAL,
            "now": datetime.now(),
        }
    )

import logging
import secrets
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from scanbeauty.analytics import build_dashboard_stats
from scanbeauty.config import Settings, get_settings
from scanbeauty.database import get_db
from scanbeauty.recommender.messages import CONCERN_LABELS
from scanbeauty.repository import LeadRepository
from scanbeauty.schemas import SkinType

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboard"])
template_dir = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(template_dir))

security = HTTPBasic()
_repository = LeadRepository()


def get_lead_repository() -> LeadRepository:
    return _repository


def require_admin(
    credentials: HTTPBasicCredentials = Depends(security),
    settings: Settings = Depends(get_settings),
) -> str:
    """HTTP Basic gate; with no admin password configured nobody gets in."""
    password = settings.admin_password
    valid = password is not None and (
        secrets.compare_digest(credentials.username.encode(), settings.admin_username.encode())
        & secrets.compare_digest(credentials.password.encode(), password.encode())
    )
    if not valid:
        logger.warning(f"Rejected admin login for '{credentials.username}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenziali non valide",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username


def _concern_label(concern: str) -> str:
    return CONCERN_LABELS.get(concern, concern)


@router.get("/", response_class=HTMLResponse)
async def dashboard_home(
    request: Request,
    q: Optional[str] = None,
    skin_type: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    repo: LeadRepository = Depends(get_lead_repository),
    _admin: str = Depends(require_admin),
):
    """Lead list with the headline counters; counters always cover every lead."""
    q = (q or "").strip() or None
    skin_type = skin_type or None

    leads = await repo.get_all_leads(db)
    stats = build_dashboard_stats(leads)
    if q or skin_type:
        leads = await repo.get_all_leads(db, q=q, skin_type=skin_type)

    rows = [
        {
            "id": lead.id,
            "name": lead.name,
            "email": lead.email,
            "phone": lead.phone,
            "skin_type": lead.skin_type or "-",
            "age": lead.age,
            "concerns": [_concern_label(c) for c in (lead.concerns or [])],
            "discount_code": lead.discount_code,
            "created_at": lead.created_at.strftime("%Y-%m-%d %H:%M") if lead.created_at else None,
        }
        for lead in leads
    ]

    return templates.TemplateResponse(request, "dashboard.html", {
        "stats": stats,
        "leads": rows,
        "q": q or "",
        "skin_type": skin_type or "",
        "skin_types": [s.value for s in SkinType],
    })


@router.get("/lead/{lead_id}", response_class=HTMLResponse)
async def lead_detail(
    lead_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    repo: LeadRepository = Depends(get_lead_repository),
    _admin: str = Depends(require_admin),
):
    lead = await repo.get_lead(db, lead_id)
    if not lead:
        return HTMLResponse("<h1>Lead non trovato</h1>", status_code=404)

    links = sorted(lead.products, key=lambda link: link.position)
    context = {
        "id": lead.id,
        "name": lead.name,
        "email": lead.email,
        "phone": lead.phone,
        "skin_type": lead.skin_type,
        "age": lead.age,
        "concerns": [_concern_label(c) for c in (lead.concerns or [])],
        "product_type": lead.product_type,
        "additional_info": lead.additional_info,
        "discount_code": lead.discount_code,
        "skin_scores": lead.skin_scores or {},
        "created_at": lead.created_at.strftime("%Y-%m-%d %H:%M") if lead.created_at else None,
        "products": [
            {
                "name": link.product.name,
                "category": link.product.category,
                "price": link.product.price,
            }
            for link in links
            if link.product is not None
        ],
    }

    return templates.TemplateResponse(request, "lead_detail.html", {"lead": context})


@router.get("/analytics", response_class=HTMLResponse)
async def analytics(
    request: Request,
    db: AsyncSession = Depends(get_db),
    repo: LeadRepository = Depends(get_lead_repository),
    _admin: str = Depends(require_admin),
):
    leads = await repo.get_all_leads(db)
    stats = build_dashboard_stats(leads)
    for item in stats.top_concerns:
        item.name = _concern_label(item.name)
    top_products = await repo.get_top_products(db)

    return templates.TemplateResponse(request, "analytics.html", {
        "stats": stats,
        "top_products": top_products,
    })

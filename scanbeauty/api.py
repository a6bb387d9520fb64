"""
Public funnel API used by the quiz front-end.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from scanbeauty.config import Settings, get_settings
from scanbeauty.database import get_db
from scanbeauty.schemas import (
    AdvisorChatRequest,
    CartItemIn,
    CartView,
    ChatResponse,
    Product,
    ProductChatRequest,
    QuestionsChatRequest,
    QuizSubmission,
    RecommendationResponse,
    SkinAnalysisResult,
)
from scanbeauty.services.advisor import AdvisorService
from scanbeauty.services.cart import CartStorage, InMemoryCartStorage, load_or_create
from scanbeauty.services.funnel import FunnelService
from scanbeauty.services.rate_limit import RateLimiter
from scanbeauty.services.skin_analysis import SkinAnalysisService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["funnel"])

MAX_PHOTO_BYTES = 10 * 1024 * 1024

_funnel_service: Optional[FunnelService] = None
_skin_analysis_service: Optional[SkinAnalysisService] = None
_advisor_service: Optional[AdvisorService] = None
_cart_storage: Optional[CartStorage] = None
_analysis_limiter: Optional[RateLimiter] = None


# ── Dependencies ────────────────────────────────────────────────────────────


def get_funnel_service() -> FunnelService:
    global _funnel_service
    if _funnel_service is None:
        _funnel_service = FunnelService()
    return _funnel_service


def get_skin_analysis_service() -> SkinAnalysisService:
    global _skin_analysis_service
    if _skin_analysis_service is None:
        _skin_analysis_service = SkinAnalysisService()
    return _skin_analysis_service


def get_advisor_service() -> AdvisorService:
    global _advisor_service
    if _advisor_service is None:
        _advisor_service = AdvisorService()
    return _advisor_service


def get_cart_storage() -> CartStorage:
    global _cart_storage
    if _cart_storage is None:
        _cart_storage = InMemoryCartStorage()
    return _cart_storage


def get_analysis_limiter() -> RateLimiter:
    global _analysis_limiter
    if _analysis_limiter is None:
        _analysis_limiter = RateLimiter(
            limit=get_settings().analysis_daily_limit, window_seconds=24 * 60 * 60
        )
    return _analysis_limiter


def client_key(request: Request, trusted_hops: int = 0) -> str:
    """Client address for rate limiting.

    X-Forwarded-For is read from the right: each trusted proxy appends the
    address it saw, so the entry added by the outermost one is the client.
    Anything to the left of it is supplied by the client.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if trusted_hops > 0 and forwarded:
        hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
        if hops:
            return hops[-min(trusted_hops, len(hops))]
    return request.client.host if request.client else "unknown"


# ── Catalog & recommendations ───────────────────────────────────────────────


@router.get("/products", response_model=list[Product])
async def list_products(
    product_type: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    funnel: FunnelService = Depends(get_funnel_service),
):
    return await funnel.list_products(db, product_type)


@router.post("/recommendations", response_model=RecommendationResponse)
async def create_recommendations(
    submission: QuizSubmission,
    db: AsyncSession = Depends(get_db),
    funnel: FunnelService = Depends(get_funnel_service),
):
    return await funnel.complete_quiz(db, submission)


# ── AI skin analysis ────────────────────────────────────────────────────────


@router.post("/analyze-skin", response_model=SkinAnalysisResult)
async def analyze_skin(
    request: Request,
    photo: UploadFile = File(...),
    service: SkinAnalysisService = Depends(get_skin_analysis_service),
    limiter: RateLimiter = Depends(get_analysis_limiter),
    settings: Settings = Depends(get_settings),
):
    key = client_key(request, settings.trusted_proxy_hops)
    decision = limiter.check(key)
    if not decision.allowed:
        logger.warning(f"Analysis rate limit exceeded for {key}")
        return JSONResponse(
            status_code=429,
            content={
                "error": f"Hai raggiunto il limite giornaliero di {limiter.limit} analisi. Riprova domani.",
                "retry_after": decision.retry_after,
            },
            headers={"Retry-After": str(decision.retry_after)},
        )

    data = await photo.read()
    if not data:
        raise HTTPException(status_code=400, detail="Nessuna foto ricevuta.")
    if len(data) > MAX_PHOTO_BYTES:
        raise HTTPException(status_code=413, detail="La foto è troppo grande (max 10 MB).")

    return await service.analyze(data)


# ── Chat advisors ───────────────────────────────────────────────────────────


@router.post("/chat/questions", response_model=ChatResponse)
async def chat_questions(
    body: QuestionsChatRequest,
    advisor: AdvisorService = Depends(get_advisor_service),
):
    reply = await advisor.ask_questions(body.message, body.history, body.user_name)
    return ChatResponse(response=reply)


@router.post("/chat/product", response_model=ChatResponse)
async def chat_product(
    body: ProductChatRequest,
    db: AsyncSession = Depends(get_db),
    funnel: FunnelService = Depends(get_funnel_service),
    advisor: AdvisorService = Depends(get_advisor_service),
):
    catalog = await funnel.load_catalog(db) or []
    reply = await advisor.ask_product(body.message, catalog, body.history, body.user_name)
    return ChatResponse(response=reply)


@router.post("/chat/advisor", response_model=ChatResponse)
async def chat_advisor(
    body: AdvisorChatRequest,
    db: AsyncSession = Depends(get_db),
    funnel: FunnelService = Depends(get_funnel_service),
    advisor: AdvisorService = Depends(get_advisor_service),
):
    products = await funnel.products_by_ids(db, body.product_ids)
    reply = await advisor.ask_results(
        body.message, body.profile, products, body.skin_scores, body.user_name
    )
    return ChatResponse(response=reply)


# ── Cart ────────────────────────────────────────────────────────────────────


async def _render_cart(db: AsyncSession, funnel: FunnelService, cart) -> CartView:
    products = await funnel.products_by_ids(db, cart.product_ids)
    return cart.view(products)


@router.get("/cart/{session_id}", response_model=CartView)
async def get_cart(
    session_id: str,
    db: AsyncSession = Depends(get_db),
    funnel: FunnelService = Depends(get_funnel_service),
    storage: CartStorage = Depends(get_cart_storage),
):
    cart = await load_or_create(storage, session_id)
    return await _render_cart(db, funnel, cart)


@router.post("/cart/{session_id}/items", response_model=CartView)
async def add_cart_item(
    session_id: str,
    item: CartItemIn,
    db: AsyncSession = Depends(get_db),
    funnel: FunnelService = Depends(get_funnel_service),
    storage: CartStorage = Depends(get_cart_storage),
):
    cart = await storage.update(session_id, lambda c: c.add(item.product_id, item.quantity))
    return await _render_cart(db, funnel, cart)


@router.post("/cart/{session_id}/routine", response_model=CartView)
async def add_routine_to_cart(
    session_id: str,
    product_ids: list[str] = Body(...),
    db: AsyncSession = Depends(get_db),
    funnel: FunnelService = Depends(get_funnel_service),
    storage: CartStorage = Depends(get_cart_storage),
):
    cart = await storage.update(session_id, lambda c: c.add_many(product_ids))
    return await _render_cart(db, funnel, cart)


@router.delete("/cart/{session_id}/items/{product_id}", response_model=CartView)
async def remove_cart_item(
    session_id: str,
    product_id: str,
    db: AsyncSession = Depends(get_db),
    funnel: FunnelService = Depends(get_funnel_service),
    storage: CartStorage = Depends(get_cart_storage),
):
    cart = await storage.update(session_id, lambda c: c.remove(product_id))
    return await _render_cart(db, funnel, cart)


@router.delete("/cart/{session_id}", status_code=204)
async def clear_cart(
    session_id: str,
    storage: CartStorage = Depends(get_cart_storage),
):
    await storage.delete(session_id)

from fastapi import APIRouter, Depends
from fastapi import status as http_status
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.affiliates.notifier import DiscordNotifier, get_notifier
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import AffiliateCreate, AffiliateCreateResponse
from . import service

router = APIRouter(tags=["affiliates"])


@router.post(
    "/create",
    response_model=AffiliateCreateResponse,
    status_code=http_status.HTTP_200_OK,
)
async def create_affiliate(
    payload: AffiliateCreate,
    db: AsyncSession = Depends(get_db),
    notifier: DiscordNotifier = Depends(get_notifier),
):
    """Register an affiliate and return its referral code."""
    try:
        return await service.create_affiliate(db, payload, notifier)
    except ServiceError as e:
        return JSONResponse(status_code=e.status_code, content=e.body)


@router.get("/", response_class=PlainTextResponse)
async def index() -> str:
    return "OK - Linkio Affiliate API"

"""
Affiliate registration: conflict check, code generation, insert, notification.
"""

import logging
from typing import Optional

from fastapi import status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.affiliates.code_generator import SqlAlchemyCodeStore, generate_affiliate_code
from app.affiliates.models import Affiliate
from app.affiliates.notifier import DiscordNotifier
from app.core.config import settings
from app.core.exceptions import ServiceError

from .schemas import AffiliateCreate, AffiliateCreateResponse

logger = logging.getLogger(__name__)

ALREADY_EXISTS = "Cet affilié existe déjà"
INTERNAL_ERROR = "Erreur interne du serveur"


def _conflict_field(existing: Affiliate, payload: AffiliateCreate) -> str:
    if existing.email == payload.email:
        return "email"
    if existing.phone == payload.phone:
        return "téléphone"
    if payload.instagram and existing.instagram == payload.instagram:
        return "instagram"
    return "email/téléphone/instagram"


async def find_conflicting_affiliate(
    db: AsyncSession, payload: AffiliateCreate
) -> Optional[Affiliate]:
    """Existing affiliate sharing the email, phone or (when given) instagram handle."""
    conditions = [Affiliate.email == payload.email, Affiliate.phone == payload.phone]
    if payload.instagram:
        conditions.append(Affiliate.instagram == payload.instagram)
    result = await db.execute(select(Affiliate).where(or_(*conditions)).limit(1))
    return result.scalar_one_or_none()


def _conflict_error(existing: Affiliate, payload: AffiliateCreate) -> ServiceError:
    return ServiceError(
        ALREADY_EXISTS,
        status.HTTP_409_CONFLICT,
        body={
            "success": False,
            "error": ALREADY_EXISTS,
            "code": existing.code,
            "field": _conflict_field(existing, payload),
        },
    )


async def _insert_affiliate(db: AsyncSession, payload: AffiliateCreate) -> Affiliate:
    """
    Generate a code and insert the row.
    A duplicate key on insert means another request won the race: re-check the
    contact fields, otherwise retry with a fresh code.
    """
    store = SqlAlchemyCodeStore(db)
    attempts = max(1, settings.affiliate_insert_attempts)

    for attempt in range(attempts):
        code = await generate_affiliate_code(
            store,
            payload.first_name,
            payload.last_name,
            max_attempts=settings.affiliate_code_max_attempts,
            verify_fallback=settings.affiliate_code_verify_fallback,
        )
        affiliate = Affiliate(
            code=code,
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            phone=payload.phone,
            instagram=payload.instagram,
            active=True,
        )
        db.add(affiliate)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            existing = await find_conflicting_affiliate(db, payload)
            if existing:
                raise _conflict_error(existing, payload)
            logger.info(
                "Affiliate code %s taken at insert (attempt %d/%d), retrying",
                code,
                attempt + 1,
                attempts,
            )
            continue
        await db.refresh(affiliate)
        return affiliate

    raise ServiceError(ALREADY_EXISTS, status.HTTP_409_CONFLICT)


async def create_affiliate(
    db: AsyncSession,
    payload: AffiliateCreate,
    notifier: DiscordNotifier,
) -> AffiliateCreateResponse:
    try:
        existing = await find_conflicting_affiliate(db, payload)
        if existing:
            raise _conflict_error(existing, payload)

        affiliate = await _insert_affiliate(db, payload)
    except ServiceError:
        # already mapped, just bubble up
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to create affiliate")
        raise ServiceError(
            INTERNAL_ERROR,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            body={"success": False, "error": INTERNAL_ERROR, "details": str(e) or type(e).__name__},
        ) from e

    logger.info("Affiliate %s created", affiliate.code)
    await notifier.notify_affiliate_created(affiliate)

    return AffiliateCreateResponse(success=True, code=affiliate.code)

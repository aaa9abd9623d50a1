"""
Affiliate referral code generation.

Format: first 3 chars of first name + first 3 chars of last name (uppercase), e.g. JOHSMI.
On collision a 3-char random suffix is appended to the base (JOHSMI7QK) and the store
is queried again. After ``max_attempts`` collisions a fully random 8-char code is
returned without being checked against the store.

The check here is best effort only: the insert must still rely on the primary key
constraint, and callers treat a duplicate key on insert as a retryable outcome.
"""

import logging
import secrets
import string
import unicodedata
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.affiliates.models import Affiliate

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
BASE_PART_LENGTH = 3
SUFFIX_LENGTH = 3
FALLBACK_LENGTH = 8
DEFAULT_MAX_ATTEMPTS = 100


class CodeLookupError(LookupError):
    """The uniqueness store could not answer an existence query."""


class CodeGenerationError(Exception):
    """The verified fallback code was already taken."""


class CodeStore(Protocol):
    async def exists(self, code: str) -> bool:
        ...


class SqlAlchemyCodeStore:
    """CodeStore backed by the affiliates table. Read-only."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def exists(self, code: str) -> bool:
        try:
            result = await self.db.execute(
                select(Affiliate.code).where(Affiliate.code == code)
            )
        except SQLAlchemyError as e:
            raise CodeLookupError(f"Failed to look up affiliate code {code!r}") from e
        return result.scalar_one_or_none() is not None


def _random_chars(length: int) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def _name_part(name: str) -> str:
    """First 3 chars of name, uppercased, folded to A-Z/0-9 (Élo -> ELO, O'Neil -> ON)."""
    part = unicodedata.normalize("NFKD", (name or "")[:BASE_PART_LENGTH].upper())
    return "".join(ch for ch in part if ch in CODE_ALPHABET)


def build_base_code(first_name: str, last_name: str) -> str:
    """
    Base candidate without any store check.

    Examples:
        John, Smith -> JOHSMI
        Al, Wu      -> ALWU
    """
    return _name_part(first_name) + _name_part(last_name)


async def generate_affiliate_code(
    store: CodeStore,
    first_name: str,
    last_name: str,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    verify_fallback: bool = False,
) -> str:
    """
    Generate a referral code not present in ``store`` at the time of the check.

    Queries run one after the other; CodeLookupError from the store propagates.
    With ``verify_fallback`` the random fallback is checked once and
    CodeGenerationError is raised if it is taken.
    """
    base = build_base_code(first_name, last_name)
    # Nothing usable in either name: never hand out an empty code
    code = base if base else base + _random_chars(SUFFIX_LENGTH)

    for _ in range(max_attempts):
        if not await store.exists(code):
            return code
        code = base + _random_chars(SUFFIX_LENGTH)

    fallback = _random_chars(FALLBACK_LENGTH)
    logger.warning(
        "Affiliate code space exhausted for base %r after %d attempts; using random fallback %s",
        base,
        max_attempts,
        fallback,
    )
    if verify_fallback and await store.exists(fallback):
        raise CodeGenerationError("Could not generate unique affiliate code")
    return fallback

"""
Persistent storage for registered affiliates.
One row per affiliate; the referral code is the primary key.
"""

from sqlalchemy import Boolean, Column, DateTime, String, func

from app.db.session import Base


class Affiliate(Base):
    """
    Affiliate registered through POST /create.
    email, phone and instagram are unique; NULL instagram values never collide.
    """

    __tablename__ = "affiliates"

    code = Column(String(32), primary_key=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(50), nullable=False, unique=True)
    instagram = Column(String(255), nullable=True, unique=True)
    active = Column(Boolean, nullable=False, default=True)
    # Assigned by the database on insert
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

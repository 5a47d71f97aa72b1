"""
Google Calendar Integration Models
"""
from datetime import datetime, timedelta

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .models import generate_uuid

# Refresh tokens this long before Google considers them expired
EXPIRY_BUFFER = timedelta(minutes=5)


class GoogleToken(Base):
    __tablename__ = "google_tokens"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    member_id = Column(String(36), ForeignKey("members.id"), nullable=False, index=True)

    # OAuth tokens (encrypted)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=False)
    expiry_date = Column(DateTime, nullable=False)
    scope = Column(Text, nullable=True)
    token_type = Column(String(50), default="Bearer")

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    member = relationship("Member", backref="google_tokens")

    @property
    def is_expired(self) -> bool:
        return self.expiry_date <= datetime.utcnow() + EXPIRY_BUFFER

"""
Modelo para suscriptores de la página "coming soon".
Un registro por email normalizado (índice único en la base).
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, JSON, func
from sqlalchemy.orm import validates

from ..database import Base
from ..schemas.subscriber_schema import Interest

SUBSCRIBER_SOURCE = "coming-soon-page"

ALLOWED_INTERESTS = {interest.value for interest in Interest}


class ComingSoonSubscriber(Base):
    __tablename__ = "coming_soon_subscribers"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # Lista de intereses: attending, vendor, organising, venue
    interests = Column(JSON, nullable=False, default=list)
    subscribed_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    source = Column(String(50), default=SUBSCRIBER_SOURCE, nullable=False)
    # Datos de procedencia (solo diagnóstico)
    ip_address = Column(String(255), nullable=True)
    user_agent = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @validates("interests")
    def validate_interests(self, key, value):
        values = [getattr(interest, "value", interest) for interest in (value or [])]
        invalid = [v for v in values if v not in ALLOWED_INTERESTS]
        if invalid:
            raise ValueError(f"Invalid interest: {', '.join(map(str, invalid))}")
        return values

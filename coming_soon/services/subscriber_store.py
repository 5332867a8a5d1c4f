"""
Acceso a la tabla de suscriptores "coming soon".

La unicidad del email la garantiza el índice único de la base, no la aplicación:
dos altas simultáneas del mismo email terminan en un IntegrityError para la
segunda, que se traduce a DuplicateSubscriberError.
"""
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models.coming_soon_subscriber import ComingSoonSubscriber


class DuplicateSubscriberError(Exception):
    """Ya existe un suscriptor con ese email (violación del índice único)."""

    def __init__(self, email: str):
        super().__init__(f"Subscriber already exists: {email}")
        self.email = email


class SubscriberStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[ComingSoonSubscriber]:
        return self.db.query(ComingSoonSubscriber).filter(
            ComingSoonSubscriber.email == email
        ).first()

    def create(self, subscriber: ComingSoonSubscriber) -> ComingSoonSubscriber:
        try:
            self.db.add(subscriber)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateSubscriberError(subscriber.email) from e
        self.db.refresh(subscriber)
        return subscriber

    def update(self, subscriber: ComingSoonSubscriber) -> ComingSoonSubscriber:
        self.db.add(subscriber)
        self.db.commit()
        self.db.refresh(subscriber)
        return subscriber

    def list_all(self) -> List[ComingSoonSubscriber]:
        """Suscriptores del más reciente al más antiguo."""
        return (
            self.db.query(ComingSoonSubscriber)
            .order_by(ComingSoonSubscriber.subscribed_at.desc(), ComingSoonSubscriber.id.desc())
            .all()
        )

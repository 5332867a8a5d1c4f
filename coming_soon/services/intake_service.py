"""
Servicio de alta de suscriptores de la página "coming soon".

Decide entre:
- crear el suscriptor (email nuevo),
- actualizar sus intereses (email existente o alta concurrente perdida),
- aceptar en modo demo sin guardar nada (base no disponible).

Los errores de conectividad de la base nunca llegan al usuario: se resuelven
como una respuesta demo. Cualquier otro error de la base se propaga como
UnexpectedStorageError (500 en el router).
"""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..database import DatabaseHandle
from ..models.coming_soon_subscriber import ComingSoonSubscriber
from ..utils import is_valid_email, normalize_email
from .subscriber_store import DuplicateSubscriberError, SubscriberStore

logger = logging.getLogger(__name__)


class IntakeError(Exception):
    """Error base del servicio de suscripciones."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidEmailError(IntakeError):
    pass


class InvalidInterestError(IntakeError):
    pass


class BackendUnavailableError(IntakeError):
    pass


class UnexpectedStorageError(IntakeError):
    pass


class SubscriptionOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DEMO_ACCEPTED = "demo_accepted"


@dataclass
class SubscriptionResult:
    outcome: SubscriptionOutcome
    email: str
    interests: List[str] = field(default_factory=list)

    @property
    def already_subscribed(self) -> bool:
        return self.outcome == SubscriptionOutcome.UPDATED

    @property
    def demo(self) -> bool:
        return self.outcome == SubscriptionOutcome.DEMO_ACCEPTED


def _interest_values(interests: Optional[Iterable]) -> List[str]:
    """Convierte los intereses (enum o str) a valores únicos, respetando el orden."""
    if not interests:
        return []
    values = [getattr(interest, "value", interest) for interest in interests]
    return list(dict.fromkeys(values))


def _rollback(db) -> None:
    try:
        db.rollback()
    except SQLAlchemyError as e:
        logger.warning(f"⚠️ No se pudo hacer rollback: {e}")


def _apply_interests(
    store: SubscriberStore, subscriber: ComingSoonSubscriber, interests: List[str]
) -> None:
    # Reenvío sin intereses: no se toca el registro
    if not interests:
        return
    logger.info(f"📝 Actualizando intereses de {subscriber.email}: {', '.join(interests)}")
    try:
        subscriber.interests = interests
    except ValueError as e:
        raise InvalidInterestError(str(e)) from e
    store.update(subscriber)


def _subscribe_with_store(
    store: SubscriberStore,
    email: str,
    interests: List[str],
    ip_address: str,
    user_agent: str,
) -> SubscriptionResult:
    existing = store.find_by_email(email)

    if existing is None:
        try:
            subscriber = ComingSoonSubscriber(
                email=email,
                interests=interests,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        except ValueError as e:
            raise InvalidInterestError(str(e)) from e

        try:
            store.create(subscriber)
            logger.info(
                f"✅ Nuevo suscriptor guardado: {email} con intereses: {', '.join(interests) or 'ninguno'}"
            )
            return SubscriptionResult(SubscriptionOutcome.CREATED, email, interests)
        except DuplicateSubscriberError:
            # Otra request creó el mismo email entre el find y el insert
            logger.info(f"🔁 Alta concurrente de {email}, se trata como suscriptor existente")
            existing = store.find_by_email(email)
            if existing is None:
                raise UnexpectedStorageError("Server error. Please try again later.")

    _apply_interests(store, existing, interests)
    return SubscriptionResult(
        SubscriptionOutcome.UPDATED, email, list(existing.interests or [])
    )


def subscribe(
    db_handle: DatabaseHandle,
    email: Optional[str],
    interests: Optional[Iterable] = None,
    ip_address: str = "unknown",
    user_agent: str = "",
) -> SubscriptionResult:
    """
    Suscribe un email a la lista de "coming soon".

    Lanza InvalidEmailError si el email no tiene forma local@dominio.tld
    (sin tocar la base). Con la base caída devuelve DEMO_ACCEPTED sin guardar.
    """
    if not is_valid_email(email):
        logger.info(f"❌ Email inválido: {email!r}")
        raise InvalidEmailError("Please provide a valid email address")

    normalized = normalize_email(email)
    tags = _interest_values(interests)

    if not db_handle.is_available():
        logger.warning(f"⚠️ Base de datos no conectada, respuesta demo para {normalized}")
        return SubscriptionResult(SubscriptionOutcome.DEMO_ACCEPTED, normalized, tags)

    db = db_handle.session()
    try:
        return _subscribe_with_store(
            SubscriberStore(db), normalized, tags, ip_address or "unknown", user_agent or ""
        )
    except SQLAlchemyError as e:
        _rollback(db)
        if db_handle.is_disconnect(e):
            db_handle.invalidate()
            logger.warning(f"⚠️ Se perdió la conexión a la base ({e}), respuesta demo para {normalized}")
            return SubscriptionResult(SubscriptionOutcome.DEMO_ACCEPTED, normalized, tags)
        logger.error(f"💥 Error de suscripción para {normalized}: {e}", exc_info=True)
        raise UnexpectedStorageError("Server error. Please try again later.") from e
    finally:
        db.close()


def list_subscribers(db_handle: DatabaseHandle) -> List[ComingSoonSubscriber]:
    """Todos los suscriptores, del más reciente al más antiguo."""
    if not db_handle.is_available():
        raise BackendUnavailableError("Database not connected")

    db = db_handle.session()
    try:
        return SubscriberStore(db).list_all()
    except SQLAlchemyError as e:
        _rollback(db)
        if db_handle.is_disconnect(e):
            db_handle.invalidate()
            raise BackendUnavailableError("Database not connected") from e
        logger.error(f"Error al obtener suscriptores: {e}", exc_info=True)
        raise UnexpectedStorageError("Error fetching subscribers") from e
    finally:
        db.close()


def run_self_test(db_handle: DatabaseHandle) -> SubscriptionResult:
    """Suscribe un email de prueba único para verificar el circuito completo."""
    test_email = f"test-{int(time.time() * 1000)}@example.com"
    logger.info(f"🧪 Ejecutando prueba de suscripción con {test_email}")
    return subscribe(
        db_handle,
        test_email,
        ["venue"],
        ip_address="self-test",
        user_agent="coming-soon-self-test",
    )

"""
API Router para la página "coming soon": alta de suscriptores y listado.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..database import DatabaseHandle, get_db_handle
from ..schemas.subscriber_schema import (
    ErrorResponse,
    SelfTestResponse,
    SubscribeRequest,
    SubscribeResponse,
    SubscriberOut,
    SubscribersListResponse,
)
from ..services.intake_service import (
    BackendUnavailableError,
    IntakeError,
    InvalidEmailError,
    InvalidInterestError,
    SubscriptionOutcome,
    SubscriptionResult,
    UnexpectedStorageError,
    list_subscribers,
    run_self_test,
    subscribe,
)
from ..utils import get_client_ip, get_user_agent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/coming-soon", tags=["coming-soon"])

THANK_YOU_MESSAGE = "Thank you for subscribing! We'll notify you when we launch."
ALREADY_SUBSCRIBED_MESSAGE = "You're already subscribed! We'll notify you when we launch."


def _json(model, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=model.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def _subscribe_response(result: SubscriptionResult) -> SubscribeResponse:
    if result.outcome == SubscriptionOutcome.UPDATED:
        return SubscribeResponse(
            success=True, message=ALREADY_SUBSCRIBED_MESSAGE, already_subscribed=True
        )
    return SubscribeResponse(
        success=True,
        message=THANK_YOU_MESSAGE,
        already_subscribed=False,
        demo=True if result.demo else None,
    )


@router.post("/subscribe", response_model=SubscribeResponse)
def subscribe_coming_soon(
    payload: SubscribeRequest,
    request: Request,
    db_handle: DatabaseHandle = Depends(get_db_handle),
):
    """
    Suscribir un email a la lista de lanzamiento.
    - 201 si es un suscriptor nuevo
    - 200 con alreadySubscribed si ya existía (se actualizan sus intereses)
    - 200 con demo=true si la base no está disponible (no se guarda nada)
    """
    logger.info(f"📧 Solicitud de suscripción recibida: {payload.email!r}")
    try:
        result = subscribe(
            db_handle,
            payload.email,
            payload.interests,
            ip_address=get_client_ip(request),
            user_agent=get_user_agent(request),
        )
    except (InvalidEmailError, InvalidInterestError) as e:
        return _json(ErrorResponse(message=e.message), status_code=400)
    except IntakeError:
        return _json(ErrorResponse(message="Server error. Please try again later."), status_code=500)

    status_code = 201 if result.outcome == SubscriptionOutcome.CREATED else 200
    return _json(_subscribe_response(result), status_code=status_code)


@router.get("/subscribers", response_model=SubscribersListResponse)
def get_subscribers(db_handle: DatabaseHandle = Depends(get_db_handle)):
    """
    Listado de suscriptores (para pruebas/admin), del más reciente al más antiguo.
    """
    try:
        subscribers = list_subscribers(db_handle)
    except BackendUnavailableError as e:
        return JSONResponse(
            status_code=503,
            content={"success": False, "message": e.message, "demo": True},
        )
    except UnexpectedStorageError as e:
        return _json(ErrorResponse(message=e.message), status_code=500)

    items = [
        SubscriberOut(
            email=sub.email,
            interests=sub.interests or [],
            subscribed_at=sub.subscribed_at,
            source=sub.source,
        )
        for sub in subscribers
    ]
    return _json(SubscribersListResponse(count=len(items), subscribers=items))


@router.post("/test", response_model=SelfTestResponse)
def test_subscription(db_handle: DatabaseHandle = Depends(get_db_handle)):
    """Prueba de punta a punta con un email de prueba único."""
    try:
        result = run_self_test(db_handle)
    except IntakeError as e:
        return _json(SelfTestResponse(success=False, message="Test failed", error=e.message))

    return _json(
        SelfTestResponse(
            success=True,
            message="Test completed",
            test_result=_subscribe_response(result),
        )
    )

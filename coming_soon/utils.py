import re
from typing import Optional

from fastapi import Request

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: Optional[str]) -> bool:
    """
    Validación simple local@dominio.tld, sin chequeo de MX ni dominios descartables.

    Ejemplos:
    - "ana@example.com" -> True
    - "ana@example" -> False
    - "ana @example.com" -> False
    """
    if not email or not isinstance(email, str):
        return False
    return EMAIL_PATTERN.match(email) is not None


def normalize_email(email: str) -> str:
    """Email en minúsculas y sin espacios al inicio/final (clave única del suscriptor)."""
    return email.strip().lower()


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_user_agent(request: Request) -> str:
    return request.headers.get("user-agent", "")

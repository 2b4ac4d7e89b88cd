"""
Rate limiting per identificativo client, basato su slowapi.

I limiti hanno un nome e un contatore condiviso tra tutte le route che li
usano (es. tutte le scritture contano per API_WRITE). Lo storage è in
memoria, per processo: con più worker ogni processo conta per conto suo.

Le route limitate devono dichiarare i parametri `request: Request` e
`response: Response`, come richiesto da slowapi.
"""

import os
from typing import Dict

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

RATE_LIMITS: Dict[str, str] = {
    "AUTH_LOGIN": "5 per 15 minutes",
    "AUTH_SIGNUP": "3 per hour",
    "API_WRITE": "30 per minute",
    "EMAIL_SEND": "10 per hour",
}

RATE_LIMIT_MESSAGE = "Troppe richieste, riprova più tardi"


def is_rate_limit_enabled() -> bool:
    return os.getenv("RATE_LIMIT_ENABLED", "true").lower() in {"1", "true", "yes"}


def get_client_identifier(request: Request) -> str:
    """x-forwarded-for, x-real-ip, cf-connecting-ip, poi l'indirizzo del peer"""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for and forwarded_for.split(",")[0].strip():
        return forwarded_for.split(",")[0].strip()
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


limiter = Limiter(
    key_func=get_client_identifier,
    headers_enabled=True,
    enabled=is_rate_limit_enabled(),
    storage_uri="memory://",
)


def rate_limit(limit_name: str):
    """Decoratore di route: `@rate_limit("API_WRITE")` sotto `@router.post(...)`"""
    if limit_name not in RATE_LIMITS:
        raise ValueError(f"Limite sconosciuto: {limit_name}")
    return limiter.shared_limit(RATE_LIMITS[limit_name], scope=limit_name)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 con gli header X-RateLimit-* e Retry-After"""
    response = JSONResponse(status_code=429, content={"error": RATE_LIMIT_MESSAGE})
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)

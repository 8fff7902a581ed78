"""
Middleware para aplicar rate limiting a endpoints específicos usando slowapi
"""
from fastapi import Request, HTTPException
from limits import parse
from slowapi.util import get_remote_address

def apply_rate_limit(request: Request, limit: str):
    """
    Aplica rate limiting a un endpoint específico.
    Uso: apply_rate_limit(request, "5/minute")

    Si el limiter no está configurado (por ejemplo, en tests), la función no hace nada.
    """
    limiter = getattr(request.app.state, "limiter", None)
    if limiter is None:
        return

    key = get_remote_address(request)
    item = parse(limit)
    # _limiter es la estrategia de `limits` que usa slowapi por debajo
    if not limiter._limiter.hit(item, request.url.path, key):
        raise HTTPException(
            status_code=429,
            detail=f"Too many requests. Limit: {limit}. Try again later."
        )

"""
Errores tipados del motor de reservas y su traducción a respuestas HTTP.

El motor (ledger, calendario, catálogo) nunca lanza HTTPException: lanza una
subclase de PetSpaError y el handler registrado en main.py la convierte en
{"detail": ...} con el status_code correspondiente.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PetSpaError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(PetSpaError):
    """El id referenciado no existe."""
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(PetSpaError):
    """Clave única duplicada (turno asignado, teléfono, email...)."""
    status_code = status.HTTP_409_CONFLICT


class InvalidInput(PetSpaError):
    """Fecha/hora mal formada o valor de enum desconocido."""
    status_code = status.HTTP_400_BAD_REQUEST


class ValidationFailure(PetSpaError):
    """Regla de negocio opcional incumplida (propiedad de mascota, disponibilidad...)."""
    status_code = 422


async def petspa_error_handler(request: Request, exc: PetSpaError) -> JSONResponse:
    logger.warning(
        "%s %s -> %s: %s",
        request.method, request.url.path, type(exc).__name__, exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PetSpaError, petspa_error_handler)

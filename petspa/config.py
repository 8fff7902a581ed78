from pydantic import BaseModel
import os
from dotenv import load_dotenv
load_dotenv()  # carga el archivo .env de la raíz


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    app_name: str = os.getenv("APP_NAME", "PetSpa")
    env: str = os.getenv("APP_ENV", "dev")
    mongodb_uri: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    db_name: str = os.getenv("DB_NAME", "petspa")
    jwt_secret: str = os.getenv("JWT_SECRET", "change-me")
    jwt_expires_hours: int = int(os.getenv("JWT_EXPIRES_HOURS", "8"))
    frontend_base_url: str = os.getenv("FRONTEND_BASE_URL", "http://localhost:5173")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Reglas de reserva más estrictas (desactivadas = comportamiento histórico)
    strict_status_transitions: bool = _flag("STRICT_STATUS_TRANSITIONS")
    enforce_pet_ownership: bool = _flag("ENFORCE_PET_OWNERSHIP")
    enforce_staff_availability: bool = _flag("ENFORCE_STAFF_AVAILABILITY")


_settings: Settings | None = None
def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

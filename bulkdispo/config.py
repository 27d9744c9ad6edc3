"""
Configuration de l'application / Application configuration.
Utilise pydantic-settings pour charger depuis .env ou variables d'environnement.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Bulk Dispatch Planner"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # Database - SQLite par défaut pour le développement
    # Database - SQLite by default for development
    DATABASE_URL: str = "sqlite+aiosqlite:///./bulkdispo.db"

    # CORS - origines autorisées / allowed origins
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Rate Limiting
    RATE_LIMIT_DEFAULT: str = "60/minute"
    RATE_LIMIT_BOOKING: str = "120/minute"

    # Capacités standard (tonnes) / Standard capacities (tonnes)
    DEFAULT_MOTOR_UNIT_CAPACITY_T: float = 14.0
    DEFAULT_TRAILER_CAPACITY_T: float = 10.0

    # Ensemble de travail maximal pour la recherche inter-tours /
    # Max working set for the cross-tour order lookup
    TOUR_SCAN_LIMIT: int = 200

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()

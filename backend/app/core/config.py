# backend/app/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.shared.enums import PositionWeightPolicy

class Settings(BaseSettings):

    PROJECT_NAME: str = "Assessment Scoring API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Database ─────────────────────────────────────────────
    DATABASE_URL: str

    # ── JWT ──────────────────────────────────────────────────
    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # ── Scoring ──────────────────────────────────────────────
    # Règle positionnelle des poids d'options (voir engine/scoring/weights.py)
    POSITION_WEIGHT_POLICY: PositionWeightPolicy = PositionWeightPolicy.LEGACY


    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        extra='ignore'
        )
    
settings = Settings()

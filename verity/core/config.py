import os
from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
import logging

# Load environment variables from .env file
load_dotenv()

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Data directories
CACHE_DIR = BASE_DIR / "data" / "sessions"


class Settings(BaseSettings):
    """Application settings."""

    # App settings
    APP_NAME: str = "Verity"
    API_VERSION: str = "1.0.0"

    # Groq settings
    GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")

    # LLM settings
    LLM_MODEL: str = "llama3-70b-8192"
    LLM_TEMPERATURE: float = 0.0
    LLM_MAX_TOKENS: int = 4096
    LLM_TIMEOUT: float = 30.0
    NEGOTIATION_MODEL: str = "llama3-70b-8192"
    NEGOTIATION_TEMPERATURE: float = 0.7
    NEGOTIATION_MAX_TOKENS: int = 300
    NEGOTIATION_TIMEOUT: float = 15.0
    DRAFTING_TEMPERATURE: float = 0.7
    DRAFTING_MAX_TOKENS: int = 2048
    DRAFTING_TIMEOUT: float = 20.0
    FIX_MAX_TOKENS: int = 8192
    FIX_TIMEOUT: float = 60.0
    PREDICTION_MAX_TOKENS: int = 2048

    # Result cache
    CACHE_DIR: Path = CACHE_DIR
    CACHE_STORAGE_KEY: str = "verity_analysis"
    CACHE_TTL_SECONDS: int = 60 * 60
    CACHE_MAX_SESSIONS: int = 1024

    # Violation detection heuristics
    SEVERITY_KEYWORD_BONUS: int = 5
    SEVERITY_MAX_BONUS: int = 15
    SEVERITY_MIN: int = 1
    SEVERITY_MAX: int = 100
    CONTEXT_WINDOW: int = 100
    SEVERITY_KEYWORDS: list = [
        "sole discretion",
        "unlimited",
        "perpetual",
        "without notice",
        "irrevocable",
        "any and all",
        "at any time",
    ]

    # Risk scoring
    LEGAL_WEIGHT: float = 0.6
    UNFAIR_WEIGHT: float = 0.4
    COUNT_FACTOR_STEP: float = 0.05
    COUNT_FACTOR_CAP: float = 1.5
    CRITICAL_SEVERITY: int = 90
    CRITICAL_SCORE_FLOOR: int = 85
    REJECT_SCORE: int = 70
    REJECT_LEGAL_SEVERITY: int = 85
    NEGOTIATE_SCORE: int = 35
    CRITICAL_ISSUE_SEVERITY: int = 70

    # Fair standard comparison
    DEFAULT_TEMPLATE: str = "freelance_general"

    # Negotiation
    NEGOTIATION_MAX_TURNS: int = 6

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


# Create settings instance
settings = Settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

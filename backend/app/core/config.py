from pydantic_settings import BaseSettings
from typing import List, Any
import json
from pathlib import Path


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "UCET Hostel Management System"
    APP_VERSION: str = "2.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 3000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./hostel.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_ECHO: bool = False

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    BCRYPT_ROUNDS: int = 12  # 4 for dev (fast), 12 for prod (secure)

    # ==========================================
    # Registration pipeline
    # ==========================================
    REGISTRATION_TTL_HOURS: int = 24
    REGISTRATION_SWEEP_ENABLED: bool = True
    REGISTRATION_SWEEP_INTERVAL_MINUTES: int = 15
    ID_GENERATION_MAX_ATTEMPTS: int = 5

    # ==========================================
    # Invoices
    # ==========================================
    INVOICES_PATH: str = "invoices"
    INVOICE_GUEST_WINDOW_MINUTES: int = 30
    INVOICE_NUMBER_PREFIX: str = "UCET-INV-"

    # College letterhead printed on every invoice
    COLLEGE_NAME: str = "University College of Engineering Tindivanam"
    COLLEGE_ADDRESS: str = "Melpakkam, Tindivanam - 604 001, Villupuram District, Tamil Nadu"
    COLLEGE_PHONE: str = "+91-4147-238100"
    COLLEGE_EMAIL: str = "principal@ucet.ac.in"
    COLLEGE_WEBSITE: str = "www.ucet.ac.in"
    COLLEGE_AFFILIATION: str = "Anna University, Chennai"

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Get CORS origins as a list"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._base_dir = Path(__file__).resolve().parent.parent.parent
        invoices_dir = Path(self.INVOICES_PATH)
        if not invoices_dir.is_absolute():
            invoices_dir = self._base_dir / invoices_dir
        self._invoices_dir = invoices_dir
        self._invoices_dir.mkdir(exist_ok=True, parents=True)
        if self.LOG_FILE:
            Path(self.LOG_FILE).parent.mkdir(exist_ok=True, parents=True)

    @property
    def BASE_DIR(self) -> Path:
        return self._base_dir

    @property
    def INVOICES_DIR(self) -> Path:
        return self._invoices_dir

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


# Create settings instance
settings = Settings()

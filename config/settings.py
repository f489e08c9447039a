"""
Application settings loaded from environment variables.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./cinema.db"

    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: str = "change-me-jwt-secret-key-at-least-32-bytes"   # HMAC secret for bearer tokens
    jwt_issuer: str = "bioscoop-server"
    jwt_audience: str = "bioscoop-app"
    jwt_expiry_seconds: int = 86400                                   # 1 day
    token_issuance_enabled: bool = True
    bcrypt_rounds: int = 12

    # ── Demo account ─────────────────────────────────────────────────────
    seed_demo_account: bool = True
    demo_email: str = "johndoe@test.test"
    demo_password: str = "123456"
    demo_first_name: str = "John"
    demo_last_name: str = "Doe"

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 8000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["http://localhost:5173"]

    # ── Client ───────────────────────────────────────────────────────────
    api_base_url: str = "http://localhost:8000/auth"
    client_timeout_seconds: float = 10.0
    client_state_file: str = "~/.bioscoop_session.json"
    client_encryption_key: Optional[str] = None   # Fernet key for the pending-registration password

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }


config = Settings()

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class Settings:
    """Centralized application settings.

    This keeps environment-variable handling in one place so other modules can
    depend on strongly-typed attributes instead of calling os.getenv
    directly.
    """

    # Hosted chat-completion endpoint (OpenAI-compatible request/response shape).
    completion_api_url: str = os.getenv(
        "COMPLETION_API_URL", "https://oi-server.onrender.com/chat/completions"
    )
    # Credentials for the completion endpoint. These must come from the
    # environment; there are intentionally no defaults.
    completion_api_key: Optional[str] = os.getenv("COMPLETION_API_KEY")
    completion_customer_id: Optional[str] = os.getenv("COMPLETION_CUSTOMER_ID")

    # Model used when a specialty does not name one.
    default_model: str = os.getenv("DEFAULT_MODEL", "openrouter/anthropic/claude-sonnet-4")
    completion_temperature: float = float(os.getenv("COMPLETION_TEMPERATURE", "0.7"))
    completion_max_tokens: int = int(os.getenv("COMPLETION_MAX_TOKENS", "4000"))
    completion_timeout_seconds: float = float(os.getenv("COMPLETION_TIMEOUT_SECONDS", "60"))

    # Account authentication mode: "demo" (shared demo password, insecure) or
    # "hashed" (bcrypt per-user credentials).
    auth_mode: str = os.getenv("AUTH_MODE", "demo")
    demo_password: str = os.getenv("DEMO_PASSWORD", "demo123")

    # Key-value document storage for users and the auth pointer: "memory"
    # (default) or "file".
    store_backend: str = os.getenv("STORE_BACKEND", "memory")
    store_dir: Path = Path(os.getenv("STORE_DIR", "data"))

    # Per-file limit for chat attachments (in bytes).
    max_attachment_bytes: int = int(os.getenv("MAX_ATTACHMENT_BYTES", str(10 * 1024 * 1024)))

    # Basic API authentication configuration.
    # When ENABLE_API_AUTH=true, protected endpoints require a valid API key.
    enable_api_auth: bool = os.getenv("ENABLE_API_AUTH", "false").lower() == "true"
    # Comma-separated list of allowed API keys when auth is enabled.
    api_keys: Optional[str] = os.getenv("API_KEYS")

    # CORS configuration: comma-separated origins. Default is "*" (allow all)
    # which is acceptable for local development but should be tightened in
    # production.
    cors_allow_origins: str = os.getenv("CORS_ALLOW_ORIGINS", "*")


settings = Settings()

"""
Runtime configuration, read from environment variables.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    environment: str = "dev"
    port: int = 8080
    backend_url: str = ""
    backend_anon_key: str = ""
    backend_service_role_key: str = ""
    backend_timeout: float = 10.0
    login_domain: str = "contratos.gov"
    legal_term_months: int = 60
    renewal_window_days: int = 120
    default_term_months: int = 12

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            environment=env.get("ENVIRONMENT", "dev"),
            port=int(env.get("PORT", 8080)),
            backend_url=env.get("BACKEND_URL", "").rstrip("/"),
            backend_anon_key=env.get("BACKEND_ANON_KEY", ""),
            backend_service_role_key=env.get("BACKEND_SERVICE_ROLE_KEY", ""),
            backend_timeout=float(env.get("BACKEND_TIMEOUT", 10)),
            login_domain=env.get("LOGIN_DOMAIN", "contratos.gov"),
            legal_term_months=int(env.get("LEGAL_TERM_MONTHS", 60)),
            renewal_window_days=int(env.get("RENEWAL_WINDOW_DAYS", 120)),
            default_term_months=int(env.get("DEFAULT_TERM_MONTHS", 12)),
        )

    @property
    def backend_configured(self) -> bool:
        return bool(self.backend_url and self.backend_service_role_key)

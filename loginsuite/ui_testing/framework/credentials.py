"""
================================================================================
Credential Provider
================================================================================

Resolves login credentials from configuration, failing fast when missing.

Lookup order is the ConfigLoader's: environment variable (LOGIN_EMAIL,
LOGIN_PASSWORD), then config/{UI_ENV}.yaml, then config/config.yaml. Only the
source is logged, never the value.

================================================================================
"""

import os
from typing import Optional

from loguru import logger

from .config_loader import ConfigLoader, to_env_key


class CredentialProvider:
    """Login credentials with source diagnostics."""

    EMAIL_KEY = "login.email"
    PASSWORD_KEY = "login.password"

    def __init__(self, config: Optional[ConfigLoader] = None):
        self.config = config or ConfigLoader()

    def _log_source(self, key: str) -> None:
        env_var = to_env_key(key)
        if (os.getenv(env_var) or "").strip():
            logger.info(f"Credential source: {key} from environment variable ({env_var})")
        else:
            logger.info(f"Credential source: {key} from config/{self.config.env}.yaml or config.yaml")

    def login_email(self) -> str:
        self._log_source(self.EMAIL_KEY)
        return str(self.config.get_required(self.EMAIL_KEY))

    def login_password(self) -> str:
        self._log_source(self.PASSWORD_KEY)
        return str(self.config.get_required(self.PASSWORD_KEY))


__all__ = ["CredentialProvider"]

import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError

logger = logging.getLogger("tourtracker_proxy")

REPO = "belk714/tourtracker"
FILE_PATH = "artists.json"
BRANCH = "main"
GITHUB_API_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "TourTracker-Proxy"
DEFAULT_TIMEOUT_S = 10.0

KEYVAULT_REF_PREFIX = "@Microsoft.KeyVault("


@dataclass(frozen=True)
class ProxyConfig:
    github_token: Optional[str]
    repo: str = REPO
    file_path: str = FILE_PATH
    branch: str = BRANCH
    api_base_url: str = GITHUB_API_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout_s: float = DEFAULT_TIMEOUT_S
    debug_request_log: bool = False

    def require_token(self) -> str:
        token = self.github_token.strip() if self.github_token else self.github_token
        if not token:
            raise ConfigurationError("Missing GITHUB_TOKEN")
        if token.startswith(KEYVAULT_REF_PREFIX):
            # App setting still holds the Key Vault reference; the host failed to resolve it.
            # Reported as 503 like the other Azure secret failures, not the 500 used for a missing token.
            logger.warning("secrets_unresolved", extra={"which": "GITHUB_TOKEN"})
            raise ConfigurationError("secrets_unresolved", status_code=503, which="GITHUB_TOKEN")
        return token


def _timeout_from(raw: Optional[str]) -> float:
    if not raw:
        return DEFAULT_TIMEOUT_S
    try:
        value = float(raw)
    except ValueError:
        logger.warning("invalid_setting", extra={"name": "GITHUB_TIMEOUT_S", "value": raw})
        return DEFAULT_TIMEOUT_S
    if value <= 0:
        logger.warning("invalid_setting", extra={"name": "GITHUB_TIMEOUT_S", "value": raw})
        return DEFAULT_TIMEOUT_S
    return value


def load_config(environ: Optional[Mapping[str, str]] = None) -> ProxyConfig:
    """Build the per-request configuration from app settings.

    Repository, file path and branch are fixed; only the credential, the
    User-Agent, the upstream timeout and request debug logging come from the
    environment.
    """
    env = os.environ if environ is None else environ
    return ProxyConfig(
        github_token=env.get("GITHUB_TOKEN"),
        user_agent=env.get("USER_AGENT", DEFAULT_USER_AGENT),
        timeout_s=_timeout_from(env.get("GITHUB_TIMEOUT_S")),
        debug_request_log=env.get("DEBUG_REQUEST_LOG", "false").lower() == "true",
    )

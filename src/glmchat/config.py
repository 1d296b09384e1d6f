"""Configuration for glmchat.

Config discovery (first match wins):
  1. explicit ``path`` argument
  2. ``./glmchat.yaml``
  3. ``~/.config/glmchat/config.yaml``
  4. Built-in defaults

Credentials are never built in; supply them in the YAML file or through
the ``GLMCHAT_*`` environment variables.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from glmchat.errors import ConfigError

_logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.bigmodel.cn/api/biz/trial/response/v4/sse/11170"


class ClientConfig(BaseModel):
    model_config = {"protected_namespaces": ()}

    # Endpoint
    base_url: str = DEFAULT_BASE_URL
    model: str = "glm-4.6"
    model_id: int = 11170

    # Request defaults
    max_tokens: int = Field(default=65536, gt=0)
    temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    top_p: float = Field(default=0.95, gt=0.0, le=1.0)

    # Transport
    timeout: float = 300.0
    connect_timeout: float = 30.0
    channel_buffer: int = Field(default=100, gt=0)

    # Headers
    auth_token: str = ""
    organization: str = ""
    project: str = ""
    cookie: str = ""
    language: str = "en"
    user_agent: str = (
        "Mozilla/5.0 (X11; Linux x86_64; rv:142.0) Gecko/20100101 Firefox/142.0"
    )
    referer: str = "https://www.bigmodel.cn/trialcenter/modeltrial/text"
    origin: str = "https://www.bigmodel.cn"
    extra_headers: dict[str, str] = Field(default_factory=dict)

    def build_headers(self) -> dict[str, str]:
        """Headers for every request; unset credentials are left out."""
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/event-stream",
            "Content-Type": "application/json",
            "Set-Language": self.language,
            "Referer": self.referer,
            "Origin": self.origin,
        }
        if self.auth_token:
            headers["Authorization"] = self.auth_token
        if self.organization:
            headers["Bigmodel-Organization"] = self.organization
        if self.project:
            headers["Bigmodel-Project"] = self.project
        if self.cookie:
            headers["Cookie"] = self.cookie
        headers.update(self.extra_headers)
        return headers


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

_SEARCH_PATHS = [
    Path("./glmchat.yaml"),
    Path.home() / ".config" / "glmchat" / "config.yaml",
]

# Environment variable -> config field
_ENV_OVERRIDES = {
    "GLMCHAT_AUTH_TOKEN": "auth_token",
    "GLMCHAT_ORGANIZATION": "organization",
    "GLMCHAT_PROJECT": "project",
    "GLMCHAT_COOKIE": "cookie",
    "GLMCHAT_BASE_URL": "base_url",
}


def _apply_env(raw: dict[str, Any]) -> dict[str, Any]:
    merged = dict(raw)
    for env_name, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            merged[field_name] = value
    return merged


def load_config(path: str | Path | None = None) -> ClientConfig:
    """Load configuration from YAML, then apply environment overrides.

    Parameters
    ----------
    path:
        Explicit config path.  If *None*, search default locations.

    Raises
    ------
    FileNotFoundError
        When an explicit *path* does not exist.
    ConfigError
        When the file is not valid YAML or holds invalid values.
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for candidate in _SEARCH_PATHS:
            if candidate.exists():
                config_path = candidate
                break

    raw: dict[str, Any] = {}
    if config_path is None:
        _logger.debug("No config file found, using defaults")
    else:
        _logger.debug("Loading config from %s", config_path)
        try:
            with open(config_path) as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Expected a mapping in {config_path}")

    try:
        return ClientConfig(**_apply_env(raw))
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

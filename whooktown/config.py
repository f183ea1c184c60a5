from __future__ import annotations
import dataclasses
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import requests

from .exceptions import ValidationError

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    PRODUCTION = 'PROD'
    DEVELOPMENT = 'DEV'


SERVICE_URLS: Dict[Environment, Dict[str, str]] = {
    Environment.PRODUCTION: {
        'auth_url': 'https://auth.whook.town',
        'sensor_url': 'https://sensors.whook.town',
        'ui_url': 'https://api.whook.town',
        'workflow_url': 'https://api.whook.town',
        'backoffice_url': 'https://admin.whook.town',
        'sse_url': 'https://ws.whook.town',
        'subscription_url': 'https://subscription.whook.town',
        'audio_stream_url': 'https://stream.whook.town',
    },
    Environment.DEVELOPMENT: {
        'auth_url': 'https://auth.dev.whook.town',
        'sensor_url': 'https://sensors.dev.whook.town',
        'ui_url': 'https://api.dev.whook.town',
        'workflow_url': 'https://api.dev.whook.town',
        'backoffice_url': 'https://admin.dev.whook.town',
        'sse_url': 'https://ws.dev.whook.town',
        'subscription_url': 'https://subscription.dev.whook.town',
        'audio_stream_url': 'https://stream.dev.whook.town',
    },
}


def environment_from_env() -> Environment:
    if os.getenv('WHOOKTOWN_ENV') == 'DEV':
        return Environment.DEVELOPMENT
    return Environment.PRODUCTION


def _env_number(name: str, default: float, cast=float) -> Any:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


@dataclass
class Config:
    """Client configuration: service URLs, credentials and HTTP/retry settings."""
    auth_url: str = SERVICE_URLS[Environment.PRODUCTION]['auth_url']
    sensor_url: str = SERVICE_URLS[Environment.PRODUCTION]['sensor_url']
    ui_url: str = SERVICE_URLS[Environment.PRODUCTION]['ui_url']
    workflow_url: str = SERVICE_URLS[Environment.PRODUCTION]['workflow_url']
    backoffice_url: str = SERVICE_URLS[Environment.PRODUCTION]['backoffice_url']
    sse_url: str = SERVICE_URLS[Environment.PRODUCTION]['sse_url']
    subscription_url: str = SERVICE_URLS[Environment.PRODUCTION]['subscription_url']
    audio_stream_url: str = SERVICE_URLS[Environment.PRODUCTION]['audio_stream_url']

    token: str = ''
    admin_secret: str = ''  # sent as X-Admin-Token to the backoffice

    timeout: float = 30.0
    max_retries: int = 3
    retry_wait: float = 1.0
    session: Optional[requests.Session] = None

    # Client sets the "whooktown" logger to DEBUG for the whole process when true
    debug: bool = False

    @classmethod
    def for_environment(cls, env: Environment, **kwargs: Any) -> 'Config':
        urls = dict(SERVICE_URLS[Environment(env)])
        urls.update(kwargs)
        return cls(**urls)

    @classmethod
    def default(cls) -> 'Config':
        return cls.for_environment(environment_from_env())

    @classmethod
    def from_env(cls) -> 'Config':
        """Build from WHOOKTOWN_* environment variables on top of the environment defaults."""
        cfg = cls.default()
        base_url = os.getenv('WHOOKTOWN_BASE_URL')
        if base_url:
            cfg = cfg.with_base_url(base_url)
        return dataclasses.replace(
            cfg,
            token=os.getenv('WHOOKTOWN_TOKEN', ''),
            admin_secret=os.getenv('WHOOKTOWN_ADMIN_SECRET', ''),
            timeout=_env_number('WHOOKTOWN_TIMEOUT', cfg.timeout),
            max_retries=_env_number('WHOOKTOWN_MAX_RETRIES', cfg.max_retries, int),
            retry_wait=_env_number('WHOOKTOWN_RETRY_WAIT', cfg.retry_wait),
            debug=os.getenv('WHOOKTOWN_DEBUG', '').strip().lower() in ('1', 'true', 'yes', 'on'),
        )

    def with_environment(self, env: Environment) -> 'Config':
        return dataclasses.replace(self, **SERVICE_URLS[Environment(env)])

    def with_base_url(self, base_url: str) -> 'Config':
        """Point every service at one host (custom deployments)."""
        return dataclasses.replace(self, **{key: base_url for key in SERVICE_URLS[Environment.PRODUCTION]})

    def with_services(self, auth: str = '', sensor: str = '', ui: str = '', workflow: str = '',
                      backoffice: str = '', sse: str = '') -> 'Config':
        changes = {
            'auth_url': auth,
            'sensor_url': sensor,
            'ui_url': ui,
            'workflow_url': workflow,
            'backoffice_url': backoffice,
            'sse_url': sse,
        }
        return dataclasses.replace(self, **{k: v for k, v in changes.items() if v})

    def validate(self) -> None:
        if self.max_retries < 0:
            raise ValidationError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.retry_wait < 0:
            raise ValidationError(f"retry_wait must be >= 0, got {self.retry_wait}")
        if self.timeout <= 0:
            raise ValidationError(f"timeout must be > 0, got {self.timeout}")

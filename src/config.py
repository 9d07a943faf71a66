"""
Configuration loading for the email relay.

Settings are read from the Lambda environment once, at the entry point, and
passed explicitly into the processor.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_REWRITE_MODEL = 'anthropic/claude-3.5-haiku'
DEFAULT_REWRITE_API_URL = 'https://openrouter.ai/api/v1/chat/completions'


class ConfigurationError(Exception):
    """Raised when required configuration is invalid or missing."""
    pass


@dataclass(frozen=True)
class AppConfig:
    """
    Runtime settings.

    Attributes:
        openrouter_api_key: Bearer credential for the rewriting service
        webhook_url: Delivery endpoint receiving the rewritten message
        rewrite_model: Model name sent with each rewrite request
        rewrite_api_url: Chat-completions endpoint of the rewriting service
        bounce_sender: Verified SES address used to bounce rejected messages
        http_timeout: Timeout in seconds for outbound calls (None = wait for the full response)
        log_level: Root logger level
    """
    openrouter_api_key: str
    webhook_url: str
    rewrite_model: str = DEFAULT_REWRITE_MODEL
    rewrite_api_url: str = DEFAULT_REWRITE_API_URL
    bounce_sender: Optional[str] = None
    http_timeout: Optional[float] = None
    log_level: str = 'INFO'

    def __repr__(self) -> str:
        # Never log the API key
        return (
            f"AppConfig(webhook_url={self.webhook_url!r}, rewrite_model={self.rewrite_model!r}, "
            f"rewrite_api_url={self.rewrite_api_url!r}, bounce_sender={self.bounce_sender!r}, "
            f"http_timeout={self.http_timeout!r}, log_level={self.log_level!r})"
        )


def _required(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, '').strip()
    if not value:
        raise ConfigurationError(
            f"{name} environment variable is required but not set. "
            f"Please configure this in your SAM template or Lambda environment."
        )
    return value


def load_config(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Build an AppConfig from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Raises:
        ConfigurationError: If a required variable is missing or a value is invalid
    """
    if environ is None:
        environ = os.environ

    webhook_url = _required(environ, 'WEBHOOK_URL')
    if not webhook_url.startswith(('https://', 'http://')):
        raise ConfigurationError(
            f"WEBHOOK_URL has invalid format. Expected an http(s) URL, got: '{webhook_url[:50]}'"
        )

    timeout_value = environ.get('HTTP_TIMEOUT_SECONDS', '').strip()
    http_timeout = None
    if timeout_value:
        try:
            http_timeout = float(timeout_value)
        except ValueError:
            raise ConfigurationError(f"HTTP_TIMEOUT_SECONDS must be a number, got: '{timeout_value}'")
        if http_timeout <= 0:
            raise ConfigurationError(f"HTTP_TIMEOUT_SECONDS must be positive, got: {http_timeout}")

    return AppConfig(
        openrouter_api_key=_required(environ, 'OPENROUTER_API_KEY'),
        webhook_url=webhook_url,
        rewrite_model=environ.get('REWRITE_MODEL') or DEFAULT_REWRITE_MODEL,
        rewrite_api_url=environ.get('REWRITE_API_URL') or DEFAULT_REWRITE_API_URL,
        bounce_sender=environ.get('BOUNCE_SENDER') or None,
        http_timeout=http_timeout,
        log_level=(environ.get('LOG_LEVEL') or 'INFO').upper(),
    )

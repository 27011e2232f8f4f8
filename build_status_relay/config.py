import os
from dataclasses import dataclass

from build_status_relay.identity import STRATEGIES
from build_status_relay.provider import DEFAULT_CONTEXT

FAILURE_POLICIES = ('ack', 'nack')
LOG_FORMATS = ('json', 'console')
LOG_LEVELS = ('INFO', 'DEBUG', 'WARNING', 'ERROR', 'CRITICAL')


class ConfigError(Exception):
    pass


def _int(environ, name, default):
    raw = environ.get(name, '')
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value < 1:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _choice(environ, name, choices, upper=False):
    value = environ.get(name, '')
    if upper:
        value = value.upper()
    value = value or choices[0]
    if value not in choices:
        raise ConfigError(f"{name} must be one of {', '.join(choices)}, got {value!r}")
    return value


@dataclass(frozen=True)
class Config:
    project_id: str = ''
    build_topic: str = 'cloud-builds'
    subscription: str = 'github-status-pusher'
    resolver_strategy: str = 'mirror'
    status_context: str = DEFAULT_CONTEXT
    allowed_owners: tuple = ()
    delivery_failure_policy: str = 'ack'
    max_concurrent_messages: int = 10
    request_timeout: int = 30
    log_format: str = 'json'
    log_level: str = 'INFO'
    github_access_token: str = ''
    credentials_bucket: str = ''
    kms_crypto_key_id: str = ''


    @classmethod
    def from_env(cls, environ=None):
        if environ is None:
            environ = os.environ

        owners = environ.get('ALLOWED_OWNERS', '')

        return cls(
            project_id=environ.get('PROJECT_ID', ''),
            build_topic=environ.get('BUILD_TOPIC', '') or cls.build_topic,
            subscription=environ.get('SUBSCRIPTION', '') or cls.subscription,
            resolver_strategy=_choice(environ, 'RESOLVER_STRATEGY', STRATEGIES),
            status_context=environ.get('STATUS_CONTEXT', '') or cls.status_context,
            allowed_owners=tuple(o.strip() for o in owners.split(',') if o.strip()),
            delivery_failure_policy=_choice(environ, 'DELIVERY_FAILURE_POLICY', FAILURE_POLICIES),
            max_concurrent_messages=_int(environ, 'MAX_CONCURRENT_MESSAGES', cls.max_concurrent_messages),
            request_timeout=_int(environ, 'REQUEST_TIMEOUT', cls.request_timeout),
            log_format=_choice(environ, 'LOG_FORMAT', LOG_FORMATS),
            log_level=_choice(environ, 'LOG_LEVEL', LOG_LEVELS, upper=True),
            github_access_token=environ.get('GITHUB_ACCESS_TOKEN', ''),
            credentials_bucket=environ.get('CREDENTIALS_BUCKET', ''),
            kms_crypto_key_id=environ.get('KMS_CRYPTO_KEY_ID', ''))

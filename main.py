import functools
import sys

import structlog

from build_status_relay import credentials, subscription
from build_status_relay.config import Config, ConfigError
from build_status_relay.event import DecodeError, decode_function_event
from build_status_relay.identity import create_resolver
from build_status_relay.logs import configure_logging
from build_status_relay.provider import Github
from build_status_relay.publisher import StatusPublisher

log = structlog.get_logger(__name__)


def create_publisher(config):
    token = credentials.github_token(config)

    return StatusPublisher(
        resolver=create_resolver(
            config.resolver_strategy,
            allowed_owners=config.allowed_owners,
            timeout=config.request_timeout),
        github=Github(token, timeout=config.request_timeout),
        context=config.status_context)


@functools.lru_cache(maxsize=1)
def function_publisher():
    config = Config.from_env()
    configure_logging(config.log_level, json_format=config.log_format == 'json')
    return create_publisher(config)


def build_status(event, context):
    """
    Background Cloud Function to be triggered by Pub/Sub.

    Updates the commit status on GitHub for each Cloud Build
    notification. Failures are logged; the event is always
    consumed.
    """

    publisher = function_publisher()

    try:
        payload = decode_function_event(event)
    except DecodeError as e:
        log.error('failed to decode build notification', error=str(e))
    else:
        try:
            publisher.handle(payload)
        except Exception:
            log.exception('unexpected error handling build update')

    return "OK"


def main(environ=None):
    try:
        config = Config.from_env(environ)
    except ConfigError as e:
        configure_logging()
        log.error('invalid configuration', error=str(e))
        return 1

    configure_logging(config.log_level, json_format=config.log_format == 'json')

    if not config.project_id:
        log.error('a mandatory field (PROJECT_ID) is unspecified or empty.')
        return 1

    try:
        publisher = create_publisher(config)
    except credentials.MissingCredentials as e:
        log.error('failed to load github credentials', error=str(e))
        return 1

    subscription.run(config, publisher)
    return 0


if __name__ == '__main__':
    sys.exit(main())

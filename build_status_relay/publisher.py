import threading

import structlog

from build_status_relay.event import DecodeError, decode
from build_status_relay.identity import ResolutionError
from build_status_relay.provider import DEFAULT_CONTEXT, DeliveryError, status_update

log = structlog.get_logger(__name__)

DECODE_FAILED = 'decode_failed'
UNRESOLVED = 'unresolved'
DELIVERY_FAILED = 'delivery_failed'
SENT = 'sent'

PAYLOAD_LOG_LIMIT = 1024


class StatusPublisher:
    """
    Turns Cloud Build notifications into GitHub commit statuses.

    Every failure is logged and swallowed here so that one bad message
    never stops the subscriber. Handling is serialized by ``lock``:
    at most one status push is in flight at a time, however many
    threads the subscriber delivers on.
    """

    def __init__(self, resolver, github, context=DEFAULT_CONTEXT, lock=None):
        self.resolver = resolver
        self.github = github
        self.context = context
        self.lock = threading.Lock() if lock is None else lock


    def handle(self, payload):
        with self.lock:
            return self._publish(payload)


    def _publish(self, payload):
        try:
            notification = decode(payload)
        except DecodeError as e:
            log.error('failed to decode build notification',
                    error=str(e),
                    payload=payload[:PAYLOAD_LOG_LIMIT],
                    size=len(payload))
            return DECODE_FAILED

        source = notification.resolved_source
        logger = log.bind(id=notification.id)
        logger.info('got build update',
                status=notification.status,
                project=notification.project_id,
                sha=source.commit_sha,
                repo=source.repo_name)

        update = status_update(notification, self.context)

        try:
            identity = self.resolver.resolve(notification)
        except ResolutionError as e:
            logger.error('failed to resolve repo for build',
                    error=str(e),
                    status=notification.status,
                    project=notification.project_id,
                    log_url=notification.log_url,
                    source_project=source.project_id,
                    source_repo=source.repo_name,
                    sha=source.commit_sha)
            return UNRESOLVED

        fields = dict(
                owner=identity.owner,
                repo=identity.repo,
                sha=identity.commit_sha,
                state=update.state,
                description=update.description,
                context=update.context,
                target_url=update.target_url)

        try:
            self.github.create_status(identity.owner, identity.repo, identity.commit_sha, update)
        except DeliveryError as e:
            logger.error('failed to push update to github', error=str(e), **fields)
            return DELIVERY_FAILED

        logger.info('sent', **fields)
        return SENT

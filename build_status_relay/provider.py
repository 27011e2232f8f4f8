from dataclasses import dataclass

import requests
import structlog

log = structlog.get_logger(__name__)

DEFAULT_CONTEXT = 'Google Container Builder'
DESCRIPTION = 'Build'


class DeliveryError(Exception):
    pass


@dataclass(frozen=True)
class StatusUpdate:
    state: str
    description: str
    context: str
    target_url: str


    @property
    def payload(self):
        return {
            'state': self.state,
            'description': self.description,
            'context': self.context,
            'target_url': self.target_url,
            }


def github_state(build_state):
    if build_state in ('QUEUED', 'WORKING'):
        return 'pending'
    if build_state == 'SUCCESS':
        return 'success'
    if build_state in ('FAILURE', 'TIMEOUT'):
        return 'failure'
    if build_state in ('INTERNAL_ERROR', 'CANCELLED', 'STATUS_UNKNOWN'):
        return 'error'

    log.warning('unhandled build status', status=build_state)
    return 'unknown'


def status_update(notification, context=DEFAULT_CONTEXT):
    return StatusUpdate(
        state=github_state(notification.status),
        description=DESCRIPTION,
        context=context,
        target_url=notification.log_url)


class Github:
    api_url = 'https://api.github.com'

    def __init__(self, token, timeout=30):
        self.token = token
        self.timeout = timeout


    def url(self, owner, repo, sha):
        return f'{self.api_url}/repos/{owner}/{repo}/statuses/{sha}'


    @property
    def headers(self):
        return {
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github+json',
            }


    def create_status(self, owner, repo, sha, update):
        url = self.url(owner, repo, sha)

        try:
            resp = requests.post(
                    url,
                    headers=self.headers,
                    json=update.payload,
                    timeout=self.timeout)
        except requests.RequestException as e:
            raise DeliveryError(f"POST {url} failed: {e}")

        if resp.status_code not in [200, 201]:
            raise DeliveryError(f"HTTP {resp.status_code} response from POST {url}")

import base64
import binascii
import json
from dataclasses import dataclass, field


class DecodeError(Exception):
    pass


@dataclass(frozen=True)
class ResolvedRepoSource:
    commit_sha: str = ''
    project_id: str = ''
    repo_name: str = ''


@dataclass(frozen=True)
class BuildNotification:
    id: str
    project_id: str = ''
    log_url: str = ''
    status: str = ''
    resolved_source: ResolvedRepoSource = field(default_factory=ResolvedRepoSource)


def _text(data, key):
    value = data.get(key) if isinstance(data, dict) else None
    if value is None or isinstance(value, (dict, list)):
        return ''
    return str(value)


def _section(data, key):
    value = data.get(key) if isinstance(data, dict) else None
    return value if isinstance(value, dict) else {}


def decode(payload):
    """
    Parse a Cloud Build notification.

    Only a non-empty ``id`` is required; anything missing below it
    falls back to an empty string so the build can still be logged.
    """

    if isinstance(payload, bytes):
        try:
            payload = payload.decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecodeError(f"payload is not UTF-8: {e}")

    try:
        data = json.loads(payload)
    except (ValueError, RecursionError) as e:
        raise DecodeError(f"payload is not JSON: {e}")

    if not isinstance(data, dict):
        raise DecodeError(f"payload is not a JSON object: {type(data).__name__}")

    build_id = _text(data, 'id')
    if not build_id:
        raise DecodeError("payload has no build id")

    repo_source = _section(_section(data, 'sourceProvenance'), 'resolvedRepoSource')

    return BuildNotification(
        id=build_id,
        project_id=_text(data, 'projectId'),
        log_url=_text(data, 'logUrl'),
        status=_text(data, 'status'),
        resolved_source=ResolvedRepoSource(
            commit_sha=_text(repo_source, 'commitSha'),
            project_id=_text(repo_source, 'projectId'),
            repo_name=_text(repo_source, 'repoName')))


def decode_function_event(event):
    """Unwrap the ``{'data': <base64>}`` envelope of a Pub/Sub triggered function."""

    try:
        return base64.b64decode(event['data'], validate=True)
    except (KeyError, TypeError, binascii.Error) as e:
        raise DecodeError(f"event has no base64 data: {e!r}")

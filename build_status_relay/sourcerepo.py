import google.auth
import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession

SCOPE = 'https://www.googleapis.com/auth/source.read_only'
API_URL = 'https://sourcerepo.googleapis.com/v1'


class MirrorLookupError(Exception):
    pass


class MirrorLookup:
    """
    Looks up the repository a Cloud Source Repository mirrors.

    A mirrored repo reports its origin under ``mirrorConfig.url``;
    an unmirrored one only has its own ``url``.
    """

    def __init__(self, session=None, timeout=30):
        self._session = session
        self.timeout = timeout


    @property
    def session(self):
        if self._session is None:
            try:
                credentials, _ = google.auth.default(scopes=[SCOPE])
            except GoogleAuthError as e:
                raise MirrorLookupError(f"Failed to create google auth client: {e}")
            self._session = AuthorizedSession(credentials)

        return self._session


    def __call__(self, project_id, repo_name):
        name = f'projects/{project_id}/repos/{repo_name}'

        try:
            resp = self.session.get(f'{API_URL}/{name}', timeout=self.timeout)
        except (requests.RequestException, GoogleAuthError) as e:
            raise MirrorLookupError(f"Failed to get repo {name}: {e}")

        if resp.status_code != 200:
            raise MirrorLookupError(f"HTTP {resp.status_code} response from GET {name}")

        try:
            repo = resp.json()
        except ValueError as e:
            raise MirrorLookupError(f"Invalid response for repo {name}: {e}")
        if not isinstance(repo, dict):
            raise MirrorLookupError(f"Invalid response for repo {name}")

        url = (repo.get('mirrorConfig') or {}).get('url') or repo.get('url')
        if not url:
            raise MirrorLookupError(f"Repo {name} has no URL")

        return url

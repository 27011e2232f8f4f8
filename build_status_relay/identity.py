from dataclasses import dataclass
from urllib.parse import urlsplit

from build_status_relay.sourcerepo import MirrorLookup, MirrorLookupError

GITHUB_HOST = 'github.com'


class ResolutionError(Exception):
    pass


@dataclass(frozen=True)
class RepoIdentity:
    owner: str
    repo: str
    commit_sha: str


def identity_from_url(url):
    """Owner and repo from a ``https://github.com/<owner>/<repo>[.git]`` URL."""

    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError as e:
        raise ResolutionError(f"Failed to parse URL {url}: {e}")

    if host != GITHUB_HOST:
        raise ResolutionError(f"Unknown repo provider for {url}")

    path = parts.path.split('/')
    if len(path) != 3 or path[0] != '':
        raise ResolutionError(f"Unexpected repo path for {url}")

    owner, repo = path[1], path[2]
    if repo.endswith('.git'):
        repo = repo[:-len('.git')]

    return owner, repo


def identity_from_name(repo_name):
    """
    Owner and repo from a mirror named ``github-<owner>-<repo>``.

    The repo part may itself contain dashes, e.g. ``github-acme-my-repo``.
    """

    fields = repo_name.split('-')
    if len(fields) < 3:
        raise ResolutionError(f"Failed to parse github info from {repo_name}")
    if fields[0] != 'github':
        raise ResolutionError(f"Unknown repo type: {fields[0]}")

    return fields[1], '-'.join(fields[2:])


class Resolver:
    def __init__(self, allowed_owners=()):
        self.allowed_owners = frozenset(allowed_owners)


    def owner_and_repo(self, source):
        raise NotImplementedError


    def resolve(self, notification):
        source = notification.resolved_source
        owner, repo = self.owner_and_repo(source)

        if not owner or not repo:
            raise ResolutionError(f"Incomplete repo identity {owner!r}/{repo!r}")
        if self.allowed_owners and owner not in self.allowed_owners:
            raise ResolutionError(f"Illegal repo owner: {owner}")
        if not source.commit_sha:
            raise ResolutionError("Notification has no commit sha")

        return RepoIdentity(owner=owner, repo=repo, commit_sha=source.commit_sha)


class MirrorLookupResolver(Resolver):
    def __init__(self, lookup, allowed_owners=()):
        super().__init__(allowed_owners)
        self.lookup = lookup


    def owner_and_repo(self, source):
        try:
            url = self.lookup(source.project_id, source.repo_name)
        except MirrorLookupError as e:
            raise ResolutionError(str(e))

        return identity_from_url(url)


class NamingConventionResolver(Resolver):
    def owner_and_repo(self, source):
        return identity_from_name(source.repo_name)


STRATEGIES = ('mirror', 'naming')


def create_resolver(strategy, allowed_owners=(), lookup=None, timeout=30):
    if strategy == 'mirror':
        if lookup is None:
            lookup = MirrorLookup(timeout=timeout)
        return MirrorLookupResolver(lookup, allowed_owners)
    if strategy == 'naming':
        return NamingConventionResolver(allowed_owners)

    raise ValueError(f"Unknown resolver strategy: {strategy}")

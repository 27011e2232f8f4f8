import pytest
import requests
from google.auth.exceptions import DefaultCredentialsError

from build_status_relay.sourcerepo import API_URL, SCOPE, MirrorLookup, MirrorLookupError


def response(mocker, status_code=200, body=None):
    resp = mocker.Mock(status_code=status_code)
    resp.json.return_value = body
    return resp


def test_mirrored_repo(mocker):
    session = mocker.Mock()
    session.get.return_value = response(mocker, body={
        'name': 'projects/my-project/repos/github_acme_my-repo',
        'url': 'https://source.developers.google.com/p/my-project/r/github_acme_my-repo',
        'mirrorConfig': {'url': 'https://github.com/acme/my-repo.git'},
        })

    url = MirrorLookup(session, timeout=5)('my-project', 'github_acme_my-repo')

    assert url == 'https://github.com/acme/my-repo.git'
    session.get.assert_called_once_with(
        f'{API_URL}/projects/my-project/repos/github_acme_my-repo', timeout=5)


def test_unmirrored_repo(mocker):
    session = mocker.Mock()
    session.get.return_value = response(mocker, body={
        'url': 'https://source.developers.google.com/p/my-project/r/webapp'})

    assert MirrorLookup(session)('my-project', 'webapp') == \
        'https://source.developers.google.com/p/my-project/r/webapp'


@pytest.mark.parametrize('status_code, body', [
    (404, {'error': {'code': 404}}),
    (200, {}),
    (200, ['not', 'a', 'repo']),
    ])
def test_lookup_failure(mocker, status_code, body):
    session = mocker.Mock()
    session.get.return_value = response(mocker, status_code, body)

    with pytest.raises(MirrorLookupError):
        MirrorLookup(session)('my-project', 'webapp')


def test_invalid_json(mocker):
    session = mocker.Mock()
    session.get.return_value = response(mocker)
    session.get.return_value.json.side_effect = ValueError('Expecting value')

    with pytest.raises(MirrorLookupError, match="Invalid response"):
        MirrorLookup(session)('my-project', 'webapp')


def test_transport_failure(mocker):
    session = mocker.Mock()
    session.get.side_effect = requests.Timeout('read timed out')

    with pytest.raises(MirrorLookupError, match="read timed out"):
        MirrorLookup(session)('my-project', 'webapp')


def test_default_session(mocker):
    credentials = object()
    default = mocker.patch('google.auth.default', return_value=(credentials, 'my-project'))
    authorized = mocker.patch('build_status_relay.sourcerepo.AuthorizedSession')

    lookup = MirrorLookup()
    assert lookup.session is authorized.return_value
    assert lookup.session is authorized.return_value

    default.assert_called_once_with(scopes=[SCOPE])
    authorized.assert_called_once_with(credentials)


def test_no_default_credentials(mocker):
    mocker.patch('google.auth.default', side_effect=DefaultCredentialsError('no credentials'))

    with pytest.raises(MirrorLookupError, match="google auth"):
        MirrorLookup()('my-project', 'webapp')

import json

import pytest
import structlog

import main


def notification(func):
    def wrapper():
        return json.dumps(func()).encode()

    return wrapper


@pytest.fixture
@notification
def build_data():
    return {
        'id': 'aeccd2ef-f51a-4a44-8e2e-0de2609ce367',
        'projectId': 'my-project',
        'sourceProvenance': {
            'resolvedRepoSource': {
                'commitSha': 'd985a61daddbcd9c05a06d199efc2aeca55e4a19',
                'projectId': 'my-project',
                'repoName': 'github-leg100-my-webapp'
            }
        },
        'logUrl': 'https://console.cloud.google.com/gcr/builds/aeccd2ef-f51a-4a44-8e2e-0de2609ce367?project=292927648743',
        'status': 'SUCCESS'
    }


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def clear_function_publisher():
    main.function_publisher.cache_clear()
    yield
    main.function_publisher.cache_clear()

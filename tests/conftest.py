"""shared fixtures: a small version index in the nodejs.org/dist format."""
import json

import pytest

SAMPLE_INDEX = [
    {
        "version": "v21.1.0",
        "date": "2023-10-24",
        "files": ["linux-x64", "osx-arm64-tar", "win-x64-zip"],
        "npm": "10.2.0",
        "v8": "11.8.172.15",
        "lts": False,
        "security": False,
    },
    {
        "version": "v20.9.0",
        "date": "2023-10-24",
        "files": ["linux-x64", "osx-arm64-tar"],
        "npm": "10.1.0",
        "v8": "11.3.244.8",
        "lts": "Iron",
        "security": False,
    },
    {
        "version": "v18.18.2",
        "date": "2023-10-13",
        "files": ["linux-x64"],
        "npm": "9.8.1",
        "v8": "10.2.154.26",
        "lts": "Hydrogen",
        "security": True,
    },
    {
        # predates bundled npm
        "version": "v0.1.14",
        "date": "2009-10-01",
        "files": ["src"],
        "lts": False,
        "security": False,
    },
]


@pytest.fixture
def sample_index_text() -> str:
    return json.dumps(SAMPLE_INDEX)

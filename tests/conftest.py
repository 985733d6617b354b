import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from cognito_wrapper.config import SuiteSettings
from cognito_wrapper.logging_config import configure_logging


ALICE = {
    "UserName": "alice",
    "Email": "alice@example.com",
    "Password": "P@ssw0rd!",
    "ClientId": "abc123",
    "UserPoolId": "pool-1",
}


def pytest_configure(config):
    configure_logging()


@pytest.fixture
def alice_settings() -> SuiteSettings:
    """Settings for the alice/pool-1 scenario, built without touching disk."""
    return SuiteSettings(values=dict(ALICE))


@pytest.fixture
def write_settings(tmp_path):
    """Factory to write a settings file (dict -> JSON, str -> raw text)."""
    def _write(name, data):
        path = tmp_path / name
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write

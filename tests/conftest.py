import sys
from pathlib import Path

import pytest

# Ensure the repo root is on sys.path so tests can import the local `src/` package.
ROOT = str(Path(__file__).resolve().parents[1])
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture(autouse=True)
def _clean_devenv_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep policy flags and port overrides opt-in per test.
    for name in (
        "DEVENV_FLOW_CREATE_DOCROOT",
        "DEVENV_FLOW_STRICT_DETECTION",
        "DEVENV_DB_PORT",
        "DEVENV_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

import io
from unittest.mock import MagicMock

import pytest
from rich.console import Console


@pytest.fixture
def cfg_file(tmp_path, monkeypatch):
    """Point the settings store at a throwaway file and clear the token env var."""
    path = tmp_path / "cfg" / "config.json"
    monkeypatch.setenv("HFGET_CONFIG", str(path))
    monkeypatch.delenv("HF_TOKEN", raising=False)
    return path


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=200, color_system=None)


def output(console):
    return console.file.getvalue()


def fake_response(status=200, chunks=(), headers=None):
    """A streaming requests.Response stand-in."""
    r = MagicMock()
    r.status_code = status
    r.headers = headers or {}
    r.iter_content.return_value = iter(chunks)
    r.__enter__.return_value = r
    return r


def fake_session(*responses):
    s = MagicMock()
    s.get.side_effect = list(responses)
    return s

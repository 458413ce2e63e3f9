import json

import httpx
import pytest

from tm_stats_cache import main
from tm_stats_cache.api import ApiClient
from tm_stats_cache.registry import CacheRegistry
from tm_stats_cache.storage import MemoryStorage, PersistentStore


def make_registry(status: int = 200) -> CacheRegistry:
    def handler(request: httpx.Request) -> httpx.Response:
        if status != 200:
            return httpx.Response(status, text="down")
        return httpx.Response(200, json=[{"award": "Landlord"}])

    client = ApiClient("https://api.test", transport=httpx.MockTransport(handler))
    return CacheRegistry(client, PersistentStore(MemoryStorage()))


def test_get_prints_payload(capsys) -> None:
    registry = make_registry()
    assert main.run(["get", "awards"], registry=registry) == 0
    assert json.loads(capsys.readouterr().out) == [{"award": "Landlord"}]


def test_status_and_clear(capsys) -> None:
    registry = make_registry()
    main.run(["get", "awards"], registry=registry)
    capsys.readouterr()

    assert main.run(["status", "awards"], registry=registry) == 0
    status = json.loads(capsys.readouterr().out)
    assert status["inMemory"] is True
    assert status["lastFetched"]

    assert main.run(["clear"], registry=registry) == 0
    main.run(["status"], registry=registry)
    statuses = json.loads(capsys.readouterr().out)
    assert statuses["awards"]["inMemory"] is False


def test_fetch_failure_exit_code(capsys) -> None:
    assert main.run(["get", "awards"], registry=make_registry(status=502)) == 1
    assert "Failed to load" in capsys.readouterr().err


def test_unknown_resource(capsys) -> None:
    assert main.run(["status", "greeneries"], registry=make_registry()) == 2
    assert "Unknown resource" in capsys.readouterr().err


def test_list(capsys) -> None:
    assert main.run(["list"], registry=make_registry()) == 0
    out = capsys.readouterr().out
    assert "corp:all:v1" in out
    assert "/api/milestones/options" in out


def test_missing_command_exits() -> None:
    with pytest.raises(SystemExit):
        main.run([], registry=make_registry())


def test_verbose_flag_is_accepted(capsys) -> None:
    assert main.run(["--verbose", "list"], registry=make_registry()) == 0
    assert "awards" in capsys.readouterr().out


def test_key_error_inside_command_is_not_an_unknown_resource(capsys) -> None:
    class BrokenRegistry(CacheRegistry):
        def statuses(self):
            raise KeyError("fetchedAt")

    registry = BrokenRegistry(
        ApiClient("https://api.test"), PersistentStore(MemoryStorage())
    )
    with pytest.raises(KeyError):
        main.run(["status"], registry=registry)
    assert "Unknown resource" not in capsys.readouterr().err


def test_main_parses_verbose_flag(monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.argv", ["tm-stats-cache", "--verbose", "list"])
    monkeypatch.setattr(main, "setup_logging", lambda level=None: None)
    with pytest.raises(SystemExit) as excinfo:
        main.main()
    assert excinfo.value.code == 0
    assert "corp:all:v1" in capsys.readouterr().out

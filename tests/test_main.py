"""Tests for the CLI and the default-manager helpers."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Generator
from pathlib import Path

import pytest
import yaml

from probewatch.health import defaults
from probewatch.health.errors import UnknownProbeError
from probewatch.health.models import ProbeDefinition, Status
from probewatch.main import main
from probe_helpers import returning


def _write_probes(tmp_path: Path, probes: list[dict]) -> Path:
    path = tmp_path / "probes.yaml"
    path.write_text(yaml.dump({"probes": probes}))
    return path


def _closed_port() -> int:
    async def grab() -> int:
        server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        server.close()
        await server.wait_closed()
        return port

    return asyncio.run(grab())


class TestCLI:
    def test_run_json_no_probes(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = _write_probes(tmp_path, [])
        with pytest.raises(SystemExit) as exc:
            main(["run", "--file", str(path), "--json"])
        assert exc.value.code == 0

        out = json.loads(capsys.readouterr().out)
        assert out["status"] == "healthy"
        assert out["summary"]["total"] == 0

    def test_run_json_critical_failure(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = _write_probes(tmp_path, [
            {"name": "local-dns", "type": "dns", "hostname": "localhost"},
            {"name": "db", "type": "tcp", "hostname": "127.0.0.1", "port": _closed_port(), "critical": True},
        ])
        with pytest.raises(SystemExit) as exc:
            main(["run", "--file", str(path), "--json"])
        assert exc.value.code == 2

        out = json.loads(capsys.readouterr().out)
        assert out["checks"]["local-dns"]["status"] == "healthy"
        assert out["checks"]["db"]["status"] == "unhealthy"

    def test_run_table_non_critical_failure(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = _write_probes(tmp_path, [
            {"name": "cache", "type": "tcp", "hostname": "127.0.0.1", "port": _closed_port()},
        ])
        with pytest.raises(SystemExit) as exc:
            main(["run", "--file", str(path)])
        assert exc.value.code == 1
        assert "degraded" in capsys.readouterr().out

    def test_watch_with_duration(self, tmp_path: Path) -> None:
        path = _write_probes(tmp_path, [
            {"name": "local-dns", "type": "dns", "hostname": "localhost", "interval_ms": 20},
        ])
        with pytest.raises(SystemExit) as exc:
            main(["watch", "--file", str(path), "--duration", "0.1", "--refresh", "0.05"])
        assert exc.value.code == 0

    def test_no_command_prints_help(self) -> None:
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1


@pytest.fixture
def default_manager() -> Generator[None, None, None]:
    defaults.reset_health_manager()
    yield
    defaults.reset_health_manager()


class TestDefaultManager:
    def test_singleton(self, default_manager: None) -> None:
        assert defaults.get_health_manager() is defaults.get_health_manager()

    def test_create_is_isolated(self, default_manager: None) -> None:
        assert defaults.create_health_manager() is not defaults.get_health_manager()

    def test_convenience_functions(self, default_manager: None) -> None:
        defaults.register_health_check(ProbeDefinition(name="db", operation=returning("db")))

        async def run() -> None:
            result = await defaults.run_health_check("db")
            assert result.status == Status.HEALTHY
            with pytest.raises(UnknownProbeError):
                await defaults.run_health_check("ghost")

        asyncio.run(run())
        assert defaults.get_overall_health().summary.total == 1

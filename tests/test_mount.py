"""Tests for the mount() host entry point."""

from pathlib import Path

import pytest

import jieba_native
from jieba_native.service import JiebaService


class FakeCoordinator:
    def __init__(self, base_dir: Path) -> None:
        self.base_dir = base_dir
        self.mounted: list[tuple[str, object, str]] = []

    async def mount(self, point: str, obj: object, name: str) -> None:
        self.mounted.append((point, obj, name))


class TestMount:
    @pytest.mark.asyncio
    async def test_mounts_started_service(self, tmp_path: Path, monkeypatch) -> None:
        started: list[JiebaService] = []

        async def fake_start(self) -> None:
            started.append(self)

        monkeypatch.setattr(JiebaService, "start", fake_start)
        coordinator = FakeCoordinator(tmp_path)

        result = await jieba_native.mount(coordinator, {"install_dir": "native"})

        assert result is None
        assert len(coordinator.mounted) == 1
        point, service, name = coordinator.mounted[0]
        assert (point, name) == ("services", "jieba")
        assert started == [service]
        assert service.install_dir == (tmp_path / "native").resolve()

    @pytest.mark.asyncio
    async def test_start_failure_is_not_mounted(self, tmp_path: Path, monkeypatch) -> None:
        async def failing_start(self) -> None:
            raise jieba_native.DownloadError("connection reset")

        monkeypatch.setattr(JiebaService, "start", failing_start)
        coordinator = FakeCoordinator(tmp_path)

        with pytest.raises(jieba_native.DownloadError):
            await jieba_native.mount(coordinator)

        assert coordinator.mounted == []

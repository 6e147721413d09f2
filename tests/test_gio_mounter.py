"""
Tests for GioMountProvider with the gio subprocess mocked out.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from automount.core.exceptions import (
    MountFailedError,
    NotMountedError,
    ProviderUnavailableError,
    UnmountFailedError,
)
from automount.services.network_mount import GioMountProvider, PlatformFactory

URI = "smb://nas/media"
LOCAL_PATH = "/run/user/1000/gvfs/smb-share:server=nas,share=media"

INFO_OUTPUT = f"""display name: media on nas
edit name: media
name: media
type: directory
uri: {URI}
local path: {LOCAL_PATH}
attributes:
  standard::name: media
"""


@pytest.fixture
def provider():
    return GioMountProvider(mount_timeout_seconds=1, query_timeout_seconds=1)


class TestMountQueries:
    @pytest.mark.asyncio
    async def test_mount_root_path_parses_local_path(self, provider):
        with patch.object(provider, "_run", AsyncMock(return_value=(0, INFO_OUTPUT, ""))) as run:
            assert await provider.mount_root_path(URI) == LOCAL_PATH
            assert await provider.is_mounted(URI) is True

        args, _ = run.call_args
        assert args[0] == ["info", "-a", "standard::name", URI]

    @pytest.mark.asyncio
    async def test_failed_query_means_not_mounted(self, provider):
        with patch.object(
            provider, "_run", AsyncMock(return_value=(1, "", "The specified location is not mounted"))
        ):
            assert await provider.mount_root_path(URI) is None
            assert await provider.is_mounted(URI) is False

    @pytest.mark.asyncio
    async def test_missing_local_path_means_not_mounted(self, provider):
        with patch.object(provider, "_run", AsyncMock(return_value=(0, "name: media\n", ""))):
            assert await provider.mount_root_path(URI) is None

    @pytest.mark.asyncio
    async def test_unavailable_gio_means_not_mounted(self, provider):
        with patch.object(
            provider, "_run", AsyncMock(side_effect=ProviderUnavailableError(URI, "no gio"))
        ):
            assert await provider.is_mounted(URI) is False


class TestMount:
    @pytest.mark.asyncio
    async def test_mount_success(self, provider):
        with patch.object(provider, "_run", AsyncMock(return_value=(0, "", ""))) as run:
            await provider.mount(URI)

        args, _ = run.call_args
        assert args[0] == ["mount", URI]

    @pytest.mark.asyncio
    async def test_mount_failure_carries_stderr(self, provider):
        with patch.object(
            provider, "_run", AsyncMock(return_value=(2, "", "gio: smb://nas/media: Connection refused\n"))
        ):
            with pytest.raises(MountFailedError) as exc_info:
                await provider.mount(URI)

        assert exc_info.value.uri == URI
        assert "Connection refused" in exc_info.value.message


class TestUnmount:
    @pytest.mark.asyncio
    async def test_unmount_not_mounted_raises_not_mounted(self, provider):
        with patch.object(provider, "_run", AsyncMock(return_value=(1, "", ""))):
            with pytest.raises(NotMountedError):
                await provider.unmount(URI)

    @pytest.mark.asyncio
    async def test_unmount_success(self, provider):
        run = AsyncMock(side_effect=[(0, INFO_OUTPUT, ""), (0, "", "")])
        with patch.object(provider, "_run", run):
            await provider.unmount(URI)

        args, _ = run.call_args
        assert args[0] == ["mount", "-u", URI]

    @pytest.mark.asyncio
    async def test_unmount_busy_raises_unmount_failed(self, provider):
        run = AsyncMock(side_effect=[(0, INFO_OUTPUT, ""), (1, "", "Device or resource busy")])
        with patch.object(provider, "_run", run):
            with pytest.raises(UnmountFailedError) as exc_info:
                await provider.unmount(URI)

        assert exc_info.value.message == "Device or resource busy"

    @pytest.mark.asyncio
    async def test_unmount_race_reports_not_mounted(self, provider):
        run = AsyncMock(side_effect=[(0, INFO_OUTPUT, ""), (1, "", "Location is not mounted")])
        with patch.object(provider, "_run", run):
            with pytest.raises(NotMountedError):
                await provider.unmount(URI)


class TestRun:
    @pytest.mark.asyncio
    async def test_missing_binary_raises_provider_unavailable(self):
        provider = GioMountProvider(gio_binary="gio")
        with patch(
            "asyncio.create_subprocess_exec",
            AsyncMock(side_effect=FileNotFoundError("No such file or directory: 'gio'")),
        ):
            with pytest.raises(ProviderUnavailableError):
                await provider.mount(URI)

    @pytest.mark.asyncio
    async def test_run_decodes_output(self, provider):
        process = Mock()
        process.returncode = 0
        process.communicate = AsyncMock(return_value=(INFO_OUTPUT.encode(), b""))
        with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=process)):
            assert await provider.mount_root_path(URI) == LOCAL_PATH


class TestPlatformFactory:
    def test_linux_gets_gio_provider(self):
        factory = PlatformFactory()
        settings = Mock()
        settings.mount_timeout_seconds = 30.0
        settings.provider_query_timeout_seconds = 10.0

        with patch("platform.system", return_value="Linux"):
            provider = factory.create_provider(settings)

        assert isinstance(provider, GioMountProvider)
        assert provider.get_platform_name() == "Linux (GIO)"

"""Unit tests for the platform probes.

Capabilities point into tmp_path so install detection runs against a real
filesystem; process and HTTP calls go through fakes.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from kitectl.adapters.http.requests_client import RequestsHttpClient
from kitectl.adapters.probes import LinuxProbe, MacOSProbe, UnsupportedProbe, WindowsProbe
from kitectl.domain.entities import InstallOptions, PlatformCapability
from kitectl.domain.exceptions import (
    InstallFailedError,
    LaunchFailedError,
    UnsupportedPlatformError,
)
from kitectl.domain.states import LifecycleState, Stage
from kitectl.ports.http import TransportConnectionError
from kitectl.ports.process import ProcessResult, ProcessSpawnError, ProcessTimeoutError
from tests.conftest import authenticated_routes, build_orchestrator
from tests.fixtures import FakeHttpClient, FakeProcessRunner

PS_OUTPUT = "/sbin/launchd\n/usr/libexec/logd\n/Applications/Kite.app/Contents/MacOS/Kite\n"
HDIUTIL_OUTPUT = (
    "/dev/disk4          \tGUID_partition_scheme          \t\n"
    "/dev/disk4s1        \tApple_HFS                      \t/Volumes/Kite\n"
)


def mac_capability(root: Path) -> PlatformCapability:
    return PlatformCapability(
        name="darwin",
        install_paths=(
            root / "Applications" / "Kite.app",
            root / "home" / "Applications" / "Kite.app",
        ),
        process_name="Kite",
        process_list_command=("/bin/ps", "-axo", "comm"),
        installer_url="https://example.invalid/mac",
        installer_filename="Kite.dmg",
        launch_args=("--plugin-launch",),
        bundle_id="com.kite.Kite",
    )


def windows_capability(root: Path) -> PlatformCapability:
    return PlatformCapability(
        name="windows",
        install_paths=(root / "Program Files" / "Kite", root / "Local" / "Kite"),
        executable="kited.exe",
        process_name="kited.exe",
        process_list_command=("tasklist", "/FI", "IMAGENAME eq kited.exe", "/NH"),
        installer_url="https://example.invalid/windows",
        installer_filename="KiteSetup.exe",
        installer_args=("--skip-onboarding", "--plugin-launch"),
        launch_env=(("KITE_SKIP_ONBOARDING", "1"),),
    )


def linux_capability(root: Path) -> PlatformCapability:
    return PlatformCapability(
        name="linux",
        install_paths=(root / "share" / "kite",),
        executable="kited",
        process_name="kited",
        process_list_command=("/bin/ps", "-axo", "comm"),
        installer_url="https://example.invalid/linux",
        installer_filename="kite-installer.sh",
        installer_args=("--install",),
        launch_env=(("KITE_SKIP_ONBOARDING", "1"),),
    )


def install_linux_kited(capability: PlatformCapability) -> Path:
    executable = capability.executable_path(capability.install_paths[0])
    executable.parent.mkdir(parents=True, exist_ok=True)
    executable.write_text("#!/bin/sh\n")
    return executable


@pytest.fixture
def download_dir(tmp_path: Path) -> Path:
    return tmp_path / "downloads"


class TestInstallDetection:
    """Tests for is_installed() on the shared base."""

    def test_not_installed_when_no_path_exists(self, tmp_path: Path) -> None:
        probe = LinuxProbe(linux_capability(tmp_path), FakeProcessRunner(), FakeHttpClient())
        assert not probe.is_installed()
        assert probe.installed_path() is None

    def test_installed_when_executable_exists(self, tmp_path: Path) -> None:
        capability = linux_capability(tmp_path)
        install_linux_kited(capability)

        probe = LinuxProbe(capability, FakeProcessRunner(), FakeHttpClient())

        assert probe.is_installed()
        assert probe.installed_path() == capability.install_paths[0]

    def test_install_dir_without_executable_is_not_installed(self, tmp_path: Path) -> None:
        capability = linux_capability(tmp_path)
        capability.install_paths[0].mkdir(parents=True)

        probe = LinuxProbe(capability, FakeProcessRunner(), FakeHttpClient())

        assert not probe.is_installed()

    def test_user_location_counts_as_installed(self, tmp_path: Path) -> None:
        capability = mac_capability(tmp_path)
        capability.install_paths[1].mkdir(parents=True)

        probe = MacOSProbe(capability, FakeProcessRunner(), FakeHttpClient())

        assert probe.installed_path() == capability.install_paths[1]

    def test_detection_does_not_spawn_processes(self, tmp_path: Path) -> None:
        runner = FakeProcessRunner()
        LinuxProbe(linux_capability(tmp_path), runner, FakeHttpClient()).is_installed()
        assert runner.calls == []


class TestProcessDetection:
    """Tests for is_running()."""

    def test_running_when_listed_as_path(self, tmp_path: Path) -> None:
        runner = FakeProcessRunner({"/bin/ps": ProcessResult(0, PS_OUTPUT)})
        probe = MacOSProbe(mac_capability(tmp_path), runner, FakeHttpClient())

        assert probe.is_running()
        assert runner.calls == [["/bin/ps", "-axo", "comm"]]

    def test_prefix_name_does_not_match(self, tmp_path: Path) -> None:
        runner = FakeProcessRunner({"/bin/ps": ProcessResult(0, "/usr/bin/KiteHelper\n")})
        probe = MacOSProbe(mac_capability(tmp_path), runner, FakeHttpClient())

        assert not probe.is_running()

    def test_linux_bare_name(self, tmp_path: Path) -> None:
        runner = FakeProcessRunner({"/bin/ps": ProcessResult(0, "bash\nkited\n")})
        probe = LinuxProbe(linux_capability(tmp_path), runner, FakeHttpClient())

        assert probe.is_running()

    def test_windows_tasklist_match(self, tmp_path: Path) -> None:
        stdout = "kited.exe                    8424 Console    1     81,232 K\n"
        runner = FakeProcessRunner({"tasklist": ProcessResult(0, stdout)})
        probe = WindowsProbe(windows_capability(tmp_path), runner, FakeHttpClient())

        assert probe.is_running()

    def test_windows_tasklist_no_match(self, tmp_path: Path) -> None:
        stdout = "INFO: No tasks are running which match the specified criteria.\n"
        runner = FakeProcessRunner({"tasklist": ProcessResult(0, stdout)})
        probe = WindowsProbe(windows_capability(tmp_path), runner, FakeHttpClient())

        assert not probe.is_running()

    def test_listing_non_zero_exit_is_not_running(self, tmp_path: Path) -> None:
        runner = FakeProcessRunner({"/bin/ps": ProcessResult(1, PS_OUTPUT, "ps: error")})
        probe = MacOSProbe(mac_capability(tmp_path), runner, FakeHttpClient())

        assert not probe.is_running()

    @pytest.mark.parametrize(
        "error",
        [ProcessSpawnError("no ps"), ProcessTimeoutError("ps hung")],
    )
    def test_listing_errors_are_not_running(self, tmp_path: Path, error: Exception) -> None:
        runner = FakeProcessRunner({"/bin/ps": error})
        probe = LinuxProbe(linux_capability(tmp_path), runner, FakeHttpClient())

        assert not probe.is_running()


class TestMacOSProbe:
    """Tests for MacOSProbe install and launch."""

    def _runner(self, capability: PlatformCapability, cp_exit: int = 0) -> FakeProcessRunner:
        def copy_bundle(args: list[str]) -> ProcessResult:
            if cp_exit == 0:
                destination = Path(args[-1]) / Path(args[-2]).name
                destination.mkdir(parents=True)
            return ProcessResult(cp_exit, stderr="" if cp_exit == 0 else "cp: denied")

        return FakeProcessRunner(
            {
                "hdiutil": ProcessResult(0, HDIUTIL_OUTPUT),
                "cp": copy_bundle,
            }
        )

    def test_install_mounts_copies_and_detaches(self, tmp_path: Path, download_dir: Path) -> None:
        capability = mac_capability(tmp_path)
        capability.install_paths[0].parent.mkdir(parents=True)
        runner = self._runner(capability)
        http = FakeHttpClient()
        steps: list[str] = []
        probe = MacOSProbe(capability, runner, http, download_dir=download_dir)

        result = probe.install(InstallOptions(on_step=steps.append))

        assert result.ok
        assert result.stage is Stage.INSTALL
        assert probe.is_installed()
        installer = download_dir / "Kite.dmg"
        assert http.downloads == [("https://example.invalid/mac", installer)]
        assert runner.calls == [
            ["hdiutil", "attach", "-nobrowse", str(installer)],
            ["cp", "-R", "/Volumes/Kite/Kite.app", str(capability.install_paths[0].parent)],
            ["hdiutil", "detach", "/Volumes/Kite"],
        ]
        assert not installer.exists()
        assert steps[0] == "Downloading Kite installer"
        assert "Unmounting disk image" in steps

    def test_install_falls_back_to_user_location(
        self, tmp_path: Path, download_dir: Path
    ) -> None:
        capability = mac_capability(tmp_path)
        runner = self._runner(capability)
        probe = MacOSProbe(capability, runner, FakeHttpClient(), download_dir=download_dir)

        with patch("kitectl.adapters.probes.macos.os.access", return_value=False):
            assert probe.requires_admin()
            probe.install(InstallOptions())

        assert probe.installed_path() == capability.install_paths[1]

    def test_copy_failure_still_detaches(self, tmp_path: Path, download_dir: Path) -> None:
        capability = mac_capability(tmp_path)
        runner = self._runner(capability, cp_exit=1)
        probe = MacOSProbe(capability, runner, FakeHttpClient(), download_dir=download_dir)

        with pytest.raises(InstallFailedError) as exc_info:
            probe.install(InstallOptions())

        assert exc_info.value.exit_code == 1
        assert "cp: denied" in exc_info.value.message
        assert runner.calls[-1] == ["hdiutil", "detach", "/Volumes/Kite"]
        assert not (download_dir / "Kite.dmg").exists()

    def test_download_failure(self, tmp_path: Path, download_dir: Path) -> None:
        runner = FakeProcessRunner()
        http = FakeHttpClient(download_error=TransportConnectionError("offline"))
        probe = MacOSProbe(mac_capability(tmp_path), runner, http, download_dir=download_dir)

        with pytest.raises(InstallFailedError, match="download"):
            probe.install(InstallOptions())

        assert runner.calls == []

    def test_parse_mount_point_default(self, tmp_path: Path) -> None:
        probe = MacOSProbe(mac_capability(tmp_path), FakeProcessRunner(), FakeHttpClient())
        assert probe._parse_mount_point("") == Path("/Volumes/Kite")
        assert probe._parse_mount_point(HDIUTIL_OUTPUT) == Path("/Volumes/Kite")

    def test_launch_opens_bundle(self, tmp_path: Path) -> None:
        capability = mac_capability(tmp_path)
        capability.install_paths[0].mkdir(parents=True)
        runner = FakeProcessRunner(
            {"open": ProcessResult(0), "defaults": ProcessResult(0)}
        )
        probe = MacOSProbe(capability, runner, FakeHttpClient())

        result = probe.launch()

        assert result.ok
        assert result.stage is Stage.PROCESS
        assert runner.programs_run() == ["defaults", "open"]
        assert runner.calls[-1] == [
            "open",
            "-a",
            str(capability.install_paths[0]),
            "--args",
            "--plugin-launch",
        ]

    def test_launch_ignores_defaults_failure(self, tmp_path: Path) -> None:
        capability = mac_capability(tmp_path)
        capability.install_paths[0].mkdir(parents=True)
        runner = FakeProcessRunner(
            {"open": ProcessResult(0), "defaults": ProcessSpawnError("missing")}
        )

        assert MacOSProbe(capability, runner, FakeHttpClient()).launch().ok

    def test_launch_open_failure(self, tmp_path: Path) -> None:
        capability = mac_capability(tmp_path)
        capability.install_paths[0].mkdir(parents=True)
        runner = FakeProcessRunner({"open": ProcessResult(1, stderr="LSOpenURLs failed")})

        with pytest.raises(LaunchFailedError) as exc_info:
            MacOSProbe(capability, runner, FakeHttpClient()).launch()

        assert exc_info.value.exit_code == 1

    def test_launch_not_installed(self, tmp_path: Path) -> None:
        runner = FakeProcessRunner()
        with pytest.raises(LaunchFailedError):
            MacOSProbe(mac_capability(tmp_path), runner, FakeHttpClient()).launch()
        assert runner.calls == []


class TestWindowsProbe:
    """Tests for WindowsProbe install and launch."""

    def test_install_runs_setup(self, tmp_path: Path, download_dir: Path) -> None:
        capability = windows_capability(tmp_path)
        installer = download_dir / "KiteSetup.exe"

        def run_setup(args: list[str]) -> ProcessResult:
            executable = capability.executable_path(capability.install_paths[0])
            executable.parent.mkdir(parents=True)
            executable.write_bytes(b"MZ")
            return ProcessResult(0)

        runner = FakeProcessRunner({str(installer): run_setup})
        probe = WindowsProbe(capability, runner, FakeHttpClient(), download_dir=download_dir)

        result = probe.install(InstallOptions())

        assert result.ok
        assert runner.calls == [[str(installer), "--skip-onboarding", "--plugin-launch"]]
        assert not installer.exists()

    def test_install_refused_without_elevation(self, tmp_path: Path, download_dir: Path) -> None:
        runner = FakeProcessRunner()
        http = FakeHttpClient()
        probe = WindowsProbe(windows_capability(tmp_path), runner, http, download_dir=download_dir)

        with patch("kitectl.adapters.probes.windows.os.access", return_value=False):
            with pytest.raises(InstallFailedError, match="administrator"):
                probe.install(InstallOptions(allow_elevation=False))

        assert http.downloads == []
        assert runner.calls == []

    def test_installer_exit_code_reported(self, tmp_path: Path, download_dir: Path) -> None:
        installer = download_dir / "KiteSetup.exe"
        runner = FakeProcessRunner({str(installer): ProcessResult(1603, stderr="fatal")})
        probe = WindowsProbe(
            windows_capability(tmp_path), runner, FakeHttpClient(), download_dir=download_dir
        )

        with pytest.raises(InstallFailedError) as exc_info:
            probe.install(InstallOptions())

        assert exc_info.value.exit_code == 1603
        assert not installer.exists()

    def test_installer_success_without_artifact_fails(
        self, tmp_path: Path, download_dir: Path
    ) -> None:
        installer = download_dir / "KiteSetup.exe"
        runner = FakeProcessRunner({str(installer): ProcessResult(0)})
        probe = WindowsProbe(
            windows_capability(tmp_path), runner, FakeHttpClient(), download_dir=download_dir
        )

        with pytest.raises(InstallFailedError, match="not found afterwards"):
            probe.install(InstallOptions())

    def test_launch_spawns_kited_with_env(self, tmp_path: Path) -> None:
        capability = windows_capability(tmp_path)
        executable = capability.executable_path(capability.install_paths[0])
        executable.parent.mkdir(parents=True)
        executable.write_bytes(b"MZ")
        runner = FakeProcessRunner()

        result = WindowsProbe(capability, runner, FakeHttpClient()).launch()

        assert result.ok
        assert result.detail == "pid 4242"
        assert runner.spawned == [([str(executable)], {"KITE_SKIP_ONBOARDING": "1"})]


class TestLinuxProbe:
    """Tests for LinuxProbe install and launch."""

    def test_install_runs_script_with_bash(self, tmp_path: Path, download_dir: Path) -> None:
        capability = linux_capability(tmp_path)
        def run_script(args: list[str]) -> ProcessResult:
            install_linux_kited(capability)
            return ProcessResult(0)

        runner = FakeProcessRunner({"/bin/bash": run_script})
        probe = LinuxProbe(capability, runner, FakeHttpClient(), download_dir=download_dir)

        result = probe.install(InstallOptions())

        assert result.ok
        assert runner.calls == [
            ["/bin/bash", str(download_dir / "kite-installer.sh"), "--install"]
        ]
        assert not probe.requires_admin()

    def test_installer_timeout(self, tmp_path: Path, download_dir: Path) -> None:
        runner = FakeProcessRunner({"/bin/bash": ProcessTimeoutError("timed out")})
        probe = LinuxProbe(
            linux_capability(tmp_path), runner, FakeHttpClient(), download_dir=download_dir
        )

        with pytest.raises(InstallFailedError, match="timed out"):
            probe.install(InstallOptions())

    def test_unusable_download_dir_fails_install(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        runner = FakeProcessRunner()
        http = RequestsHttpClient("http://127.0.0.1:46624")
        probe = LinuxProbe(
            linux_capability(tmp_path), runner, http, download_dir=blocker / "sub"
        )

        with patch("requests.Session") as session_cls:
            with pytest.raises(InstallFailedError, match="download"):
                probe.install(InstallOptions())

        session_cls.assert_not_called()
        assert runner.calls == []

    def test_launch_spawn_failure(self, tmp_path: Path) -> None:
        capability = linux_capability(tmp_path)
        install_linux_kited(capability)
        runner = FakeProcessRunner(spawn_error=ProcessSpawnError("permission denied"))

        with pytest.raises(LaunchFailedError, match="permission denied"):
            LinuxProbe(capability, runner, FakeHttpClient()).launch()

    def test_launch_not_installed(self, tmp_path: Path) -> None:
        runner = FakeProcessRunner()

        with pytest.raises(LaunchFailedError):
            LinuxProbe(linux_capability(tmp_path), runner, FakeHttpClient()).launch()

        assert runner.spawned == []


class TestUnsupportedProbe:
    """Tests for the unsupported-platform sentinel."""

    def test_queries_are_false(self) -> None:
        probe = UnsupportedProbe("plan9")

        assert not probe.supported
        assert not probe.is_installed()
        assert not probe.is_running()
        assert not probe.requires_admin()

    def test_actions_raise(self) -> None:
        probe = UnsupportedProbe("plan9")

        with pytest.raises(UnsupportedPlatformError):
            probe.install(InstallOptions())
        with pytest.raises(UnsupportedPlatformError):
            probe.launch()


class TestResolveAcrossPlatforms:
    """Ladder resolution with each real probe and nothing installed."""

    @pytest.mark.parametrize(
        ("probe_class", "capability_builder"),
        [
            (MacOSProbe, mac_capability),
            (WindowsProbe, windows_capability),
            (LinuxProbe, linux_capability),
        ],
    )
    def test_missing_artifact_is_not_installed_without_network(
        self, tmp_path: Path, probe_class: type, capability_builder
    ) -> None:
        runner = FakeProcessRunner()
        http = FakeHttpClient(authenticated_routes())
        probe = probe_class(capability_builder(tmp_path), runner, http)

        state = build_orchestrator(probe, http).resolve_state()

        assert state is LifecycleState.NOT_INSTALLED
        assert http.requests == []
        assert runner.calls == []

"""Tests for the mount controllers, the open-file probe and fstab entries."""

import os
from collections.abc import Sequence
from pathlib import Path

import pytest

from stratum.config import RepositoryConfig, ServerConfig, ToolsConfig
from stratum.enums import MountMode
from stratum.exceptions import MountError
from stratum.mount import (
    FakeMountController,
    FakeOpenFileProbe,
    FstabEditor,
    MountController,
    OpenFileProbe,
    ProcOpenFileProbe,
    SystemMountController,
    build_mount_entries,
)
from stratum.utils import ScriptResult


class RecordingRunner:
    def __init__(self, exit_code: int = 0, stderr: str = "") -> None:
        self.calls: list[list[str]] = []
        self.exit_code = exit_code
        self.stderr = stderr

    def __call__(self, argv: Sequence[str]) -> ScriptResult:
        self.calls.append(list(argv))
        return ScriptResult(
            success=True, argv=tuple(argv), exit_code=self.exit_code, stderr=self.stderr
        )


class TestSystemMountController:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(SystemMountController(), MountController)

    def test_argv(self) -> None:
        runner = RecordingRunner()
        mounts = SystemMountController(ToolsConfig(), runner=runner)
        union = Path("/cvmfs/acme.example.org")

        mounts.mount_read_only(union)
        mounts.mount_read_write(union)
        mounts.remount(union, MountMode.READ_WRITE)
        mounts.unmount(union)

        assert runner.calls == [
            ["mount", "-o", "ro", str(union)],
            ["mount", "-o", "rw", str(union)],
            ["mount", "-o", "remount,rw", str(union)],
            ["umount", str(union)],
        ]

    def test_failure_raises_mount_error(self) -> None:
        runner = RecordingRunner(exit_code=32, stderr="mount: permission denied")
        mounts = SystemMountController(runner=runner)

        with pytest.raises(MountError) as exc_info:
            mounts.remount(Path("/cvmfs/x.org"), MountMode.READ_ONLY)

        error = exc_info.value
        assert error.operation == "remount"
        assert error.path == Path("/cvmfs/x.org")
        assert error.command == ("mount", "-o", "remount,ro", "/cvmfs/x.org")
        assert error.stderr == "mount: permission denied"
        assert error.command_line == "mount -o remount,ro /cvmfs/x.org"

    def test_is_mounted_reads_mount_table(self, tmp_path: Path) -> None:
        mount_point = tmp_path / "with space"
        mount_point.mkdir()
        escaped = str(mount_point.resolve()).replace(" ", "\\040")
        table = tmp_path / "mounts"
        _ = table.write_text(
            f"proc /proc proc rw 0 0\noverlay_x {escaped} overlay ro 0 0\n"
        )
        mounts = SystemMountController(mounts_file=table)

        assert mounts.is_mounted(mount_point) is True
        assert mounts.is_mounted(tmp_path) is False

    def test_unreadable_mount_table(self, tmp_path: Path) -> None:
        mounts = SystemMountController(mounts_file=tmp_path / "absent")
        with pytest.raises(MountError) as exc_info:
            _ = mounts.is_mounted(tmp_path)
        assert exc_info.value.operation == "inspect"

    def test_root_hash_missing_attribute(self, tmp_path: Path) -> None:
        with pytest.raises(MountError) as exc_info:
            _ = SystemMountController().root_hash(tmp_path)
        assert exc_info.value.operation == "getxattr"


class TestFakeMountController:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(FakeMountController(), MountController)

    def test_records_and_tracks_modes(self) -> None:
        mounts = FakeMountController()
        path = Path("/cvmfs/x.org")

        mounts.mount_read_only(path)
        mounts.remount(path, MountMode.READ_WRITE)

        assert mounts.mode(path) is MountMode.READ_WRITE
        assert mounts.operations() == ["mount", "remount"]

        mounts.unmount(path)
        assert mounts.is_mounted(path) is False

    def test_mirrors_tool_failures(self) -> None:
        mounts = FakeMountController()
        path = Path("/cvmfs/x.org")

        with pytest.raises(MountError):
            mounts.unmount(path)
        with pytest.raises(MountError):
            mounts.remount(path, MountMode.READ_ONLY)
        mounts.mount_read_only(path)
        with pytest.raises(MountError):
            mounts.mount_read_write(path)

    def test_root_hash_sampled_at_mount(self) -> None:
        current = {"hash": "one"}
        mounts = FakeMountController(root_hash_source=lambda: current["hash"])
        rdonly = Path("/spool/rdonly")

        mounts.mount_read_only(rdonly)
        current["hash"] = "two"

        assert mounts.root_hash(rdonly) == "one"
        mounts.unmount(rdonly)
        mounts.mount_read_only(rdonly)
        assert mounts.root_hash(rdonly) == "two"

    def test_injected_failure(self) -> None:
        path = Path("/cvmfs/x.org")
        mounts = FakeMountController(fail_on={("mount", path)})
        with pytest.raises(MountError, match="injected failure"):
            mounts.mount_read_only(path)
        assert mounts.is_mounted(path) is False


class TestOpenFileProbes:
    def test_fake_satisfies_protocol(self) -> None:
        probe = FakeOpenFileProbe(handles={Path("/cvmfs/x.org"): [30, 12]})
        assert isinstance(probe, OpenFileProbe)
        assert probe.open_handles(Path("/cvmfs/x.org")) == [12, 30]
        assert probe.open_handles(Path("/other")) == []

    def test_proc_probe(self, tmp_path: Path) -> None:
        tmp_path = tmp_path.resolve()
        union = tmp_path / "cvmfs" / "acme.example.org"
        (union / "sub").mkdir(parents=True)
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        proc = tmp_path / "proc"

        def process(pid: str, *, cwd: Path, root: Path, fds: list[Path]) -> None:
            (proc / pid / "fd").mkdir(parents=True)
            os.symlink(cwd, proc / pid / "cwd")
            os.symlink(root, proc / pid / "root")
            for index, target in enumerate(fds):
                os.symlink(target, proc / pid / "fd" / str(index))

        process("101", cwd=elsewhere, root=Path("/"), fds=[union / "sub" / "f"])
        process("7", cwd=union, root=Path("/"), fds=[])
        process("55", cwd=elsewhere, root=Path("/"), fds=[elsewhere / "f"])
        (proc / "self").mkdir()

        probe = ProcOpenFileProbe(proc_root=proc)

        assert probe.open_handles(union) == [7, 101]
        assert probe.open_handles(tmp_path / "cvmfs" / "acme") == []

    def test_proc_probe_without_proc(self, tmp_path: Path) -> None:
        assert ProcOpenFileProbe(tmp_path / "absent").open_handles(tmp_path) == []


class TestFstab:
    @pytest.fixture
    def config(self, server_config: ServerConfig) -> RepositoryConfig:
        return RepositoryConfig.new_origin(
            "acme.example.org", owner="alice", server=server_config
        )

    def test_build_entries(self, config: RepositoryConfig) -> None:
        base, union = build_mount_entries(config)
        spool = config.spool_dir

        assert base == (
            f"cvmfs2#acme.example.org {spool}/rdonly fuse "
            f"allow_other,config={spool}/client.conf,cvmfs_suid,noauto 0 0"
        )
        assert union == (
            f"overlay_acme.example.org {config.union_mount} overlay "
            f"upperdir={spool}/scratch,lowerdir={spool}/rdonly,"
            f"workdir={spool}/ofs_workdir,noauto,ro 0 0"
        )

    def test_add_and_remove_entries(
        self, tmp_path: Path, config: RepositoryConfig
    ) -> None:
        fstab = tmp_path / "fstab"
        _ = fstab.write_text("/dev/sda1 / ext4 defaults 0 1\n")
        editor = FstabEditor(fstab)
        lines = build_mount_entries(config)

        editor.add_entries("acme.example.org", lines)
        editor.add_entries("acme.example.org", lines)

        assert editor.entries("acme.example.org") == lines
        assert fstab.read_text().count("# stratum:acme.example.org begin") == 1

        assert editor.remove_entries("acme.example.org") is True
        assert fstab.read_text() == "/dev/sda1 / ext4 defaults 0 1\n"
        assert editor.remove_entries("acme.example.org") is False

    def test_blocks_are_independent(self, tmp_path: Path) -> None:
        editor = FstabEditor(tmp_path / "fstab")
        editor.add_entries("a.example.org", ["line a"])
        editor.add_entries("b.example.org", ["line b"])

        _ = editor.remove_entries("a.example.org")

        assert editor.entries("a.example.org") == []
        assert editor.entries("b.example.org") == ["line b"]

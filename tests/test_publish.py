import os
from datetime import datetime, timedelta

from conftest import FakeRunner
from ipa_shipit import keychain, publish
from ipa_shipit.types import CommandResult, Credential


def test_archive_path_follows_xcode_day_directory_convention(tmp_path) -> None:
    finished = datetime(2026, 10, 19, 14, 3, 59)

    got = publish.archive_path_for("App", finished, archives_root=str(tmp_path))
    assert got == str(tmp_path / "2026-10-19" / "App 19-10-2026 14.03.xcarchive")


def test_archive_path_expands_home(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    got = publish.archive_path_for("App", datetime(2026, 1, 2, 3, 4))
    assert got.startswith(str(tmp_path / "Library" / "Developer" / "Xcode" / "Archives"))


def _archive_at(root, name: str, created: datetime):
    path = root / created.strftime("%Y-%m-%d") / name
    path.mkdir(parents=True)
    os.utime(path, (created.timestamp(), created.timestamp()))
    return path


def test_find_archive_prefers_exact_completion_minute(tmp_path) -> None:
    started = datetime(2026, 10, 19, 9, 20)
    finished = datetime(2026, 10, 19, 9, 30, 5)
    exact = _archive_at(tmp_path, "App 19-10-2026 09.30.xcarchive", finished)
    _archive_at(tmp_path, "App 19-10-2026 09.31.xcarchive", finished + timedelta(seconds=30))

    got = publish.find_archive("App", started, finished, archives_root=str(tmp_path))
    assert got == str(exact)


def test_find_archive_falls_back_to_newest_created_during_build(tmp_path) -> None:
    started = datetime(2026, 10, 19, 9, 20)
    finished = datetime(2026, 10, 19, 9, 30, 2)
    _archive_at(tmp_path, "App 19-10-2026 08.00.xcarchive", datetime(2026, 10, 19, 8, 0))
    _archive_at(tmp_path, "App 19-10-2026 09.28.xcarchive", datetime(2026, 10, 19, 9, 28, 10))
    newest = _archive_at(tmp_path, "App 19-10-2026 09.29.xcarchive", datetime(2026, 10, 19, 9, 29, 58))
    _archive_at(tmp_path, "AppClip 19-10-2026 09.29.xcarchive", datetime(2026, 10, 19, 9, 29, 59))

    got = publish.find_archive("App", started, finished, archives_root=str(tmp_path))
    assert got == str(newest)


def test_find_archive_ignores_archives_older_than_build(tmp_path) -> None:
    started = datetime(2026, 10, 19, 9, 20)
    finished = datetime(2026, 10, 19, 9, 30)
    _archive_at(tmp_path, "App 19-10-2026 09.10.xcarchive", datetime(2026, 10, 19, 9, 10))

    assert publish.find_archive("App", started, finished, archives_root=str(tmp_path)) == ""


def test_find_archive_searches_start_day_across_midnight(tmp_path) -> None:
    started = datetime(2026, 10, 19, 23, 58)
    finished = datetime(2026, 10, 20, 0, 1)
    late = _archive_at(tmp_path, "App 19-10-2026 23.59.xcarchive", datetime(2026, 10, 19, 23, 59, 40))

    got = publish.find_archive("App", started, finished, archives_root=str(tmp_path))
    assert got == str(late)


def test_copy_archive_copies_into_cwd_under_product_name(tmp_path) -> None:
    src = tmp_path / "Archives" / "2026-10-19" / "App 19-10-2026 14.03.xcarchive"
    (src / "Products" / "Applications").mkdir(parents=True)
    (src / "Info.plist").write_bytes(b"<plist/>")
    cwd = tmp_path / "work"
    cwd.mkdir()

    dest = publish.copy_archive(str(src), "App", cwd=str(cwd))
    assert dest == str(cwd / "App.xcarchive")
    assert (cwd / "App.xcarchive" / "Info.plist").read_bytes() == b"<plist/>"
    assert (cwd / "App.xcarchive" / "Products" / "Applications").is_dir()


def test_copy_archive_missing_source_returns_empty(tmp_path) -> None:
    assert publish.copy_archive(str(tmp_path / "nope.xcarchive"), "App", cwd=str(tmp_path)) == ""
    assert list(tmp_path.iterdir()) == []


def test_upload_command_reads_password_from_keychain_item() -> None:
    cred = Credential(service=keychain.SERVICE, account="dev@example.com")

    cmd = publish.upload_command("/work/App.ipa", cred)
    assert cmd[:3] == [publish.XCRUN, "altool", "--upload-app"]
    assert cmd[cmd.index("--file") + 1] == "/work/App.ipa"
    assert cmd[cmd.index("--username") + 1] == "dev@example.com"
    assert cmd[cmd.index("--password") + 1] == f"@keychain:{keychain.SERVICE}"


def test_upload_ipa_ignores_upload_tool_exit_status(monkeypatch) -> None:
    cred = Credential(service=keychain.SERVICE, account="dev@example.com")
    monkeypatch.setattr(keychain, "ensure_credential", lambda _runner: cred)
    runner = FakeRunner(lambda args, _cwd: CommandResult(args=args, returncode=1, stdout="ERROR ITMS-90000"))

    got = publish.upload_ipa(runner, "/work/App.ipa")
    assert got == cred
    assert runner.commands(publish.XCRUN) == [tuple(publish.upload_command("/work/App.ipa", cred))]

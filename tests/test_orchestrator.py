# Test file for command sequencing and rollback

import pytest
from conftest import FakeInstaller, FakeSnapshot
from rpak.core.exceptions import (
    InstallError,
    NotInitializedError,
    RestoreError,
    UnknownPackageError,
    UsageError,
)
from rpak.core.manifest import DEFAULT_PROJECT_NAME, ManifestStore
from rpak.core.orchestrator import CommandState, Orchestrator


def declared(manifest):
    """Dependency name -> constraint, read fresh from disk"""
    fresh = ManifestStore(manifest.project_root)
    return {name: dep.constraint for name, dep in fresh.get_dependencies().items()}


def test_install_reports_installed_versions(orchestrator, manifest, installer, snapshot):
    manifest.set_dependency("foo")
    installer.latest["foo"] = "1.2.3"

    result = orchestrator.install()

    assert result.packages == {"foo": "1.2.3"}
    assert snapshot.lock == {"foo": "1.2.3"}
    assert ("clean",) in snapshot.calls and ("recompute",) in snapshot.calls
    assert orchestrator.state is CommandState.DONE


def test_install_restores_drifted_library(orchestrator, installer, snapshot):
    snapshot.lock = {"foo": "1.0.0"}

    orchestrator.install()

    assert snapshot.calls[0] == ("restore",)


def test_install_skips_restore_when_in_sync(orchestrator, installer, snapshot):
    snapshot.lock = {"foo": "1.0.0"}
    installer.library = {"foo": "1.0.0"}

    orchestrator.install()

    assert ("restore",) not in snapshot.calls


def test_install_failure_is_fatal(orchestrator, manifest, installer):
    manifest.set_dependency("foo")
    installer.failing.add("foo")

    with pytest.raises(InstallError, match="non-zero exit status"):
        orchestrator.install()
    assert orchestrator.state is CommandState.FAILED


def test_install_requires_init(manifest, installer):
    orchestrator = Orchestrator(manifest, FakeSnapshot(installer, initialized=False), installer)

    with pytest.raises(NotInitializedError):
        orchestrator.install()


def test_init_empty_directory(temp_dir):
    manifest = ManifestStore(temp_dir)
    installer = FakeInstaller(manifest)
    snapshot = FakeSnapshot(installer, initialized=False)
    orchestrator = Orchestrator(manifest, snapshot, installer, repos="https://repo.test")

    result = orchestrator.init()

    assert result.created_manifest and result.created_lock
    assert manifest.get_project_name() == DEFAULT_PROJECT_NAME
    assert snapshot.initialized
    assert ("init", "https://repo.test") in snapshot.calls


def test_init_twice_is_idempotent(temp_dir):
    manifest = ManifestStore(temp_dir)
    installer = FakeInstaller(manifest)
    snapshot = FakeSnapshot(installer, initialized=False)
    orchestrator = Orchestrator(manifest, snapshot, installer)

    orchestrator.init()
    manifest.set_dependency("foo")
    orchestrator.install()
    content = manifest.file_path.read_text(encoding="utf-8")
    snapshot.calls.clear()
    installer.calls.clear()

    result = orchestrator.init()

    assert not result.created_manifest and not result.created_lock
    assert manifest.file_path.read_text(encoding="utf-8") == content
    assert not any(call[0] in ("init", "restore") for call in snapshot.calls)
    assert not any(call[0] == "uninstall" for call in installer.calls)
    assert result.packages == {"foo": "1.0.0"}
    assert orchestrator.state is CommandState.DONE


def test_add_wildcard(orchestrator, manifest, installer):
    result = orchestrator.add(["foo"])

    assert declared(manifest) == {"foo": "*"}
    assert result.changed == ["foo"]
    assert installer.library["foo"] == "1.0.0"
    assert ("uninstall", "foo") not in installer.calls


def test_add_pinned_version_force_uninstalls(orchestrator, manifest, installer):
    orchestrator.add(["foo"])
    installer.calls.clear()

    orchestrator.add(["foo@2.0.0"])

    assert declared(manifest) == {"foo": "== 2.0.0"}
    assert installer.calls.index(("uninstall", "foo")) < installer.calls.index(
        ("install_pinned", "foo", "2.0.0")
    )
    assert installer.library["foo"] == "2.0.0"


def test_add_with_remote_force_uninstalls(orchestrator, manifest, installer):
    installer.library["foo"] = "1.0.0"

    orchestrator.add(["foo"], remotes=["owner/foo"])

    assert ("uninstall", "foo") in installer.calls
    assert manifest.get_remotes() == ["owner/foo"]


def test_add_then_remove_round_trip(orchestrator, manifest):
    manifest.set_dependency("bar", ">= 1.0")
    before = declared(manifest)

    orchestrator.add(["foo"])
    orchestrator.remove(["foo"])

    assert declared(manifest) == before


def test_add_rolls_back_on_install_failure(orchestrator, manifest, installer, snapshot):
    manifest.set_dependency("bar")
    manifest.add_remotes(["owner/bar"])
    orchestrator.install()
    deps_before = declared(manifest)
    remotes_before = manifest.get_remotes()
    installer.failing.add("broken")

    with pytest.raises(InstallError, match="broken"):
        orchestrator.add(["ok", "broken"], remotes=["owner/broken"])

    assert declared(manifest) == deps_before
    assert ManifestStore(manifest.project_root).get_remotes() == remotes_before
    assert snapshot.calls[-1] == ("restore",)
    assert orchestrator.state is CommandState.FAILED


def test_add_rolls_back_when_snapshot_fails(
    orchestrator, manifest, snapshot, monkeypatch
):
    orchestrator.add(["bar"])
    before = manifest.file_path.read_text(encoding="utf-8")
    lock_before = dict(snapshot.lock)

    def fail():
        raise RestoreError("packrat::snapshot failed")

    monkeypatch.setattr(snapshot, "recompute", fail)

    with pytest.raises(RestoreError):
        orchestrator.add(["foo"])

    assert manifest.file_path.read_text(encoding="utf-8") == before
    assert snapshot.lock == lock_before
    assert snapshot.calls[-1] == ("restore",)
    assert orchestrator.state is CommandState.FAILED


def test_add_rollback_reinstalls_previous_pin(orchestrator, manifest, installer):
    orchestrator.add(["foo@1.0.0"])
    installer.failing.add("foo")

    with pytest.raises(InstallError):
        orchestrator.add(["foo@2.0.0"])

    assert declared(manifest) == {"foo": "== 1.0.0"}
    assert installer.library["foo"] == "1.0.0"


def test_add_rejects_malformed_token_before_mutation(orchestrator, manifest, snapshot):
    with pytest.raises(UsageError):
        orchestrator.add(["foo", "bar@"])

    assert declared(manifest) == {}
    assert snapshot.calls == []


def test_add_requires_packages(orchestrator):
    with pytest.raises(UsageError):
        orchestrator.add([])


def test_remove(orchestrator, manifest, installer):
    orchestrator.add(["foo", "bar"], remotes=["owner/foo"])

    result = orchestrator.remove(["foo"], remotes=["owner/foo"])

    assert declared(manifest) == {"bar": "*"}
    assert manifest.get_remotes() == []
    assert result.changed == ["foo"]
    assert "foo" not in installer.library


def test_remove_unknown_package_changes_nothing(orchestrator, manifest):
    orchestrator.add(["foo"])
    before = manifest.file_path.read_text(encoding="utf-8")

    with pytest.raises(UnknownPackageError):
        orchestrator.remove(["foo", "nope"])

    assert manifest.file_path.read_text(encoding="utf-8") == before


def test_remove_rolls_back_on_install_failure(orchestrator, manifest, installer):
    orchestrator.add(["foo", "bar"])
    installer.offline = True

    with pytest.raises(InstallError):
        orchestrator.remove(["foo"])

    assert declared(manifest) == {"foo": "*", "bar": "*"}


def test_remove_rollback_restores_exact_file(sample_description):
    manifest = ManifestStore(sample_description.parent)
    installer = FakeInstaller(manifest)
    orchestrator = Orchestrator(manifest, FakeSnapshot(installer), installer)
    before = sample_description.read_text(encoding="utf-8")
    installer.offline = True

    with pytest.raises(InstallError):
        orchestrator.remove(["dplyr", "ggplot2"], remotes=["tidyverse/ggplot2"])

    assert sample_description.read_text(encoding="utf-8") == before


def test_update(orchestrator, manifest, installer):
    orchestrator.add(["foo"])
    installer.latest["foo"] = "1.5.0"
    installer.calls.clear()

    result = orchestrator.update("foo")

    assert result.previous_version == "1.0.0"
    assert result.current_version == "1.5.0"
    assert installer.calls[0] == ("uninstall", "foo")
    assert declared(manifest) == {"foo": "*"}


def test_update_unknown_package(orchestrator, manifest, installer):
    orchestrator.add(["foo"])
    before = manifest.file_path.read_text(encoding="utf-8")
    installer.calls.clear()

    with pytest.raises(UnknownPackageError):
        orchestrator.update("bar")

    assert manifest.file_path.read_text(encoding="utf-8") == before
    assert installer.calls == []


def test_update_failure_restores_library(orchestrator, installer, snapshot):
    orchestrator.add(["foo"])
    installer.failing.add("foo")

    with pytest.raises(InstallError):
        orchestrator.update("foo")

    assert installer.library["foo"] == "1.0.0"
    assert snapshot.calls[-1] == ("restore",)


def test_add_and_update_parse_the_same_name(orchestrator, manifest, installer):
    orchestrator.add(["data.table@1.14.8"])

    result = orchestrator.update("data.table@1.14.8")

    assert list(declared(manifest)) == ["data.table"]
    assert result.changed == ["data.table"]


def test_scenario(temp_dir):
    """empty directory -> init -> add -> add pinned -> remove"""
    manifest = ManifestStore(temp_dir)
    installer = FakeInstaller(manifest)
    snapshot = FakeSnapshot(installer, initialized=False)
    orchestrator = Orchestrator(manifest, snapshot, installer)

    orchestrator.init()
    assert manifest.get_project_name() == DEFAULT_PROJECT_NAME
    assert snapshot.initialized

    orchestrator.add(["foo"])
    assert declared(manifest) == {"foo": "*"}

    installer.calls.clear()
    orchestrator.add(["foo@2.0.0"])
    assert declared(manifest) == {"foo": "== 2.0.0"}
    assert installer.calls[0] == ("uninstall", "foo")

    orchestrator.remove(["foo"])
    assert "foo" not in declared(manifest)

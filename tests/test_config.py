from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from sandrun.config import DEFAULT_TAG, SandboxConfig


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("SANDRUN_TMPDIR", str(tmp_path))
    monkeypatch.setenv("SANDRUN_SCP", "/opt/bin/scp")
    monkeypatch.setenv("SANDRUN_INSTALL_JITTER", "0.25")
    cfg = SandboxConfig()
    assert cfg.temp_dir == tmp_path
    assert cfg.scp_command == "/opt/bin/scp"
    assert cfg.install_jitter_s == 0.25
    assert cfg.tag == DEFAULT_TAG
    assert cfg.explicit_dir is None
    assert not cfg.debug


def test_config_is_immutable():
    cfg = SandboxConfig(tag="x")
    with pytest.raises(ValidationError):
        cfg.tag = "y"


@pytest.mark.parametrize("value", [-1, 100, 250])
def test_disk_threshold_out_of_range(value):
    with pytest.raises(ValidationError):
        SandboxConfig(fail_if_disk_full_above=value)


@pytest.mark.parametrize("value", [0, 50, 99])
def test_disk_threshold_in_range(value):
    assert SandboxConfig(fail_if_disk_full_above=value).fail_if_disk_full_above == value


def test_working_and_use_dir_are_exclusive(tmp_path):
    with pytest.raises(ValidationError):
        SandboxConfig(working_dir=tmp_path / "a", use_dir=tmp_path / "b")


def test_explicit_dir_from_either_option(tmp_path):
    assert SandboxConfig(working_dir=tmp_path).explicit_dir == tmp_path
    assert SandboxConfig(use_dir=tmp_path / "rel").explicit_dir == tmp_path / "rel"


@pytest.mark.parametrize("tag", ["", "a/b", "..", "."])
def test_bad_tags(tag):
    with pytest.raises(ValidationError):
        SandboxConfig(tag=tag)


def test_relative_dirs_are_pinned_to_cwd(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SANDRUN_CAS_ROOT", "store")
    cfg = SandboxConfig(temp_dir=Path("scratch"), use_dir=Path("work"))
    assert cfg.temp_dir == tmp_path / "scratch"
    assert cfg.explicit_dir == tmp_path / "work"
    assert cfg.cas_root == tmp_path / "store"


def test_relative_local_locations_are_pinned_to_cwd(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    cfg = SandboxConfig(
        install_package="file:dist/pkg.tar.gz",
        stdout_copy_path="out.txt",
        stderr_copy_path="file:logs/err.txt",
    )
    assert cfg.install_package == f"file:{tmp_path}/dist/pkg.tar.gz"
    assert cfg.stdout_copy_path == str(tmp_path / "out.txt")
    assert cfg.stderr_copy_path == f"file:{tmp_path}/logs/err.txt"


@pytest.mark.parametrize(
    "uri",
    ["cas:pkgs/a.tgz", "cas://pkgs/a.tgz", "build01:/srv/a.tgz", "file:///srv/a.tgz", "file:/srv/a.tgz"],
)
def test_non_relative_locations_pass_through(uri):
    assert SandboxConfig(install_package=uri).install_package == uri


def test_bare_install_path_is_left_for_the_installer_to_reject():
    assert SandboxConfig(install_package="pkg.tar.gz").install_package == "pkg.tar.gz"

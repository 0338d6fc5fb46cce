from __future__ import annotations

import io
import logging
import tarfile
from pathlib import Path

import pytest

from sandrun.adapters import ContentStore
from sandrun.config import SandboxConfig


@pytest.fixture(autouse=True)
def _reset_sandrun_logging():
    yield
    logger = logging.getLogger("sandrun")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture()
def make_cfg(tmp_path):
    def _make(**overrides) -> SandboxConfig:
        values = {
            "temp_dir": tmp_path / "tmp",
            "cas_root": tmp_path / "cas",
            "install_jitter_s": 0,
        }
        values.update(overrides)
        return SandboxConfig(**values)

    return _make


@pytest.fixture()
def cfg(make_cfg) -> SandboxConfig:
    return make_cfg()


@pytest.fixture()
def store(tmp_path) -> ContentStore:
    return ContentStore(tmp_path / "cas")


def make_tarball(path: Path, files: dict[str, bytes]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, "w:gz") as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return path


@pytest.fixture()
def tarball(tmp_path) -> Path:
    return make_tarball(tmp_path / "dist" / "pkg.tar.gz", {"x": b"payload\n", "bin/tool.sh": b"echo tool\n"})

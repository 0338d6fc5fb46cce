from __future__ import annotations

import pytest

from sandrun.adapters import scp as scp_mod
from sandrun.core.relay import relay, report
from sandrun.types import ExecutionResult, StepResult
from sandrun.utils.proc import RunOutput


@pytest.fixture()
def captures(tmp_path):
    out = tmp_path / "stdout.log"
    err = tmp_path / "stderr.log"
    out.write_text("hello\nworld\n")
    err.write_text("".join(f"err{i}\n" for i in range(20)))
    return out, err


def _result(captures, *codes):
    out, err = captures
    steps = [StepResult(index=i, command=f"cmd{i}", exit_code=c, stdout_path=out, stderr_path=err) for i, c in enumerate(codes)]
    return ExecutionResult(stdout_path=out, stderr_path=err, steps=steps)


def test_relay_to_local_paths(make_cfg, captures, tmp_path):
    cfg = make_cfg(stdout_copy_path=str(tmp_path / "copies" / "out.txt"), stderr_copy_path=f"file:{tmp_path / 'err.txt'}")
    assert relay(*captures, cfg) == []
    assert (tmp_path / "copies" / "out.txt").read_text() == "hello\nworld\n"
    assert (tmp_path / "err.txt").read_text().startswith("err0\n")


def test_relay_to_content_store(make_cfg, captures, store):
    cfg = make_cfg(stdout_copy_path="cas:/runs/42/stdout")
    relay(*captures, cfg)
    assert store.exists("runs/42/stdout")


def test_relay_to_remote(monkeypatch, make_cfg, captures):
    calls = []
    monkeypatch.setattr(
        scp_mod,
        "run_capture",
        lambda cmd, timeout=None: calls.append(cmd) or RunOutput(stdout=b"", stderr=b"", exit_code=0, duration_s=0.0),
    )
    relay(*captures, make_cfg(stderr_copy_path="loghost:/logs/err.txt"))
    assert calls == [["scp", "-q", "-B", str(captures[1]), "loghost:/logs/err.txt"]]


def test_relay_failure_is_only_a_warning(monkeypatch, make_cfg, captures, tmp_path, caplog):
    monkeypatch.setattr(
        scp_mod,
        "run_capture",
        lambda cmd, timeout=None: RunOutput(stdout=b"", stderr=b"Connection refused", exit_code=255, duration_s=0.0),
    )
    cfg = make_cfg(stdout_copy_path="loghost:/logs/out.txt", stderr_copy_path=str(tmp_path / "err.txt"))
    warnings = relay(*captures, cfg)
    assert len(warnings) == 1
    assert "Connection refused" in caplog.text
    assert (tmp_path / "err.txt").exists()


def test_relay_unsupported_destination(make_cfg, captures):
    warnings = relay(*captures, make_cfg(stdout_copy_path="https://example.com/upload"))
    assert len(warnings) == 1


def test_relay_nothing_configured(cfg, captures):
    assert relay(*captures, cfg) == []


def test_report_echo_on_success(make_cfg, captures, capsys):
    report(_result(captures, 0, 0), make_cfg(echo_stdout=True))
    assert capsys.readouterr().out == "hello\nworld\n"


def test_report_silent_on_success(cfg, captures, capsys):
    report(_result(captures, 0), cfg)
    assert capsys.readouterr().out == ""


@pytest.mark.parametrize("echo", [True, False])
def test_report_stderr_excerpt_on_failure(make_cfg, captures, capsys, echo):
    report(_result(captures, 0, 2), make_cfg(echo_stdout=echo, excerpt_lines=3))
    assert capsys.readouterr().out == "err0\nerr1\nerr2\n"

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Sequence

import typer
from pydantic import ValidationError

from sandrun.config import SandboxConfig
from sandrun.core.runner import execute
from sandrun.errors import UsageError
from sandrun.utils.log import LEVELS, setup_logging


app = typer.Typer(
	name="sandrun",
	help="Run a ';'-separated chain of shell commands inside a disposable working directory.",
	add_completion=False,
)

VALUE_OPTIONS = {
	"--temp-dir",
	"--working-dir",
	"--use-dir",
	"--tag",
	"--install-package",
	"--fail-if-disk-full-above",
	"--stdout-copy-path",
	"--stderr-copy-path",
	"--log-level",
	"--log-file",
}
FLAG_OPTIONS = {"--debug", "--echo-stdout", "--random-nice", "--tarball-if-fail", "--help"}


def split_argv(argv: Sequence[str]) -> tuple[list[str], list[str]]:
	"""Split argv into our options and the literal command chain.

	Options must come first. The first token that is not one of ours starts
	the command, and everything after it is passed through untouched.
	"""
	opts: list[str] = []
	i = 0
	while i < len(argv):
		tok = argv[i]
		name, has_value = tok.split("=", 1)[0], "=" in tok
		if name in FLAG_OPTIONS and not has_value:
			opts.append(tok)
		elif name in VALUE_OPTIONS:
			opts.append(tok)
			if not has_value and i + 1 < len(argv):
				i += 1
				opts.append(argv[i])
		else:
			break
		i += 1
	return opts, list(argv[i:])


@app.command()
def run(
	command: Optional[list[str]] = typer.Argument(None, help="Command chain, e.g. 'make; make test'"),
	temp_dir: Optional[Path] = typer.Option(None, "--temp-dir", help="Root for auto-created workspaces"),
	working_dir: Optional[Path] = typer.Option(None, "--working-dir", help="Run in this directory; never deleted"),
	use_dir: Optional[Path] = typer.Option(None, "--use-dir", help="Same as --working-dir"),
	tag: Optional[str] = typer.Option(None, "--tag", help="Suffix identifying the workspace"),
	debug: bool = typer.Option(False, "--debug", help="Keep the workspace"),
	install_package: Optional[str] = typer.Option(None, "--install-package", help="cas:PATH, file:PATH or host:PATH"),
	echo_stdout: bool = typer.Option(False, "--echo-stdout", help="Print captured stdout on success"),
	random_nice: bool = typer.Option(False, "--random-nice", help="Run each command at a random niceness"),
	fail_if_disk_full_above: Optional[int] = typer.Option(None, "--fail-if-disk-full-above", help="Refuse to run above this disk usage percent"),
	tarball_if_fail: bool = typer.Option(False, "--tarball-if-fail", help="Archive the workspace if the chain fails"),
	stdout_copy_path: Optional[str] = typer.Option(None, "--stdout-copy-path", help="Copy captured stdout here"),
	stderr_copy_path: Optional[str] = typer.Option(None, "--stderr-copy-path", help="Copy captured stderr here"),
	log_level: Optional[str] = typer.Option(None, "--log-level", help=f"One of {', '.join(LEVELS)}"),
	log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write diagnostics to this file"),
) -> int:
	if log_level and log_level.upper() not in LEVELS:
		raise UsageError(f"Unknown log level {log_level!r}")
	setup_logging(log_level, log_file)

	raw = " ".join(command or [])
	overrides = {
		"temp_dir": temp_dir,
		"working_dir": working_dir,
		"use_dir": use_dir,
		"tag": tag,
		"install_package": install_package,
		"fail_if_disk_full_above": fail_if_disk_full_above,
		"stdout_copy_path": stdout_copy_path,
		"stderr_copy_path": stderr_copy_path,
	}
	try:
		cfg = SandboxConfig(
			debug=debug,
			echo_stdout=echo_stdout,
			random_nice=random_nice,
			tarball_if_fail=tarball_if_fail,
			**{k: v for k, v in overrides.items() if v is not None},
		)
	except ValidationError as e:
		raise UsageError(_describe(e)) from e
	return execute(cfg, raw)


def _describe(e: ValidationError) -> str:
	parts = []
	for err in e.errors():
		loc = ".".join(str(p) for p in err.get("loc", ()))
		parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
	return "; ".join(parts)


def main(argv: Optional[Sequence[str]] = None) -> int:
	args = list(sys.argv[1:] if argv is None else argv)
	opts, command = split_argv(args)
	try:
		rv = app(args=opts + ["--"] + command, prog_name="sandrun", standalone_mode=False)
	except typer.Exit as e:
		return e.exit_code
	except typer.Abort:
		return 1
	except typer.TyperException as e:
		typer.echo(f"sandrun: {e.format_message()}", err=True)
		return 1
	except UsageError as e:
		typer.echo(f"sandrun: {e}", err=True)
		return 1
	return rv if isinstance(rv, int) else 0


if __name__ == "__main__":
	sys.exit(main())

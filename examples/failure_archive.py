#!/usr/bin/env python3
"""
Failure archive example
Runs a chain whose second step fails and keeps a tarball of the workspace.
"""

import tempfile
from pathlib import Path

import sandrun as sr


def main():
    root = Path(tempfile.mkdtemp(prefix="sandrun-example-"))
    cfg = sr.SandboxConfig(temp_dir=root, tag="demo", tarball_if_fail=True, install_jitter_s=0)

    code = sr.execute(cfg, "echo building; ls does-not-exist; echo never")
    print(f"\nexit code: {code}")

    for entry in sorted(root.iterdir()):
        print(f"  {entry.name}")


if __name__ == "__main__":
    main()

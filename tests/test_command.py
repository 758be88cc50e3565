from __future__ import annotations

from pathlib import Path

import pytest

from oda_installer.errors import CommandError
from oda_installer.lib.command import CommandRunner, fmt_argv


def test_run_captures_output():
    r = CommandRunner().run(["sh", "-c", "echo out; echo err >&2"])
    assert r.ok
    assert r.stdout == "out\n"
    assert r.stderr == "err\n"


def test_failure_raises_with_context():
    with pytest.raises(CommandError) as exc:
        CommandRunner().run(["sh", "-c", "echo nope >&2; exit 3"])
    assert exc.value.returncode == 3
    assert exc.value.argv == ["sh", "-c", "echo nope >&2; exit 3"]
    assert "nope" in str(exc.value)


def test_unchecked_and_ok_codes():
    runner = CommandRunner()
    assert runner.run(["sh", "-c", "exit 4"], check=False).returncode == 4
    assert runner.run(["sh", "-c", "exit 100"], ok_codes=(0, 100)).returncode == 100


def test_missing_binary():
    runner = CommandRunner()
    with pytest.raises(CommandError) as exc:
        runner.run(["definitely-not-a-real-binary-oda"])
    assert exc.value.returncode == 127
    assert runner.query(["definitely-not-a-real-binary-oda"]).returncode == 127


def test_dry_run_skips_execution_but_queries_still_run(tmp_path):
    marker = tmp_path / "touched"
    runner = CommandRunner(dry_run=True)

    r = runner.run(["touch", str(marker)])
    assert r.ok and not marker.exists()

    assert runner.query(["sh", "-c", "echo probe"]).stdout == "probe\n"


def test_stdin_and_cwd(tmp_path):
    r = CommandRunner().run(["sh", "-c", "cat; pwd"], input_text="hello\n", cwd=str(tmp_path))
    lines = r.stdout.splitlines()
    assert lines[0] == "hello"
    assert Path(lines[1]).resolve() == tmp_path.resolve()


def test_shell_and_fmt():
    assert CommandRunner().shell("echo a | tr a b").stdout == "b\n"
    assert fmt_argv(["echo", "two words"]) == "echo 'two words'"

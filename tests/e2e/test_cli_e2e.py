#  Copyright (c) 2025 Tom Villani, Ph.D.
"""End-to-end tests running ``python -m markupclean`` in a subprocess."""

import subprocess
import sys

import pytest


@pytest.mark.e2e
@pytest.mark.cli
class TestModuleEntryPoint:
    """The installed command, exercised the way scripts call it."""

    def _run_cli(self, args: list[str], stdin: str = "") -> subprocess.CompletedProcess:
        """Run the CLI with the given arguments.

        Parameters
        ----------
        args : list[str]
            Command-line arguments to pass to markupclean
        stdin : str, default ""
            Text piped to the process

        Returns
        -------
        subprocess.CompletedProcess
            The result of the CLI execution

        """
        cmd = [sys.executable, "-m", "markupclean", "--no-config"] + args
        return subprocess.run(cmd, input=stdin, capture_output=True, text=True)

    def test_pipe(self):
        result = self._run_cli([], stdin="<svg><script>alert(1)</script><circle></circle></svg>")

        assert result.returncode == 0
        assert result.stdout == "<svg><circle></circle></svg>\n"

    def test_file_round_trip(self, tmp_path):
        source = tmp_path / "in.svg"
        source.write_text('<svg><rect style="fill: red; behavior: url(x.htc)"></rect></svg>')
        target = tmp_path / "out.svg"

        result = self._run_cli([str(source), "-o", str(target)])

        assert result.returncode == 0
        assert target.read_text() == '<svg><rect style="fill: red"></rect></svg>'

    def test_missing_file_exit_code(self, tmp_path):
        result = self._run_cli([str(tmp_path / "nope.svg")])

        assert result.returncode == 4
        assert "Error" in result.stderr

    def test_bad_option_exit_code(self):
        result = self._run_cli(["--allow-at-rule", "bogus"], stdin="<svg></svg>")

        assert result.returncode == 3
        assert "Unknown CSS rule kind" in result.stderr

    def test_report(self):
        result = self._run_cli(["--report"], stdin="<svg><script></script></svg>")

        assert result.returncode == 0
        assert "Removed <script>" in result.stderr

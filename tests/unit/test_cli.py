#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for the markupclean command line."""

import io
import json
import logging
from unittest.mock import patch

import pytest
from bs4 import FeatureNotFound

from markupclean import RemoveReason, Sanitizer
from markupclean.cli import (
    EXIT_DEPENDENCY_ERROR,
    EXIT_ERROR,
    EXIT_FILE_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    build_options,
    create_parser,
    create_report_hooks,
    main,
)


@pytest.fixture(autouse=True)
def restore_root_logging():
    """main() reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def svg_file(tmp_path):
    path = tmp_path / "input.svg"
    path.write_text('<svg onclick="x"><script>alert(1)</script><circle cx="1"></circle></svg>', encoding="utf-8")
    return path


@pytest.mark.unit
@pytest.mark.cli
class TestParser:
    """Argument parsing and option building."""

    def test_defaults(self):
        args = create_parser().parse_args([])

        assert args.input == "-"
        assert args.output is None
        assert args.base_url == ""
        assert args.allow_tag == []
        assert args.log_level == "WARNING"

    def test_unknown_parser_rejected(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--parser", "regex"])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "markupclean" in capsys.readouterr().out

    def test_allow_flags_extend_config(self):
        args = create_parser().parse_args(["--allow-tag", "p", "--allow-scheme", "mailto"])
        options = build_options(args, {"allowed-tags": ["svg"]})

        assert set(options.allowed_tags) == {"svg", "p"}
        assert set(options.allowed_schemes) == {"http", "https", "mailto"}

    def test_allow_at_rule(self):
        args = create_parser().parse_args(["--allow-at-rule", "@media", "--allow-at-rule", "font_face"])
        options = build_options(args, {})

        assert {rule.value for rule in options.allowed_at_rules} == {"style", "namespace", "media", "font-face"}

    def test_switches(self):
        args = create_parser().parse_args(["--keep-child-nodes", "--allow-data-attributes", "--parser", "html5lib"])
        options = build_options(args, {"keep-child-nodes": False})

        assert options.keep_child_nodes is True
        assert options.allow_data_attributes is True
        assert options.parser == "html5lib"

    def test_config_switch_kept_without_flag(self):
        options = build_options(create_parser().parse_args([]), {"keep_child_nodes": True})
        assert options.keep_child_nodes is True


@pytest.mark.unit
@pytest.mark.cli
class TestMain:
    """main() input, output and flags."""

    def test_file_to_stdout(self, svg_file, capsys):
        assert main([str(svg_file), "--no-config"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == '<svg><circle cx="1"></circle></svg>\n'

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"<svg><script>x</script></svg>")))

        assert main(["--no-config"]) == EXIT_SUCCESS
        assert capsys.readouterr().out == "<svg></svg>\n"

    def test_output_file(self, svg_file, tmp_path):
        output = tmp_path / "clean.svg"

        assert main([str(svg_file), "-o", str(output), "--no-config"]) == EXIT_SUCCESS
        assert output.read_text(encoding="utf-8") == '<svg><circle cx="1"></circle></svg>'

    def test_base_url(self, tmp_path, capsys):
        path = tmp_path / "in.svg"
        path.write_text('<svg><use href="a.png"></use></svg>')

        main([str(path), "--base-url", "https://example.com/img/", "--no-config"])

        assert 'href="https://example.com/img/a.png"' in capsys.readouterr().out

    def test_document(self, tmp_path, capsys):
        path = tmp_path / "page.html"
        path.write_text("<html><body><script>x</script><svg></svg></body></html>")

        main([str(path), "--document", "--allow-tag", "html", "--allow-tag", "body", "--no-config"])

        assert capsys.readouterr().out == "<html><body><svg></svg></body></html>\n"

    def test_allow_class(self, tmp_path, capsys):
        path = tmp_path / "in.svg"
        path.write_text('<svg class="safe evil"></svg>')

        main([str(path), "--allow-class", "safe", "--no-config"])

        assert capsys.readouterr().out == '<svg class="safe"></svg>\n'

    def test_keep_child_nodes(self, tmp_path, capsys):
        path = tmp_path / "in.svg"
        path.write_text("<svg><foo><circle></circle></foo></svg>")

        main([str(path), "--keep-child-nodes", "--no-config"])

        assert capsys.readouterr().out == "<svg><circle></circle></svg>\n"


@pytest.mark.unit
@pytest.mark.cli
class TestConfiguration:
    """Configuration files feeding main()."""

    def test_explicit_config(self, svg_file, tmp_path, capsys):
        config = tmp_path / "policy.toml"
        config.write_text('extend-allowed-tags = ["script"]\n')

        main([str(svg_file), "--config", str(config)])

        assert "<script>alert(1)</script>" in capsys.readouterr().out

    def test_env_var_config(self, svg_file, tmp_path, monkeypatch, capsys):
        config = tmp_path / "policy.json"
        config.write_text(json.dumps({"extend_allowed_attributes": ["onclick"]}))
        monkeypatch.setenv("MARKUPCLEAN_CONFIG", str(config))

        main([str(svg_file)])

        assert 'onclick="x"' in capsys.readouterr().out

    def test_discovered_config(self, tmp_path, monkeypatch, capsys):
        project = tmp_path / "project"
        project.mkdir()
        (project / ".markupclean.yaml").write_text("keep-child-nodes: true\n")
        (project / "in.svg").write_text("<svg><foo><g></g></foo></svg>")
        monkeypatch.chdir(project)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.delenv("MARKUPCLEAN_CONFIG", raising=False)

        main(["in.svg"])

        assert capsys.readouterr().out == "<svg><g></g></svg>\n"

    def test_no_config_ignores_env(self, svg_file, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("MARKUPCLEAN_CONFIG", str(tmp_path / "missing.toml"))

        assert main([str(svg_file), "--no-config"]) == EXIT_SUCCESS


@pytest.mark.unit
@pytest.mark.cli
class TestExitCodes:
    """main() return codes for each failure class."""

    def test_missing_input(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.svg"), "--no-config"]) == EXIT_FILE_ERROR
        assert "Cannot read" in capsys.readouterr().err

    def test_missing_config(self, svg_file, tmp_path, capsys):
        assert main([str(svg_file), "--config", str(tmp_path / "missing.toml")]) == EXIT_VALIDATION_ERROR
        assert "does not exist" in capsys.readouterr().err

    def test_invalid_config(self, svg_file, tmp_path):
        config = tmp_path / "bad.json"
        config.write_text("{ not json }")

        assert main([str(svg_file), "--config", str(config)]) == EXIT_VALIDATION_ERROR

    def test_unknown_config_key(self, svg_file, tmp_path, capsys):
        config = tmp_path / "policy.toml"
        config.write_text("allow-everything = true\n")

        assert main([str(svg_file), "--config", str(config)]) == EXIT_VALIDATION_ERROR
        assert "Unknown configuration key" in capsys.readouterr().err

    def test_unknown_at_rule(self, svg_file):
        assert main([str(svg_file), "--allow-at-rule", "bogus", "--no-config"]) == EXIT_VALIDATION_ERROR

    def test_unwritable_output(self, svg_file, tmp_path, capsys):
        assert main([str(svg_file), "-o", str(tmp_path), "--no-config"]) == EXIT_FILE_ERROR
        assert "Cannot write" in capsys.readouterr().err

    def test_missing_parser_package(self, svg_file, capsys):
        with patch("markupclean.dom.BeautifulSoup", side_effect=FeatureNotFound("lxml")):
            result = main([str(svg_file), "--parser", "lxml", "--no-config"])

        assert result == EXIT_DEPENDENCY_ERROR
        assert "pip install lxml" in capsys.readouterr().err

    def test_unexpected_error(self, svg_file, capsys):
        with patch.object(Sanitizer, "sanitize", side_effect=RuntimeError("boom")):
            result = main([str(svg_file), "--no-config"])

        assert result == EXIT_ERROR
        assert "Error: boom" in capsys.readouterr().err


@pytest.mark.unit
@pytest.mark.cli
class TestReport:
    """--report removal logging."""

    def test_report_to_stderr(self, svg_file, capsys):
        main([str(svg_file), "--report", "--no-config"])
        err = capsys.readouterr().err

        assert "INFO: Removed <script> (not-allowed-tag)" in err
        assert "INFO: Removed attribute 'onclick' from <svg> (not-allowed-attribute)" in err

    def test_report_to_log_file(self, svg_file, tmp_path):
        log_file = tmp_path / "removed.log"

        main([str(svg_file), "--report", "--log-file", str(log_file), "--no-config"])
        logging.getLogger().handlers[-1].flush()

        assert "Removed <script>" in log_file.read_text(encoding="utf-8")

    def test_cancelled_removals_not_reported(self, caplog):
        hooks = create_report_hooks()
        hooks.register_hook("removing_tag", lambda event, context: setattr(event, "cancel", True), priority=0)

        with caplog.at_level(logging.INFO, logger="markupclean.report"):
            result = Sanitizer(hooks=hooks).sanitize('<svg><foo></foo><circle onclick="x"></circle></svg>')

        assert "<foo>" in result
        assert "Removed <foo>" not in caplog.text
        assert "Removed attribute 'onclick'" in caplog.text

    def test_report_describes_each_kind(self, caplog):
        hooks = create_report_hooks()

        with caplog.at_level(logging.INFO, logger="markupclean.report"):
            Sanitizer(hooks=hooks).sanitize('<svg><!-- note --><rect style="behavior: x"></rect></svg>')

        assert "Removed comment" in caplog.text
        assert f"Removed CSS property 'behavior' from <rect> ({RemoveReason.NOT_ALLOWED_STYLE.value})" in caplog.text

"""
Command line tests.
"""

import io

import orjson
import pytest

from tagsmith.cli.main import cli, create_parser
from tagsmith.utils.logger import LogLevel, configure_logging


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for key in ("TAGSMITH_ENV", "TAGSMITH_COMPILER_COMPACT"):
        monkeypatch.delenv(key, raising=False)
    yield tmp_path
    configure_logging(LogLevel.WARNING)


@pytest.fixture
def tag_file(workdir):
    path = workdir / "app.tag"
    path.write_text("<my-tag>\n  <p>{ x }</p>\n  <style>p { a: b }</style>\n</my-tag>\n")
    return path


def test_no_command_prints_help(capsys):
    assert cli([]) == 0
    assert "usage: tagsmith" in capsys.readouterr().out


def test_compile_to_stdout(tag_file, capsys):
    assert cli(["compile", str(tag_file)]) == 0

    out = capsys.readouterr().out
    assert out == "riot.tag2('my-tag', '<p>{x}</p>', 'p { a: b }', '', function(opts) {\n}, '{ }');\n"


def test_compile_to_file(tag_file, workdir):
    target = workdir / "app.js"

    assert cli(["compile", str(tag_file), "-o", str(target)]) == 0
    assert target.read_text().startswith("riot.tag2('my-tag'")


def test_compile_entities(tag_file, capsys):
    assert cli(["compile", str(tag_file), "--entities", "--exclude", "css"]) == 0

    assert orjson.loads(capsys.readouterr().out) == [
        {"tagName": "my-tag", "html": "<p>{x}</p>", "css": "", "attribs": "", "js": ""},
    ]


def test_compile_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("<a-b><i>x</i></a-b>"))

    assert cli(["compile", "-"]) == 0
    assert "riot.tag2('a-b', '<i>x</i>'" in capsys.readouterr().out


def test_config_file_sets_options(tag_file, workdir, capsys):
    config = workdir / "opts.json"
    config.write_text('{"compiler": {"entities": true, "exclude": ["css"]}}')

    assert cli(["--config", str(config), "compile", str(tag_file)]) == 0
    assert orjson.loads(capsys.readouterr().out)[0]["css"] == ""


def test_config_in_working_directory(tag_file, workdir, capsys):
    (workdir / "tagsmith.py").write_text('config = {"compiler": {"brackets": "[ ]"}}\n')

    assert cli(["compile", str(tag_file)]) == 0
    # Braces are plain text with other brackets configured
    assert "'<p>{ x }</p>'" in capsys.readouterr().out


def test_compile_error_exit_code(workdir, capsys):
    path = workdir / "bad.tag"
    path.write_text('<my-tag>\n  <script type="coffee">\n    x\n  </script>\n</my-tag>\n')

    assert cli(["compile", str(path)]) == 1
    assert 'JS parser not found: "coffee"' in capsys.readouterr().err


def test_invalid_brackets(tag_file, capsys):
    assert cli(["compile", str(tag_file), "--brackets", "<< >>"]) == 1
    assert "Unsupported brackets" in capsys.readouterr().err


def test_missing_source(capsys):
    assert cli(["compile", "missing.tag"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_template_command(workdir, capsys):
    path = workdir / "list.html"
    path.write_text('<ul>\n  <li each="{ item in items }">{ item }</li>\n</ul>\n')

    assert cli(["template", str(path)]) == 0

    data = orjson.loads(capsys.readouterr().out)
    assert data["html"] == "<ul>\n  <li expr0></li>\n</ul>"
    assert data["bindings"][0]["type"] == "each"
    assert data["bindings"][0]["itemName"] == "item"


def test_template_syntax_error(workdir, capsys):
    path = workdir / "two.html"
    path.write_text("<p></p><p></p>")

    assert cli(["template", str(path)]) == 1
    assert "single root" in capsys.readouterr().err


def test_debug_logging_goes_to_stderr(tag_file, capsys):
    assert cli(["--log-level", "debug", "compile", str(tag_file)]) == 0

    assert "Compiled element" in capsys.readouterr().err


def test_parser_exclude_choices():
    with pytest.raises(SystemExit):
        create_parser().parse_args(["compile", "x.tag", "--exclude", "sql"])

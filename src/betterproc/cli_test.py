from __future__ import annotations

import pytest
from click.testing import CliRunner

from betterproc.cli import cli


@pytest.fixture
def procfile(tmp_path):
    p = tmp_path / "Procfile"
    p.write_text("# services\nweb: echo serving on $PORT\nworker: echo working\n")
    return p


def invoke(procfile, *args):
    return CliRunner().invoke(cli, ["--procfile", str(procfile), *args])


def test_check(procfile):
    result = invoke(procfile, "check")
    assert result.exit_code == 0
    assert "Entries: 2" in result.output
    assert "  web" in result.output


def test_check_missing_procfile(tmp_path):
    result = invoke(tmp_path / "missing", "check")
    assert result.exit_code == 1
    assert "Procfile not readable" in result.output


def test_list(procfile):
    result = invoke(procfile, "list")
    assert result.exit_code == 0
    assert result.output == "web: echo serving on $PORT\nworker: echo working\n"


def test_show(procfile):
    result = invoke(procfile, "show", "worker")
    assert result.output == "worker: echo working\n"


def test_show_expand(procfile):
    result = invoke(procfile, "show", "web", "--expand", "-e", "PORT=5000")
    assert result.exit_code == 0
    assert result.output == "echo serving on 5000\n"


def test_show_unknown(procfile):
    result = invoke(procfile, "show", "nope")
    assert result.exit_code == 1
    assert "Unknown entry" in result.output


def test_run(procfile):
    result = invoke(procfile, "run", "web", "-e", "PORT=8080")
    assert result.exit_code == 0
    assert result.output == "serving on 8080\n"


def test_run_bad_env_pair(procfile):
    result = invoke(procfile, "run", "web", "-e", "PORT")
    assert result.exit_code == 2


def test_run_bad_cwd(procfile, tmp_path):
    result = invoke(procfile, "run", "worker", "--cwd", str(tmp_path / "missing"))
    assert result.exit_code == 1
    assert "worker failed" in result.output


def test_rm(procfile):
    result = invoke(procfile, "rm", "web")
    assert result.exit_code == 0
    assert procfile.read_text() == "worker: echo working"


def test_rm_unknown(procfile):
    result = invoke(procfile, "rm", "nope")
    assert result.exit_code == 1
    assert procfile.read_text().startswith("# services")


def test_check_undecodable_procfile(tmp_path):
    p = tmp_path / "Procfile"
    p.write_bytes(b"web: echo \xff\xfe\n")
    result = invoke(p, "check")
    assert result.exit_code == 1
    assert "Procfile not readable" in result.output
    assert not isinstance(result.exception, UnicodeDecodeError)

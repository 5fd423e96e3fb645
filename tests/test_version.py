from typer.testing import CliRunner

import mdsmith
from mdsmith.ui.cli import app


def test_get_version_matches_public_api() -> None:
    assert mdsmith.get_version() == mdsmith.__version__
    assert isinstance(mdsmith.__version__, str)


def test_cli_version_flag() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0, result.stdout
    assert result.stdout.strip() == mdsmith.get_version()

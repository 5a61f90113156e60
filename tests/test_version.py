from typer.testing import CliRunner

import pandoc_spec
from pandoc_spec.ui.cli import app
from pandoc_spec.version import get_version


def test_get_version_matches_public_api() -> None:
    assert get_version() == pandoc_spec.__version__
    assert isinstance(pandoc_spec.__version__, str)


def test_cli_version_flag() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0, result.stdout
    assert result.stdout.strip() == get_version()

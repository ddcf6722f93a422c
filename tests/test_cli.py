from relaychat.cli import main


def _write_config(tmp_path, port):
    path = tmp_path / "server.conf"
    path.write_text(
        f"port = {port}\nmaxusers = 5\nmaxchannels = 5\nservername = Cli\nmotd = hi\n",
        encoding="utf-8",
    )
    return path


def test_help(capsys):
    assert main(["-h"]) == 0
    out = capsys.readouterr().out
    assert "-cp, --configpath" in out
    assert "-h, --help" in out


def test_long_help(capsys):
    assert main(["--help"]) == 0
    assert "Options:" in capsys.readouterr().out


def test_unknown_argument(capsys):
    assert main(["--bogus"]) == 1
    captured = capsys.readouterr()
    assert "Unknown argument: --bogus" in captured.err
    assert "Options:" in captured.out


def test_configpath_requires_value(capsys):
    assert main(["-cp"]) == 1
    assert "Error: --configpath option requires a value." in capsys.readouterr().err


def test_missing_config_file(tmp_path, capsys):
    missing = tmp_path / "none.conf"
    assert main(["--configpath", str(missing)]) == 1
    captured = capsys.readouterr()
    assert f"Loading configuration from: {missing}" in captured.out
    assert "Failed to read configuration file" in captured.err


def test_invalid_config(tmp_path, capsys):
    assert main(["-cp", str(_write_config(tmp_path, 80))]) == 1
    assert "Invalid port number." in capsys.readouterr().err
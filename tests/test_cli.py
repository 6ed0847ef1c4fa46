"""End-to-end tests for the command line."""

import json

import pytest

from cli import build_parser, main


@pytest.fixture
def config_file(tmp_path, data_file):
    path = tmp_path / "config.toml"
    path.write_text(
        "[test.training]\n"
        "max_epochs = 20\n"
        "log_interval = 10\n"
        "hidden_dims = [6]\n"
        "\n"
        "[test.data]\n"
        f'data_path = "{data_file.as_posix()}"\n'
        f'model_path = "{(tmp_path / "model" / "guru.pt").as_posix()}"\n'
    )
    return path


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.profile == "default"
    assert args.generator is None
    assert args.format == "table"
    assert not args.no_train


def test_full_pass(config_file, tmp_path, capsys):
    main(["--config", str(config_file), "--profile", "test", "--save-network",
          "--format", "markdown"])
    out = capsys.readouterr().out

    assert "4 clubs, 24 input features" in out
    assert "Testing on (unseen) Test Data" in out
    assert "|Home|Predicted result|Away|" in out
    assert "|Atlanta|" in out
    assert (tmp_path / "model" / "guru.pt").exists()


def test_load_saved_network(config_file, capsys):
    main(["--config", str(config_file), "--profile", "test", "--save-network"])
    main(["--config", str(config_file), "--profile", "test", "--load-network",
          "--no-train", "-g", "default"])
    out = capsys.readouterr().out
    assert "Loaded network from" in out
    assert out.count("Training Prediction Network") == 1


def test_compact_generator(config_file, capsys):
    main(["--config", str(config_file), "--profile", "test", "--generator", "compact",
          "--no-train"])
    assert "4 clubs, 13 input features" in capsys.readouterr().out


def test_missing_data_file(config_file, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(config_file), "--profile", "test",
              "--data", str(tmp_path / "missing.json")])
    assert exc.value.code == 1
    assert "Error:" in capsys.readouterr().err


def test_unknown_profile(config_file, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(config_file), "--profile", "nope"])
    assert exc.value.code == 1
    assert "Unknown profile" in capsys.readouterr().err


def test_postponed_fixture(tmp_path, config_file, capsys):
    matches = [
        ("2020-01-01", "A", "B", [1, 0]),
        ("2020-01-05", "A", "C", None),
        ("2020-01-10", "A", "C", [4, 0]),
        ("2020-01-15", "A", "B", [3, 0]),
        ("2020-01-20", "B", "C", [2, 2]),
    ]
    path = tmp_path / "postponed.json"
    path.write_text(json.dumps([
        {"date": f"{d}T15:00:00+00:00", "home": h, "away": a, "result": r}
        for d, h, a, r in matches
    ]))
    main(["--config", str(config_file), "--profile", "test", "--data", str(path),
          "--split-data", "0.5", "--format", "markdown"])
    out = capsys.readouterr().out
    assert "3 clubs, 23 input features" in out
    assert "|A|" in out and "|C|" in out

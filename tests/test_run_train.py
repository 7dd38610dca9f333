from run_train import main, parse_args
from rl_qtable.config import TrainConfig


def test_parse_args_defaults_match_config() -> None:
    image, cfg = parse_args([])
    assert image is None
    assert cfg == TrainConfig()


def test_parse_args_overrides() -> None:
    _, cfg = parse_args(["--grid-size", "8", "--targets", "nose", "--episodes", "5", "--epsilon", "0.1"])
    assert cfg.grid_size == 8
    assert cfg.targets == ("nose",)
    assert cfg.episodes == 5
    assert cfg.epsilon == 0.1


def test_main_writes_artifacts(tmp_path, capsys) -> None:
    out = tmp_path / "out"
    main(["--grid-size", "8", "--episodes", "20", "--max-steps", "50", "--resize", "64", "--out-dir", str(out)])
    for name in ("learning_curve.png", "value_grid.png", "greedy_path.png"):
        assert (out / name).exists()
    printed = capsys.readouterr().out
    assert "Episode 20/20" in printed
    assert "QTable(numEntries=64)" in printed

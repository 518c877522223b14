import pytest

from crimescene.config import AnalysisConfig, create_config, load_config


def test_defaults():
    cfg = AnalysisConfig()
    assert cfg.segmentation.n_segments == 100
    assert cfg.segmentation.compactness == 10.0
    assert cfg.segmentation.n_iter == 10
    assert cfg.adjacency.tolerance == 5
    assert cfg.classifier.k == 5
    assert cfg.grid.node_size == 10
    assert cfg.grid.brightness_threshold == 200
    assert cfg.pathfinding.search_radius is None


def test_bundled_config_matches_defaults():
    assert create_config("analysis") == AnalysisConfig()


def test_missing_named_config():
    with pytest.raises(FileNotFoundError):
        create_config("does_not_exist")


def test_partial_dict_keeps_defaults():
    cfg = AnalysisConfig.from_dict({"grid": {"node_size": 20}})
    assert cfg.grid.node_size == 20
    assert cfg.grid.brightness_threshold == 200
    assert cfg.segmentation.n_segments == 100


@pytest.mark.parametrize("raw", [
    {"bogus": {}},
    {"grid": {"cell": 4}},
])
def test_unknown_keys_rejected(raw):
    with pytest.raises(ValueError):
        AnalysisConfig.from_dict(raw)


def test_invalid_value_rejected():
    with pytest.raises(ValueError):
        AnalysisConfig.from_dict({"grid": {"node_size": 0}})


def test_load_yaml_file(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text("segmentation:\n  n_segments: 50\npathfinding:\n  search_radius: 3\n")
    cfg = load_config(path)
    assert cfg.segmentation.n_segments == 50
    assert cfg.pathfinding.search_radius == 3
    assert cfg.as_dict()["adjacency"] == {"tolerance": 5}


def test_load_empty_yaml(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == AnalysisConfig()


def test_load_none_gives_defaults():
    assert load_config(None) == AnalysisConfig()

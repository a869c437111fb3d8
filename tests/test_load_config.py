import pytest

from file_indexer.errors import ConfigurationError
from file_indexer.utils.load_config import load_config


def test_load_config_from_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("embedding:\n  batch_size: 8\n", encoding="utf-8")

    assert load_config(str(path)) == {'embedding': {'batch_size': 8}}


def test_load_config_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text("indexing:\n  batch_size: 3\n", encoding="utf-8")
    monkeypatch.setenv("FILE_INDEXER_CONFIG", str(path))

    assert load_config()['indexing']['batch_size'] == 3


def test_empty_file_is_empty_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(str(path)) == {}


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_config(str(tmp_path / "absent.yaml"))


@pytest.mark.parametrize("text", ["embedding: [unclosed", "- just\n- a list\n"])
def test_invalid_yaml(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(str(path))

import pytest

from hashcrack.config import CrackerConfig, env_overrides, load_config


@pytest.fixture
def yaml_config(tmp_path):
    p = tmp_path / "hashcrack.yaml"
    p.write_text(
        "algorithm: sha256\n"
        "workers: 4\n"
        "chunk_size: 256\n"
        "count_total: true\n"
        "log_level: debug\n",
        encoding="utf-8",
    )
    return str(p)


def test_defaults():
    cfg = load_config(environ={})
    assert cfg == CrackerConfig()
    assert cfg.workers == 1
    assert cfg.timeout is None


def test_yaml_file(yaml_config):
    cfg = load_config(yaml_config, environ={})
    assert cfg.algorithm == "sha256"
    assert cfg.workers == 4
    assert cfg.chunk_size == 256
    assert cfg.count_total is True
    assert cfg.log_level == "debug"


def test_config_path_from_env(yaml_config):
    cfg = load_config(environ={"HASHCRACK_CONFIG": yaml_config})
    assert cfg.workers == 4


def test_precedence_yaml_env_overrides(yaml_config):
    env = {"HASHCRACK_WORKERS": "8", "HASHCRACK_ALGO": "md5", "HASHCRACK_TIMEOUT": "30"}
    cfg = load_config(yaml_config, overrides={"workers": 2, "algorithm": None}, environ=env)
    assert cfg.workers == 2
    assert cfg.algorithm == "md5"
    assert cfg.timeout == 30.0
    assert cfg.chunk_size == 256


def test_env_overrides_ignores_empty_values():
    assert env_overrides({"HASHCRACK_WORKERS": "", "OTHER": "x"}) == {}


def test_empty_yaml_file(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    assert load_config(str(p), environ={}) == CrackerConfig()


@pytest.mark.parametrize(
    "text",
    [
        "workers: 0\n",
        "workers: many\n",
        "algorithm: whirlpool\n",
        "bogus_key: 1\n",
        "timeout: -5\n",
        "log_level: LOUD\n",
        "- just\n- a list\n",
        "workers: [1\n",
        "algorithm: \"sha1\n",
    ],
)
def test_invalid_yaml_values(tmp_path, text):
    p = tmp_path / "bad.yaml"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(p), environ={})


def test_missing_config_file(tmp_path):
    with pytest.raises(OSError):
        load_config(str(tmp_path / "nope.yaml"), environ={})

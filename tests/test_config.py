# tests/test_config.py
import json

import pytest
import yaml

from seggt.core.config import SegGtConfig, load_config
from seggt.core.errors import ConfigError


def test_defaults():
    config = SegGtConfig()
    assert config.background_label_id == 0
    assert config.use_difficult_gt is True


def test_load_yaml_nested(tmp_path):
    path = tmp_path / "seggt.yaml"
    path.write_text(yaml.safe_dump({"seggt_param": {"background_label_id": 0, "use_difficult_gt": False}}))
    assert load_config(path) == SegGtConfig(background_label_id=0, use_difficult_gt=False)


def test_load_json_flat(tmp_path):
    path = tmp_path / "seggt.json"
    path.write_text(json.dumps({"background_label_id": 2}))
    assert load_config(path).background_label_id == 2


def test_empty_param_block_uses_defaults(tmp_path):
    path = tmp_path / "seggt.yml"
    path.write_text("seggt_param:\n")
    assert load_config(path) == SegGtConfig()


def test_unknown_keys_rejected():
    with pytest.raises(ConfigError, match="ignore_label"):
        SegGtConfig.from_dict({"ignore_label": 255})


@pytest.mark.parametrize(
    "params",
    [{"background_label_id": "0"}, {"background_label_id": True}, {"use_difficult_gt": 1}],
)
def test_wrong_types_rejected(params):
    with pytest.raises(ConfigError):
        SegGtConfig(**params)


def test_unsupported_suffix(tmp_path):
    path = tmp_path / "seggt.toml"
    path.write_text("")
    with pytest.raises(ConfigError, match="Unsupported"):
        load_config(path)


def test_non_mapping_document(tmp_path):
    path = tmp_path / "seggt.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(path)

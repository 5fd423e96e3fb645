from pathlib import Path

from pydantic import ValidationError
import pytest

from mdsmith.core.config import DEFAULT_WRAP_WIDTH, MdsmithConfig, load_config
from mdsmith.core.exceptions import ConfigError


def test_defaults() -> None:
    config = load_config()

    assert config.wrap_width == DEFAULT_WRAP_WIDTH
    assert config.markdown_extensions == ["sane_lists"]
    assert config.strip_hidden_spans is True


def test_load_yaml(tmp_path: Path) -> None:
    path = tmp_path / "mdsmith.yml"
    path.write_text("wrap_width: 72\nmarkdown_extensions: abbr, smarty\n", encoding="utf-8")

    config = load_config(path)

    assert config.wrap_width == 72
    assert config.markdown_extensions == ["abbr", "smarty"]


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")

    assert load_config(path) == MdsmithConfig()


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "bad.yml"
    path.write_text("wrap_widht: 72\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_config(path)


def test_non_mapping_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "list.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_config(path)


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "broken.yml"
    path.write_text("wrap_width: [\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(path)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Unable to read"):
        load_config(tmp_path / "absent.yml")


def test_width_lower_bound() -> None:
    with pytest.raises(ValidationError):
        MdsmithConfig(wrap_width=5)

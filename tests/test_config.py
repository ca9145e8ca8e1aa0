"""Tests for paramflow.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from paramflow.config import ConfigError, ParamflowConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, ParamflowConfig)
    assert config.root == tmp_path.resolve()
    assert config.scan.include_templates is True
    assert config.scan.template_fields == ["requestTemplate", "responseTemplate"]
    assert config.service.host == "0.0.0.0"
    assert config.service.port == 8000
    assert config.logging.verbose is False
    assert config.logging.file is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".paramflow.yml"
    config_file.write_text(
        """
scan:
  include_templates: false
  template_fields: [requestTemplate]
service:
  host: "127.0.0.1"
  port: 9100
logging:
  verbose: yes
  file: logs/paramflow.log
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.scan.include_templates is False
    assert config.scan.template_fields == ["requestTemplate"]
    assert config.service.host == "127.0.0.1"
    assert config.service.port == 9100
    assert config.logging.verbose is True
    assert config.logging.file == tmp_path.resolve() / "logs" / "paramflow.log"


def test_load_config_handles_empty_file(tmp_path: Path) -> None:
    (tmp_path / ".paramflow.yml").write_text("\n", encoding="utf-8")
    assert load_config(tmp_path).scan.include_templates is True


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".paramflow.yml").write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".paramflow.yml").write_text("scan: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_invalid_port(tmp_path: Path) -> None:
    (tmp_path / ".paramflow.yml").write_text("service:\n  port: 70000\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)

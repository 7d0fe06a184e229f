"""
Unit tests for the fieldkit package root.
Covers version metadata, the public API, logging setup and load_config().
"""

import json
import logging
import re
from pathlib import Path
from typing import Iterator
from unittest import mock

import pytest

import fieldkit


class TestVersionMetadata:
    """Version metadata and constants."""

    def test_version_format(self) -> None:
        assert re.match(r"^\d+\.\d+\.\d+$", fieldkit.__version__)

    def test_version_components(self) -> None:
        expected = f"{fieldkit.VERSION_MAJOR}.{fieldkit.VERSION_MINOR}.{fieldkit.VERSION_PATCH}"
        assert fieldkit.__version__ == expected

    def test_metadata_attributes(self) -> None:
        assert isinstance(fieldkit.__description__, str) and fieldkit.__description__
        assert isinstance(fieldkit.__license__, str) and fieldkit.__license__


class TestPublicAPI:
    """Exports of the package root."""

    def test_all_exports_exist(self) -> None:
        for name in fieldkit.__all__:
            assert hasattr(fieldkit, name), f"'{name}' is listed in __all__ but missing"

    def test_no_duplicate_exports(self) -> None:
        assert len(fieldkit.__all__) == len(set(fieldkit.__all__))

    def test_core_entry_points_exported(self) -> None:
        for name in ("FieldManager", "FieldTypeRegistry", "get_logger", "load_config", "SKIP"):
            assert name in fieldkit.__all__


class TestLogging:
    """Package logger configuration."""

    @pytest.fixture
    def bare_logger(self) -> Iterator[logging.Logger]:
        package_logger = logging.getLogger("fieldkit")
        handlers = package_logger.handlers[:]
        level = package_logger.level
        for handler in handlers:
            package_logger.removeHandler(handler)
        yield package_logger
        for handler in package_logger.handlers[:]:
            package_logger.removeHandler(handler)
        for handler in handlers:
            package_logger.addHandler(handler)
        package_logger.setLevel(level)

    def test_get_logger_prefixes_names(self) -> None:
        assert fieldkit.get_logger("my_plugin").name == "fieldkit.my_plugin"

    def test_get_logger_keeps_qualified_names(self) -> None:
        assert fieldkit.get_logger("fieldkit.pipeline").name == "fieldkit.pipeline"

    def test_get_logger_with_main(self) -> None:
        assert fieldkit.get_logger("__main__").name == "fieldkit.main"

    def test_get_logger_strips_leading_dots(self) -> None:
        assert fieldkit.get_logger(".relative").name == "fieldkit.relative"

    def test_logger_is_configured(self) -> None:
        package_logger = logging.getLogger("fieldkit")
        assert len(package_logger.handlers) >= 1
        assert package_logger.handlers[0].level == logging.WARNING

    def test_log_level_from_environment(self, bare_logger: logging.Logger) -> None:
        with mock.patch.dict("os.environ", {"FIELDKIT_LOG_LEVEL": "DEBUG"}):
            fieldkit._setup_logging()
        assert bare_logger.level == logging.DEBUG
        assert len(bare_logger.handlers) == 1

    def test_unknown_level_falls_back_to_info(self, bare_logger: logging.Logger) -> None:
        with mock.patch.dict("os.environ", {"FIELDKIT_LOG_LEVEL": "CHATTY"}):
            fieldkit._setup_logging()
        assert bare_logger.level == logging.INFO

    def test_setup_is_idempotent(self) -> None:
        package_logger = logging.getLogger("fieldkit")
        before = len(package_logger.handlers)
        fieldkit._setup_logging()
        assert len(package_logger.handlers) == before


class TestConfiguration:
    """load_config() behaviour."""

    def test_defaults_when_file_missing(self, tmp_path: Path) -> None:
        config = fieldkit.load_config(tmp_path / "absent.json")
        assert config == {"log_level": "INFO", **fieldkit.DEFAULT_OPTIONS}

    def test_file_values_override_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "fieldkit.json"
        path.write_text(json.dumps({"css_prefix": "acme", "custom_key": 1}), encoding="utf-8")

        config = fieldkit.load_config(path)

        assert config["css_prefix"] == "acme"
        assert config["custom_key"] == 1
        assert config["validate_documents"] is True

    def test_invalid_json_warns(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = tmp_path / "fieldkit.json"
        path.write_text("{invalid", encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="fieldkit"):
            config = fieldkit.load_config(path)

        assert config["css_prefix"] == "fieldkit"
        assert "invalid JSON at line 1" in caplog.text

    def test_non_object_warns(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = tmp_path / "fieldkit.json"
        path.write_text(json.dumps(["not", "a", "dict"]), encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="fieldkit"):
            config = fieldkit.load_config(path)

        assert "log_level" in config
        assert "must contain a JSON object, got list" in caplog.text

    def test_defaults_are_not_shared(self, tmp_path: Path) -> None:
        first = fieldkit.load_config(tmp_path / "absent.json")
        first["css_prefix"] = "changed"
        assert fieldkit.load_config(tmp_path / "absent.json")["css_prefix"] == "fieldkit"

    def test_config_feeds_manager(self, tmp_path: Path) -> None:
        path = tmp_path / "fieldkit.json"
        path.write_text(json.dumps({"css_prefix": "acme"}), encoding="utf-8")

        manager = fieldkit.FieldManager(options=fieldkit.load_config(path))

        assert manager.options["css_prefix"] == "acme"
        assert manager.registry.field_defaults == {"css_prefix": "acme"}

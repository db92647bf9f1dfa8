"""Unit tests for the YAML tool catalog."""

from unittest.mock import mock_open, patch

import pytest

import minimax_image.tools.catalog as catalog_module
from minimax_image.tools.catalog import (
    _parse_catalog,
    get_server_info,
    get_tool_description,
    load_catalog,
)
from minimax_image.tools.names import ALL_TOOLS, TOOL_CANCEL_PREDICTION, TOOL_GET_PREDICTION
from minimax_image.utils.exceptions import ConfigurationError

VALID_YAML = """
server:
  name: test-server
tools:
  minimax_image_01_generate: generate
  minimax_image_01_generate_async: async
  minimax_image_01_get_prediction: get
  minimax_image_01_cancel_prediction: cancel
"""


@pytest.mark.unit
class TestBundledCatalog:
    def setup_method(self):
        catalog_module._catalog = None

    def test_every_tool_described(self):
        for name in ALL_TOOLS:
            assert get_tool_description(name)

    def test_server_info(self):
        info = get_server_info()
        assert info.name == "replicate-minimax-image-01-server"
        assert "minimax_image_01_generate_async" in info.instructions

    def test_cached_after_first_load(self):
        assert load_catalog() is load_catalog()

    @pytest.mark.parametrize("name", [TOOL_GET_PREDICTION, TOOL_CANCEL_PREDICTION])
    def test_prediction_tools_state_allowed_id_characters(self, name):
        description = get_tool_description(name)
        assert "letters, digits, \"_\" and \"-\"" in description


@pytest.mark.unit
class TestCatalogValidation:
    def setup_method(self):
        catalog_module._catalog = None

    def teardown_method(self):
        catalog_module._catalog = None

    def test_valid_yaml(self):
        catalog = _parse_catalog(VALID_YAML)
        assert catalog.server.name == "test-server"
        assert catalog.server.instructions == ""
        assert catalog.tools["minimax_image_01_get_prediction"] == "get"

    def test_malformed_yaml(self):
        with pytest.raises(ConfigurationError) as exc_info:
            _parse_catalog("server:\n  name: x\n bad: [indent")
        assert "Failed to parse tools.yaml" in str(exc_info.value)

    def test_empty_yaml(self):
        with pytest.raises(ConfigurationError) as exc_info:
            _parse_catalog("")
        assert "tools.yaml is empty" in str(exc_info.value)

    def test_missing_server_section(self):
        with pytest.raises(ConfigurationError) as exc_info:
            _parse_catalog("tools:\n  minimax_image_01_generate: x\n")
        assert "Invalid tools.yaml structure" in str(exc_info.value)
        assert "server" in str(exc_info.value)

    def test_non_mapping_top_level(self):
        with pytest.raises(ConfigurationError) as exc_info:
            _parse_catalog("- just\n- a list\n")
        assert "Invalid tools.yaml structure" in str(exc_info.value)

    def test_missing_tool_description(self):
        raw = VALID_YAML.replace("  minimax_image_01_cancel_prediction: cancel\n", "")
        with pytest.raises(ConfigurationError) as exc_info:
            _parse_catalog(raw)
        assert "minimax_image_01_cancel_prediction" in str(exc_info.value)

    def test_load_catalog_reads_package_resource(self):
        with patch("importlib.resources.files") as mock_files:
            mock_file = mock_open(read_data="")
            mock_files.return_value.joinpath.return_value.open.return_value = mock_file()
            with pytest.raises(ConfigurationError):
                load_catalog()
        mock_files.assert_called_once_with("minimax_image")

    def test_missing_file(self):
        with patch("importlib.resources.files") as mock_files:
            mock_files.return_value.joinpath.return_value.open.side_effect = FileNotFoundError()
            with pytest.raises(ConfigurationError) as exc_info:
                load_catalog()
        assert "tools.yaml not found" in str(exc_info.value)

"""Tests for tools/registry.py — built-in table, JSON loading, LLM description."""
import json

import pytest

from codearts_chat.models import ToolDescriptor
from codearts_chat.tools.registry import DEFAULT_TOOLS, ToolRegistry, load_registry


class TestDefaultRegistry:
    def test_builtin_tools(self, registry):
        assert registry.names() == ["get_environments", "create_environment", "get_gitops_runtime"]
        assert len(registry) == 3

    def test_required_params_order(self, registry):
        assert registry.get("create_environment").required_params == ("name", "resource_type", "context")
        assert registry.get("get_gitops_runtime").required_params == (
            "environment_id", "resource_id", "resource_type",
        )

    def test_get_environments_has_no_required(self, registry):
        assert registry.get("get_environments").required_params == ()

    def test_lookup_is_case_sensitive(self, registry):
        assert "get_environments" in registry
        assert "Get_Environments" not in registry
        assert registry.get("GET_ENVIRONMENTS") is None

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError):
            ToolRegistry([ToolDescriptor("a"), ToolDescriptor("a")])


class TestDescribeForLlm:
    def test_lists_every_tool(self, registry):
        text = registry.describe_for_llm()
        for name in registry.names():
            assert f"- {name}:" in text

    def test_marks_required_and_optional(self, registry):
        text = registry.describe_for_llm()
        assert "name(required)" in text
        assert "description(optional)" in text

    def test_required_without_description_listed(self):
        reg = ToolRegistry([ToolDescriptor("ping", required_params=("host",))])
        assert "host(required)" in reg.describe_for_llm()

    def test_no_params(self):
        reg = ToolRegistry([ToolDescriptor("noop", description="does nothing")])
        assert reg.describe_for_llm() == "- noop: does nothing | params: none"


class TestFromMapping:
    def test_builds_descriptors(self):
        reg = ToolRegistry.from_mapping({
            "restart_app": {
                "requiredParams": ["app_id"],
                "descriptions": {"app_id": "application id"},
                "description": "Restart an application",
            }
        })
        tool = reg.get("restart_app")
        assert tool.required_params == ("app_id",)
        assert tool.param_descriptions == {"app_id": "application id"}
        assert tool.description == "Restart an application"

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="unknown schema keys"):
            ToolRegistry.from_mapping({"t": {"required": ["x"]}})

    def test_bad_required_params_rejected(self):
        with pytest.raises(ValueError):
            ToolRegistry.from_mapping({"t": {"requiredParams": "x"}})

    def test_duplicate_required_params_rejected(self):
        with pytest.raises(ValueError, match="duplicate"):
            ToolRegistry.from_mapping({"t": {"requiredParams": ["id", "id"]}})


class TestLoadRegistry:
    def test_default_without_path(self):
        assert load_registry(None).names() == [t.name for t in DEFAULT_TOOLS]

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "tools.json"
        path.write_text(json.dumps({"list_pipelines": {"requiredParams": [], "descriptions": {}}}))
        reg = load_registry(str(path))
        assert reg.names() == ["list_pipelines"]

    def test_non_object_file_rejected(self, tmp_path):
        path = tmp_path / "tools.json"
        path.write_text("[]")
        with pytest.raises(ValueError):
            load_registry(str(path))

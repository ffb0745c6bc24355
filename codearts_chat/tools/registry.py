"""Tool registry — static schema table for the CodeArts tools the assistant may call."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional

from ..models import ToolDescriptor

logger = logging.getLogger(__name__)

_SCHEMA_KEYS = {"requiredParams", "descriptions", "description"}


def _tool(name: str, description: str, required: List[str], descriptions: Dict[str, str]) -> ToolDescriptor:
    return ToolDescriptor(
        name=name,
        required_params=tuple(required),
        param_descriptions=dict(descriptions),
        description=description,
    )


DEFAULT_TOOLS: List[ToolDescriptor] = [
    _tool(
        "get_environments",
        "Get list of environments from Huawei CodeArts",
        required=[],
        descriptions={
            "offset": "pagination offset (default 0)",
            "limit": "maximum number of environments to return (default 100)",
        },
    ),
    _tool(
        "create_environment",
        "Create a new environment in Huawei CodeArts",
        required=["name", "resource_type", "context"],
        descriptions={
            "name": "environment name",
            "description": "free-text description of the environment",
            "endpoint_id": "deployment endpoint id",
            "endpoint_name": "deployment endpoint name",
            "environment_category_id": "environment category id",
            "resource_type": "resource type of the environment, e.g. CCE",
            "context": "object with region and cluster_id, e.g. {\"region\": \"ap-southeast-3\", \"cluster_id\": \"...\"}",
            "user_type": "user type flag (default 0)",
        },
    ),
    _tool(
        "get_gitops_runtime",
        "Get GitOps runtime by environment, resource type and resource id",
        required=["environment_id", "resource_id", "resource_type"],
        descriptions={
            "environment_id": "environment id",
            "resource_id": "resource id",
            "resource_type": "resource type",
        },
    ),
]


class ToolRegistry:
    """Read-only name → ToolDescriptor table, built once at start-up."""

    def __init__(self, tools: List[ToolDescriptor]):
        self._tools: Dict[str, ToolDescriptor] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[ToolDescriptor]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def describe_for_llm(self) -> str:
        """Generate tool list for the intent prompt."""
        lines = []
        for tool in self._tools.values():
            params = []
            for pname, pdesc in tool.param_descriptions.items():
                req = "required" if pname in tool.required_params else "optional"
                params.append(f"{pname}({req}): {pdesc}")
            # Required params without a description still have to be listed
            for pname in tool.required_params:
                if pname not in tool.param_descriptions:
                    params.append(f"{pname}(required)")
            params_text = ", ".join(params) if params else "none"
            lines.append(f"- {tool.name}: {tool.description} | params: {params_text}")
        return "\n".join(lines)

    @classmethod
    def from_mapping(cls, table: Mapping[str, Mapping[str, Any]]) -> "ToolRegistry":
        """Build from ``{name: {"requiredParams": [...], "descriptions": {...}}}``."""
        tools = []
        for name, spec in table.items():
            unknown = set(spec) - _SCHEMA_KEYS
            if unknown:
                raise ValueError(f"Tool {name}: unknown schema keys {sorted(unknown)}")
            required = spec.get("requiredParams", [])
            descriptions = spec.get("descriptions", {})
            if not isinstance(required, list) or not all(isinstance(p, str) for p in required):
                raise ValueError(f"Tool {name}: requiredParams must be a list of strings")
            if len(set(required)) != len(required):
                raise ValueError(f"Tool {name}: duplicate entries in requiredParams")
            if not isinstance(descriptions, dict):
                raise ValueError(f"Tool {name}: descriptions must be an object")
            tools.append(_tool(name, str(spec.get("description", "")), required, descriptions))
        return cls(tools)


def load_registry(path: Optional[str] = None) -> ToolRegistry:
    """Built-in tool table, or the JSON schema file at ``path`` when given."""
    if not path:
        registry = ToolRegistry(DEFAULT_TOOLS)
    else:
        with open(Path(path), "r", encoding="utf-8") as f:
            table = json.load(f)
        if not isinstance(table, dict):
            raise ValueError(f"Tool schema file {path} must contain a JSON object")
        registry = ToolRegistry.from_mapping(table)
    for name in registry.names():
        logger.info(f"Registered tool: {name}")
    return registry

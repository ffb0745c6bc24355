"""Tool system — registry, validator, backend clients, invoker."""
from .registry import ToolRegistry, DEFAULT_TOOLS, load_registry
from .validator import validate_params
from .backend import HttpToolBackend, UnconfiguredToolBackend, ToolBackendError, build_backend, probe_backend
from .invoker import invoke_tool

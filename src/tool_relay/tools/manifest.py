"""Capability descriptors and their local invocation handles.

A Capability is what the model sees (id, description, parameter schema). Its
Invocation is what stays local: where the function lives and how to call it.
Two calling conventions exist, each with its own Invocation subclass:

- structured: ``fn(input, shared[, chain])`` where ``input`` carries the
  model's arguments and ``shared``/``chain`` are injected
- positional: any other signature; the model's named arguments are mapped
  back onto the declared parameters in order
"""

import importlib.machinery
import importlib.util
import inspect
import logging
import sys
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, ClassVar, Mapping

logger = logging.getLogger(__name__)

STRUCTURED = "structured"
POSITIONAL = "positional"


class _FreshSourceLoader(importlib.machinery.SourceFileLoader):
    """Source loader that always compiles the current file contents."""

    def get_code(self, fullname: str):
        source = self.get_data(self.path)
        return self.source_to_code(source, self.path)


def load_module(path: Path) -> ModuleType:
    """Execute a capability module from source under a throwaway name.

    The file is compiled from its current contents on every call, so edits take
    effect immediately and no bytecode cache is consulted or written.

    Args:
        path: Path to the ``.py`` file

    Returns:
        The freshly executed module

    Raises:
        ImportError: If no module spec can be built for the path
        Exception: Anything raised while executing the module body
    """
    module_name = f"_tool_relay_capability_{uuid.uuid4().hex}"
    search_locations = [str(path.parent)] if path.name == "__init__.py" else None
    spec = importlib.util.spec_from_file_location(
        module_name,
        path,
        loader=_FreshSourceLoader(module_name, str(path)),
        submodule_search_locations=search_locations,
    )
    if spec is None:
        raise ImportError(f"Cannot build a module spec for {path}")

    module = importlib.util.module_from_spec(spec)

    # Registered only while the body runs so relative imports resolve
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    finally:
        for name in [n for n in sys.modules if n.split(".")[0] == module_name]:
            del sys.modules[name]

    return module


@dataclass(frozen=True)
class Invocation:
    """Local reference to a capability function. Never sent to the model.

    Attributes:
        source_path: File that defines the function
        callable_name: Name of the function inside that file
        parameter_order: Positional parameter names, in declaration order
        keyword_only: Keyword-only parameter names
        shared: Shared context bound at discovery time
    """

    source_path: Path
    callable_name: str
    parameter_order: tuple[str, ...] = ()
    keyword_only: tuple[str, ...] = ()
    shared: Any = field(default=None, compare=False, repr=False)

    convention: ClassVar[str] = ""

    def load(self) -> Callable[..., Any]:
        """Re-load the source module and return the function."""
        module = load_module(self.source_path)
        function = getattr(module, self.callable_name, None)
        if not callable(function):
            raise AttributeError(
                f"{self.source_path} has no callable named '{self.callable_name}'"
            )
        return function

    async def call(
        self,
        arguments: Mapping[str, Any],
        shared: Any = None,
        chain: Any = None,
    ) -> Any:
        """Invoke the function with the model-supplied arguments.

        Args:
            arguments: Decoded JSON arguments from the tool call
            shared: Per-call shared context; overrides the discovery-time one
            chain: The provider response that requested this call

        Returns:
            Whatever the function returns (awaited if it is awaitable)
        """
        function = self.load()
        context = shared if shared is not None else self.shared
        logger.debug(f"Calling {self.callable_name} from {self.source_path}")

        result = self._dispatch(function, arguments, context, chain)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _dispatch(
        self,
        function: Callable[..., Any],
        arguments: Mapping[str, Any],
        context: Any,
        chain: Any,
    ) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class StructuredInvocation(Invocation):
    """``fn(input, shared[, chain])`` calling convention."""

    convention: ClassVar[str] = STRUCTURED

    def _dispatch(self, function, arguments, context, chain):
        values = {"input": dict(arguments), "shared": context, "chain": chain}
        args = [values[name] for name in self.parameter_order]
        kwargs = {name: values[name] for name in self.keyword_only}
        return function(*args, **kwargs)


@dataclass(frozen=True)
class PositionalInvocation(Invocation):
    """Plain signature; named arguments are rebuilt into positional ones."""

    convention: ClassVar[str] = POSITIONAL

    def _dispatch(self, function, arguments, context, chain):
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        gap = False

        # Positional until the first argument the model left out
        for name in self.parameter_order:
            if name not in arguments:
                gap = True
            elif gap:
                kwargs[name] = arguments[name]
            else:
                args.append(arguments[name])

        for name in self.keyword_only:
            if name in arguments:
                kwargs[name] = arguments[name]

        ignored = set(arguments) - set(self.parameter_order) - set(self.keyword_only)
        if ignored:
            logger.debug(
                f"Ignoring unknown arguments for {self.callable_name}: {sorted(ignored)}"
            )

        return function(*args, **kwargs)


@dataclass
class Capability:
    """A function exposed to the model.

    Attributes:
        tool_id: Stable identifier derived from module content hash and name
        display_name: The function's own name
        description: Docstring description plus return guidance
        parameters: JSON schema object for the arguments
        invocation: How to call the function locally
    """

    tool_id: str
    display_name: str
    description: str
    parameters: dict[str, Any]
    invocation: Invocation

    @property
    def convention(self) -> str:
        """Calling convention of the underlying function."""
        return self.invocation.convention

    def schema(self) -> dict[str, Any]:
        """The tool descriptor sent to the model."""
        return {
            "type": "function",
            "function": {
                "name": self.tool_id,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def as_choice(self) -> dict[str, Any]:
        """A ``tool_choice`` value forcing the model to call this capability."""
        return {"type": "function", "function": {"name": self.tool_id}}

"""Static schema extraction from capability modules.

Modules are parsed with ``ast`` and never executed here. The one recognized
pattern is a top-level ``__all__`` literal naming module-level functions; each
named function that carries a docstring becomes a Capability. Undocumented
functions are skipped.
"""

import ast
import asyncio
import hashlib
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from tool_relay.tools.docstrings import DocParam, ParsedDocstring, parse_docstring
from tool_relay.tools.manifest import (
    Capability,
    Invocation,
    PositionalInvocation,
    StructuredInvocation,
)

logger = logging.getLogger(__name__)

# Tool names are limited to 64 characters by the chat-completion APIs
MAX_TOOL_ID_LENGTH = 64
MODULE_HASH_LENGTH = 32

STRUCTURED_SIGNATURES = (
    frozenset({"input", "shared"}),
    frozenset({"input", "shared", "chain"}),
)

_JSON_TYPES = {
    "str": "string",
    "string": "string",
    "bytes": "string",
    "int": "integer",
    "integer": "integer",
    "float": "number",
    "number": "number",
    "decimal": "number",
    "bool": "boolean",
    "boolean": "boolean",
    "list": "array",
    "tuple": "array",
    "set": "array",
    "frozenset": "array",
    "sequence": "array",
    "iterable": "array",
    "array": "array",
    "dict": "object",
    "mapping": "object",
    "object": "object",
    "none": "null",
    "null": "null",
}
_UNTYPED = {"any", "*"}
_JSON_DEFAULT_TYPES = (str, int, float, bool, list, tuple, dict)


@dataclass
class _SignatureParam:
    name: str
    keyword_only: bool = False
    has_default: bool = False
    default: Any = None
    annotation: str | None = None


@dataclass
class _Field:
    name: str
    type_name: str | None = None
    description: str = ""
    required: bool = True
    has_default: bool = False
    default: Any = None


def module_hash(source: str) -> str:
    """Content hash of a capability module (surrounding whitespace ignored)."""
    return hashlib.md5(source.strip().encode("utf-8")).hexdigest()


def make_tool_id(name: str, content_hash: str) -> str:
    """Derive the tool id from a function name and its module's content hash."""
    prefix = name[: MAX_TOOL_ID_LENGTH - MODULE_HASH_LENGTH - 1]
    return f"{prefix}_{content_hash}"


def extract_capabilities(
    source: str, path: Path, shared: Any = None
) -> list[Capability]:
    """Build capability descriptors from one module's source text.

    Args:
        source: Module source code
        path: Where the module lives (used for invocation and messages)
        shared: Shared context bound to every structured-convention invocation

    Returns:
        Capabilities in ``__all__`` order

    Raises:
        SyntaxError: If the source cannot be parsed
    """
    tree = ast.parse(source, filename=str(path))
    exported = _exported_names(tree)
    if not exported:
        logger.debug(f"No __all__ exports in {path}")
        return []

    functions: dict[str, ast.FunctionDef | ast.AsyncFunctionDef] = {}
    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            functions[node.name] = node

    content_hash = module_hash(source)
    capabilities: list[Capability] = []

    for name in exported:
        node = functions.get(name)
        if node is None:
            logger.debug(f"Export '{name}' in {path} is not a module-level function")
            continue

        docstring = ast.get_docstring(node)
        if not docstring:
            logger.debug(f"Skipping undocumented function '{name}' in {path}")
            continue

        capabilities.append(
            _build_capability(node, parse_docstring(docstring), path, content_hash, shared)
        )

    return capabilities


async def extract_file(path: Path, shared: Any = None) -> list[Capability]:
    """Read and extract one capability module.

    A module that cannot be read or parsed is skipped with a warning.

    Args:
        path: Path to the ``.py`` file
        shared: Shared context bound to structured-convention invocations

    Returns:
        The module's capabilities, or an empty list on failure
    """
    try:
        source = await asyncio.to_thread(path.read_text, encoding="utf-8")
        return extract_capabilities(source, path, shared=shared)
    except (
        OSError,
        UnicodeDecodeError,
        SyntaxError,
        ValueError,
        TypeError,
        RecursionError,
    ) as e:
        logger.warning(f"Skipping capability module {path}: {e}")
        return []


def _exported_names(tree: ast.Module) -> list[str]:
    names: list[str] = []
    for node in tree.body:
        if isinstance(node, ast.Assign):
            targets = node.targets
        elif isinstance(node, ast.AnnAssign) and node.value is not None:
            targets = [node.target]
        else:
            continue

        if not any(isinstance(t, ast.Name) and t.id == "__all__" for t in targets):
            continue
        if not isinstance(node.value, (ast.List, ast.Tuple)):
            continue

        # The last assignment wins, as it would at runtime
        names = []
        for element in node.value.elts:
            if isinstance(element, ast.Constant) and isinstance(element.value, str):
                if element.value not in names:
                    names.append(element.value)
    return names


def _signature(
    node: ast.FunctionDef | ast.AsyncFunctionDef,
) -> tuple[list[_SignatureParam], bool]:
    """Declared parameters, plus whether *args or **kwargs is present."""
    arguments = node.args
    positional = [*arguments.posonlyargs, *arguments.args]
    first_default = len(positional) - len(arguments.defaults)

    params: list[_SignatureParam] = []
    for index, arg in enumerate(positional):
        param = _SignatureParam(name=arg.arg, annotation=_unparse(arg.annotation))
        if index >= first_default:
            _set_default(param, arguments.defaults[index - first_default])
        params.append(param)

    for arg, default in zip(arguments.kwonlyargs, arguments.kw_defaults):
        param = _SignatureParam(
            name=arg.arg, keyword_only=True, annotation=_unparse(arg.annotation)
        )
        if default is not None:
            _set_default(param, default)
        params.append(param)

    variadic = arguments.vararg is not None or arguments.kwarg is not None
    return params, variadic


def _set_default(param: _SignatureParam, node: ast.expr) -> None:
    param.has_default = True
    try:
        param.default = ast.literal_eval(node)
    except (ValueError, TypeError, SyntaxError, MemoryError, RecursionError):
        # Not a literal; still optional, but no default is advertised
        param.default = None


def _unparse(node: ast.expr | None) -> str | None:
    return ast.unparse(node) if node is not None else None


def _build_capability(
    node: ast.FunctionDef | ast.AsyncFunctionDef,
    doc: ParsedDocstring,
    path: Path,
    content_hash: str,
    shared: Any,
) -> Capability:
    params, variadic = _signature(node)
    names = frozenset(param.name for param in params)
    order = tuple(param.name for param in params if not param.keyword_only)
    keyword_only = tuple(param.name for param in params if param.keyword_only)

    invocation: Invocation
    if not variadic and names in STRUCTURED_SIGNATURES:
        parameters = _object_schema(_structured_fields(doc))
        invocation = StructuredInvocation(
            source_path=path,
            callable_name=node.name,
            parameter_order=order,
            keyword_only=keyword_only,
            shared=shared,
        )
    else:
        parameters = _object_schema(_positional_fields(params, doc))
        invocation = PositionalInvocation(
            source_path=path,
            callable_name=node.name,
            parameter_order=order,
            keyword_only=keyword_only,
            shared=shared,
        )

    description = doc.description
    if doc.returns is not None:
        description = "\n".join(part for part in (description, str(doc.returns)) if part)

    return Capability(
        tool_id=make_tool_id(node.name, content_hash),
        display_name=node.name,
        description=description,
        parameters=parameters,
        invocation=invocation,
    )


def _structured_fields(doc: ParsedDocstring) -> list[_Field]:
    fields = []
    for param in doc.params:
        head, _, rest = param.name.partition(".")
        if head != "input" or not rest:
            continue
        fields.append(_field_from_doc(rest, param))
    return fields


def _positional_fields(
    params: list[_SignatureParam], doc: ParsedDocstring
) -> list[_Field]:
    fields = []
    for param in params:
        documented = doc.param(param.name) or DocParam(name=param.name)
        has_default = param.has_default or documented.has_default
        default = param.default if param.has_default else documented.default
        fields.append(
            _Field(
                name=param.name,
                type_name=documented.type_name or param.annotation,
                description=documented.description,
                required=not has_default and not documented.optional,
                has_default=has_default,
                default=default,
            )
        )

        prefix = f"{param.name}."
        for nested in doc.params:
            if nested.name.startswith(prefix):
                fields.append(_field_from_doc(nested.name, nested))
    return fields


def _field_from_doc(name: str, param: DocParam) -> _Field:
    return _Field(
        name=name,
        type_name=param.type_name,
        description=param.description,
        required=not param.has_default and not param.optional,
        has_default=param.has_default,
        default=param.default,
    )


def _object_schema(fields: list[_Field]) -> dict[str, Any]:
    """Group (possibly dotted) fields into a JSON schema object."""
    properties: dict[str, Any] = {}
    required: list[str] = []
    children: dict[str, list[_Field]] = {}

    for item in fields:
        head, _, rest = item.name.partition(".")
        if rest:
            children.setdefault(head, []).append(replace(item, name=rest))
            continue
        properties[head] = _property_schema(item)
        if item.required and head not in required:
            required.append(head)

    for head, nested in children.items():
        child_schema = _object_schema(nested)
        prop = properties.setdefault(head, {})
        prop["type"] = "object"
        prop["properties"] = child_schema["properties"]
        if "required" in child_schema:
            prop["required"] = child_schema["required"]

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    # An absent required list differs from an empty one
    if required:
        schema["required"] = required
    return schema


def _property_schema(item: _Field) -> dict[str, Any]:
    prop: dict[str, Any] = {}
    json_type = json_schema_type(item.type_name)
    if json_type is not None:
        prop["type"] = json_type
    if item.description:
        prop["description"] = item.description
    if item.has_default and isinstance(item.default, _JSON_DEFAULT_TYPES):
        prop["default"] = (
            list(item.default) if isinstance(item.default, tuple) else item.default
        )
    return prop


def json_schema_type(type_name: str | None) -> str | None:
    """Map a Python/docstring type name onto a JSON schema type.

    Args:
        type_name: e.g. ``"str"``, ``"list[int]"``, ``"Optional[dict]"``

    Returns:
        The JSON schema type, or None when the type is unconstrained
    """
    if not type_name:
        return None

    name = type_name.strip().strip("'\"")
    if name.lower() in _UNTYPED:
        return None

    # Unwrap Optional[X] and X | None
    for wrapper in ("Optional[", "typing.Optional["):
        if name.startswith(wrapper) and name.endswith("]"):
            name = name[len(wrapper) : -1]
    alternatives = [part.strip() for part in name.split("|")]
    alternatives = [part for part in alternatives if part.lower() not in {"none", "null"}]
    if not alternatives:
        return "null"
    if len(alternatives) > 1:
        # Mixed unions stay unconstrained
        return None
    return _base_type(alternatives[0])


def _base_type(name: str) -> str | None:
    base = name.split("[", 1)[0].rsplit(".", 1)[-1].strip().lower()
    if base in _UNTYPED:
        return None
    return _JSON_TYPES.get(base, "string")

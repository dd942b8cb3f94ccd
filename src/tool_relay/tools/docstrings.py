"""Docstring parsing for capability functions.

Capability functions describe themselves through their docstrings. This module
turns a cleaned docstring into a description, a list of documented parameters
and an optional return description. Two layouts are understood:

- Google style (``Args:`` / ``Returns:`` sections), the layout used across
  this codebase
- reST field lists (``:param name:``, ``:type name:``, ``:returns:``)

Dotted parameter names such as ``input.name`` are kept verbatim; grouping them
into nested object schemas is the extractor's job.
"""

import ast
import re
from dataclasses import dataclass, field
from typing import Any

# Google style section headers, normalized to lower case
_ARGS_SECTIONS = {
    "args",
    "arguments",
    "parameters",
    "params",
    "keyword args",
    "keyword arguments",
}
_RETURNS_SECTIONS = {"returns", "return", "yields", "yield"}
_OTHER_SECTIONS = {
    "raises",
    "raise",
    "example",
    "examples",
    "note",
    "notes",
    "attributes",
    "see also",
    "todo",
    "warning",
    "warnings",
    "references",
}

_SECTION_HEADER = re.compile(r"^(?P<title>[A-Za-z][A-Za-z ]*):\s*$")
_GOOGLE_ARG = re.compile(
    r"^(?P<name>\*{0,2}[A-Za-z_][\w.]*)\s*(?:\((?P<type>.*?)\))?\s*:\s*(?P<desc>.*)$"
)
_GOOGLE_RETURN = re.compile(
    r"^(?P<type>[A-Za-z_][\w.\[\]]*(?:\s*[|,]\s*[A-Za-z_][\w.\[\]]*)*)\s*:\s*(?P<desc>.*)$"
)
_OPTIONAL_SUFFIX = re.compile(r",?\s*optional\s*$", re.IGNORECASE)
_DEFAULT_CLAUSE = re.compile(r"[Dd]efaults?\s+(?:to|is)\s+(?P<value>.+?)\.?\s*$")

_REST_FIELD = re.compile(r"^:(?P<tag>\w+)(?:\s+(?P<arg>[^:]+))?:\s*(?P<desc>.*)$")
_REST_PARAM_TAGS = {"param", "parameter", "arg", "argument", "key", "keyword"}
_REST_TYPE_TAGS = {"type"}
_REST_RETURN_TAGS = {"return", "returns"}
_REST_RTYPE_TAGS = {"rtype"}


@dataclass
class DocParam:
    """A parameter documented in a docstring."""

    name: str
    type_name: str | None = None
    description: str = ""
    optional: bool = False
    has_default: bool = False
    default: Any = None


@dataclass
class DocReturns:
    """The documented return value of a function."""

    type_name: str | None = None
    description: str = ""

    def __str__(self) -> str:
        if self.type_name and self.description:
            return f"Returns ({self.type_name}): {self.description}"
        if self.description:
            return f"Returns: {self.description}"
        return f"Returns: {self.type_name}"


@dataclass
class ParsedDocstring:
    """Structured view of a function docstring."""

    description: str = ""
    params: list[DocParam] = field(default_factory=list)
    returns: DocReturns | None = None

    def param(self, name: str) -> DocParam | None:
        """Get a documented parameter by (possibly dotted) name."""
        for param in self.params:
            if param.name == name:
                return param
        return None


def parse_docstring(text: str | None) -> ParsedDocstring:
    """Parse a cleaned docstring.

    Args:
        text: Docstring text as returned by ``ast.get_docstring``

    Returns:
        ParsedDocstring with description, parameters and return guidance
    """
    if not text or not text.strip():
        return ParsedDocstring()

    lines = text.expandtabs().splitlines()
    if any(_REST_FIELD.match(line.strip()) for line in lines):
        return _parse_rest(lines)
    return _parse_google(lines)


def _parse_google(lines: list[str]) -> ParsedDocstring:
    description: list[str] = []
    sections: list[tuple[str, list[str]]] = []

    for line in lines:
        header = _SECTION_HEADER.match(line)
        if header and not line[:1].isspace():
            title = header.group("title").strip().lower()
            if title in _ARGS_SECTIONS | _RETURNS_SECTIONS | _OTHER_SECTIONS:
                sections.append((title, []))
                continue
        if sections:
            sections[-1][1].append(line)
        else:
            description.append(line)

    result = ParsedDocstring(description=_join_paragraphs(description))

    for title, body in sections:
        if title in _ARGS_SECTIONS:
            for name_line, continuation in _section_entries(body):
                param = _google_param(name_line, continuation)
                if param is not None:
                    result.params.append(param)
        elif title in _RETURNS_SECTIONS and result.returns is None:
            result.returns = _google_returns(body)

    return result


def _section_entries(body: list[str]) -> list[tuple[str, list[str]]]:
    """Split an indented section body into (entry line, continuation lines)."""
    content = [line for line in body if line.strip()]
    if not content:
        return []
    base_indent = min(len(line) - len(line.lstrip()) for line in content)

    entries: list[tuple[str, list[str]]] = []
    for line in content:
        indent = len(line) - len(line.lstrip())
        if indent <= base_indent or not entries:
            entries.append((line.strip(), []))
        else:
            entries[-1][1].append(line.strip())
    return entries


def _google_param(entry: str, continuation: list[str]) -> DocParam | None:
    match = _GOOGLE_ARG.match(entry)
    if match is None:
        return None

    name = match.group("name").lstrip("*")
    type_name = (match.group("type") or "").strip() or None
    optional = False
    if type_name and _OPTIONAL_SUFFIX.search(type_name):
        optional = True
        type_name = _OPTIONAL_SUFFIX.sub("", type_name).strip() or None

    description = " ".join([match.group("desc").strip(), *continuation]).strip()
    param = DocParam(
        name=name,
        type_name=type_name,
        description=_strip_dash(description),
        optional=optional,
    )
    _apply_default_clause(param)
    return param


def _google_returns(body: list[str]) -> DocReturns | None:
    content = [line.strip() for line in body if line.strip()]
    if not content:
        return None
    match = _GOOGLE_RETURN.match(content[0])
    if match:
        description = " ".join([match.group("desc").strip(), *content[1:]]).strip()
        return DocReturns(type_name=match.group("type").strip(), description=description)
    return DocReturns(description=" ".join(content))


def _parse_rest(lines: list[str]) -> ParsedDocstring:
    description: list[str] = []
    fields: list[tuple[str, str | None, list[str]]] = []

    for line in lines:
        stripped = line.strip()
        match = _REST_FIELD.match(stripped)
        if match:
            fields.append(
                (match.group("tag").lower(), match.group("arg"), [match.group("desc")])
            )
        elif fields and stripped:
            fields[-1][2].append(stripped)
        elif not fields:
            description.append(line)

    result = ParsedDocstring(description=_join_paragraphs(description))
    types: dict[str, str] = {}
    return_type: str | None = None
    return_description: str | None = None

    for tag, arg, text_lines in fields:
        text = " ".join(part.strip() for part in text_lines).strip()
        if tag in _REST_PARAM_TAGS and arg:
            words = arg.split()
            name = words[-1].lstrip("*")
            type_name = " ".join(words[:-1]) or None
            param = DocParam(name=name, type_name=type_name, description=_strip_dash(text))
            _apply_default_clause(param)
            result.params.append(param)
        elif tag in _REST_TYPE_TAGS and arg:
            types[arg.strip().lstrip("*")] = text
        elif tag in _REST_RETURN_TAGS:
            return_description = text
        elif tag in _REST_RTYPE_TAGS:
            return_type = text

    for param in result.params:
        if param.type_name is None and param.name in types:
            param.type_name = types[param.name]
        if param.type_name and _OPTIONAL_SUFFIX.search(param.type_name):
            param.optional = True
            param.type_name = _OPTIONAL_SUFFIX.sub("", param.type_name).strip() or None

    if return_description is not None or return_type is not None:
        result.returns = DocReturns(
            type_name=return_type or None, description=return_description or ""
        )
    return result


def _apply_default_clause(param: DocParam) -> None:
    """Read a trailing ``Defaults to X.`` clause into the parameter default."""
    match = _DEFAULT_CLAUSE.search(param.description)
    if match is None:
        return
    param.has_default = True
    param.default = _literal(match.group("value"))


def _literal(raw: str) -> Any:
    value = raw.strip().strip("`")
    try:
        return ast.literal_eval(value)
    except (ValueError, TypeError, SyntaxError, MemoryError, RecursionError):
        pass
    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"none", "null"}:
        return None
    return value


def _strip_dash(text: str) -> str:
    return re.sub(r"^-\s*", "", text).strip()


def _join_paragraphs(lines: list[str]) -> str:
    return "\n".join(line.rstrip() for line in lines).strip()

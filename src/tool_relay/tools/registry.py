"""Capability discovery across directory trees.

Each root directory is scanned one level deep. Python files directly inside it
are capability modules. A subdirectory contributes exactly one module, its
entry file, and only if it has one; the entry file is trusted to gather its own
directory's exports.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator

from tool_relay.tools.extractor import extract_file
from tool_relay.tools.manifest import Capability, Invocation

logger = logging.getLogger(__name__)

# Checked in this order; the first one present wins
ENTRY_FILE_NAMES = ("__init__.py", "main.py", "index.py", "export.py", "expose.py")


class CapabilityRegistry:
    """Flat, id-keyed collection of discovered capabilities.

    Capabilities sharing a tool id come from identical source and collapse to
    one entry; the first one added is kept.
    """

    def __init__(self, capabilities: Iterable[Capability] = ()) -> None:
        self._capabilities: dict[str, Capability] = {}
        for capability in capabilities:
            self.add(capability)

    def add(self, capability: Capability) -> bool:
        """Add a capability.

        Returns:
            False if a capability with the same tool id was already present
        """
        if capability.tool_id in self._capabilities:
            return False
        self._capabilities[capability.tool_id] = capability
        return True

    def get(self, tool_id: str) -> Capability | None:
        return self._capabilities.get(tool_id)

    @property
    def capabilities(self) -> list[Capability]:
        return list(self._capabilities.values())

    @property
    def lookup(self) -> dict[str, Invocation]:
        """Tool id to invocation table used when the model calls a tool."""
        return {
            tool_id: capability.invocation
            for tool_id, capability in self._capabilities.items()
        }

    def tools(self) -> list[dict[str, Any]]:
        """Model-facing tool descriptors."""
        return [capability.schema() for capability in self._capabilities.values()]

    def __iter__(self) -> Iterator[Capability]:
        return iter(list(self._capabilities.values()))

    def __len__(self) -> int:
        return len(self._capabilities)

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._capabilities


def entry_file(directory: Path) -> Path | None:
    """Get a subdirectory's entry file, if it has one."""
    for name in ENTRY_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def find_capability_modules(root: Path) -> list[Path]:
    """List the capability modules under one root.

    Args:
        root: A directory to scan, or a single ``.py`` file

    Returns:
        Module paths in sorted order; empty if the root does not exist
    """
    if root.is_file():
        return [root] if root.suffix == ".py" else []
    if not root.is_dir():
        logger.warning(f"Capability directory not found: {root}")
        return []

    modules: list[Path] = []
    for child in sorted(root.iterdir()):
        if child.name.startswith("."):
            continue
        if child.is_dir():
            entry = entry_file(child)
            if entry is not None:
                modules.append(entry)
        elif child.suffix == ".py":
            modules.append(child)
    return modules


async def discover(
    paths: str | Path | Iterable[str | Path],
    shared: Any = None,
) -> CapabilityRegistry:
    """Discover capabilities under one or more roots.

    Discovery is not cached: every call re-reads the modules so that edits
    are picked up immediately.

    Args:
        paths: Root directory (or directories, or single module files)
        shared: Shared context bound to every structured-convention capability

    Returns:
        CapabilityRegistry with every documented, exported function found
    """
    roots = [paths] if isinstance(paths, (str, Path)) else list(paths)
    registry = CapabilityRegistry()

    for root in roots:
        modules = await asyncio.to_thread(find_capability_modules, Path(root))
        for module_path in modules:
            for capability in await extract_file(module_path, shared=shared):
                if not registry.add(capability):
                    logger.debug(
                        f"Capability {capability.tool_id} from {module_path} "
                        "already discovered"
                    )

    logger.info(f"Discovered {len(registry)} capabilities in {len(roots)} root(s)")
    return registry

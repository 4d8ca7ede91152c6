"""Component interface description.

Parses the WIT text printed by ``wasm-tools component wit`` into the
world's imports and exports. Only items declared directly in the world
body are collected; nested interface bodies are skipped.

Example input::

    package root:component;

    world root {
      import wasi:io/streams@0.2.0;
      export read-file: func(path: string) -> string;
    }
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

_WORLD_RE = re.compile(r"^(?:default\s+)?world\s+(?P<name>[%\w:/@.-]+)\s*\{")
_ITEM_RE = re.compile(r"^(?P<direction>import|export)\s+(?P<rest>.+?)\s*[;{]?\s*$")
_COMMENT_RE = re.compile(r"//.*$")


class ItemKind(str, Enum):
    """Kind of a world import or export."""

    FUNC = "func"
    INTERFACE = "interface"
    OTHER = "other"


class InterfaceItem(BaseModel):
    """One import or export of a component world.

    Attributes:
        name: Item name (``read-file``) or interface path (``wasi:io/streams@0.2.0``)
        kind: Whether the item is a function, an interface, or something else
        signature: Text after the colon, empty for interface references
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Item name")
    kind: ItemKind = Field(..., description="Item kind")
    signature: str = Field(default="", description="Declared type")

    def describe(self) -> str:
        """One-line rendering for console output."""
        if self.signature:
            return f"{self.name}: {self.signature}"
        return self.name


class ComponentInterface(BaseModel):
    """Declared interface of a component artifact.

    Attributes:
        world: Name of the component's world
        imports: Items the component imports
        exports: Items the component exports
        wit: Raw WIT text as printed by the introspection tool
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    world: str = Field(..., min_length=1, description="World name")
    imports: list[InterfaceItem] = Field(default_factory=list, description="Imports")
    exports: list[InterfaceItem] = Field(default_factory=list, description="Exports")
    wit: str = Field(default="", description="Raw WIT text")

    @property
    def export_names(self) -> list[str]:
        """Names of all exports, in declaration order."""
        return [item.name for item in self.exports]

    @property
    def import_names(self) -> list[str]:
        """Names of all imports, in declaration order."""
        return [item.name for item in self.imports]


def _parse_item(rest: str) -> InterfaceItem:
    if ": " in rest:
        name, signature = rest.split(": ", 1)
        signature = signature.strip()
        if signature.startswith(("func", "async func")):
            kind = ItemKind.FUNC
        elif signature.startswith("interface"):
            kind = ItemKind.INTERFACE
        else:
            kind = ItemKind.OTHER
        return InterfaceItem(name=name.strip().lstrip("%"), kind=kind, signature=signature)
    return InterfaceItem(name=rest.strip(), kind=ItemKind.INTERFACE)


def parse_wit(text: str) -> ComponentInterface:
    """Parse WIT text into a ComponentInterface.

    The first world in the text is used.

    Args:
        text: Output of the introspection tool.

    Returns:
        ComponentInterface with the world's imports and exports.

    Raises:
        ValueError: If the text is empty, has no world, or the world
            is never closed.
    """
    if not text.strip():
        raise ValueError("introspection produced no output")

    world: str | None = None
    imports: list[InterfaceItem] = []
    exports: list[InterfaceItem] = []
    depth = 0
    closed = False

    for raw_line in text.splitlines():
        line = _COMMENT_RE.sub("", raw_line).strip()
        if not line:
            continue

        if world is None:
            match = _WORLD_RE.match(line)
            if match and depth == 0:
                world = match.group("name").lstrip("%")
                depth = line.count("{") - line.count("}")
                if depth <= 0:
                    closed = True
                    break
                continue
        elif depth == 1:
            match = _ITEM_RE.match(line)
            if match:
                item = _parse_item(match.group("rest"))
                if match.group("direction") == "import":
                    imports.append(item)
                else:
                    exports.append(item)

        depth += line.count("{") - line.count("}")
        if world is not None and depth <= 0:
            closed = True
            break

    if world is None:
        raise ValueError("no world declaration found in interface description")
    if not closed:
        raise ValueError(f"world '{world}' is not terminated")

    return ComponentInterface(world=world, imports=imports, exports=exports, wit=text)

"""Thin adapter over the PyYAML node graph.

The parser only needs to know whether a node is a scalar, a mapping or null, and
to look up named children. Working on composed nodes instead of ``safe_load``
output keeps every scalar as its original text, so ``version: 1.10`` stays
``"1.10"`` rather than becoming a float.
"""

import yaml

from .errors import MalformedManifest

NULL_TAG = "tag:yaml.org,2002:null"
MERGE_TAG = "tag:yaml.org,2002:merge"


class DocumentNode:
    """A read-only view of one YAML node."""

    __slots__ = ("_node",)

    def __init__(self, node: yaml.Node | None):
        self._node = node

    @classmethod
    def from_text(cls, text: str) -> "DocumentNode":
        try:
            return cls(yaml.compose(text, Loader=yaml.SafeLoader))
        except yaml.YAMLError as e:
            raise MalformedManifest(f"Invalid YAML: {e}") from e

    @property
    def is_null(self) -> bool:
        if self._node is None:
            return True
        return isinstance(self._node, yaml.ScalarNode) and self._node.tag == NULL_TAG

    @property
    def is_scalar(self) -> bool:
        return isinstance(self._node, yaml.ScalarNode) and not self.is_null

    @property
    def is_mapping(self) -> bool:
        return isinstance(self._node, yaml.MappingNode)

    @property
    def is_sequence(self) -> bool:
        return isinstance(self._node, yaml.SequenceNode)

    @property
    def content(self) -> str:
        """The source text of a scalar node."""
        if not self.is_scalar:
            raise MalformedManifest(f"Expected a scalar but found {self.describe()}")
        return self._node.value

    @property
    def line(self) -> int | None:
        if self._node is None:
            return None
        return self._node.start_mark.line + 1

    def items(self) -> list[tuple[str, "DocumentNode"]]:
        """Key/value pairs of a mapping, in document order, duplicates included.

        Merge keys (``<<: *anchor``) are expanded ahead of the mapping's own keys,
        and keys written explicitly in the mapping override merged ones.
        """
        if not self.is_mapping:
            raise MalformedManifest(f"Expected a mapping but found {self.describe()}")

        merged = []
        pairs = []
        for key_node, value_node in self._node.value:
            if key_node.tag == MERGE_TAG:
                merged.extend(DocumentNode(value_node)._merge_source())
                continue
            key = DocumentNode(key_node)
            if not key.is_scalar:
                raise MalformedManifest(f"Mapping keys must be scalars (line {key.line})")
            pairs.append((key.content, DocumentNode(value_node)))

        explicit = {key for key, _ in pairs}
        return [(key, value) for key, value in merged if key not in explicit] + pairs

    def _merge_source(self) -> list[tuple[str, "DocumentNode"]]:
        # In a sequence of merged mappings the earlier mapping wins.
        if self.is_mapping:
            return self.items()
        if not self.is_sequence:
            raise MalformedManifest(
                f"Merge key expects a mapping but found {self.describe()} (line {self.line})"
            )

        seen = set()
        pairs = []
        for element in self.elements():
            if not element.is_mapping:
                raise MalformedManifest(
                    f"Merge key expects mappings but found {element.describe()} (line {element.line})"
                )
            for key, value in element.items():
                if key not in seen:
                    seen.add(key)
                    pairs.append((key, value))
        return pairs

    def elements(self) -> list["DocumentNode"]:
        if not self.is_sequence:
            raise MalformedManifest(f"Expected a sequence but found {self.describe()}")
        return [DocumentNode(node) for node in self._node.value]

    def get(self, name: str) -> "DocumentNode | None":
        """Return the child named ``name`` of a mapping, or None if absent.

        A key that is present with a null value returns a null node, not None.
        """
        if not self.is_mapping:
            return None

        found = None
        for key, value in self.items():
            if key == name:
                found = value
        return found

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def scalar(self, name: str) -> str | None:
        """Return the text of the scalar child ``name``; None if absent or null."""
        child = self.get(name)
        if child is None or child.is_null:
            return None
        return child.content

    def describe(self) -> str:
        if self.is_null:
            return "null"
        if self.is_scalar:
            return f"scalar '{self._node.value}'"
        if self.is_mapping:
            return "mapping"
        if self.is_sequence:
            return "sequence"
        return type(self._node).__name__

    def fragment(self) -> str:
        """A compact single-line rendering for error messages."""
        if self.is_null:
            return "null"
        if self.is_scalar:
            return repr(self._node.value)
        if self.is_mapping:
            inner = ", ".join(f"{key}: {value.fragment()}" for key, value in self.items())
            return "{" + inner + "}"
        if self.is_sequence:
            return "[" + ", ".join(node.fragment() for node in self.elements()) + "]"
        return self.describe()

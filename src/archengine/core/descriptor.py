"""Descriptor tree: the result of discovery and the input of execution."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from archengine.core.errors import DiscoveryConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from archengine.core.configuration import AnalysisConfiguration
    from archengine.core.unique_id import UniqueId
    from archengine.discovery.reflection import RuleMember


class NodeType(enum.Enum):
    CONTAINER = "container"
    TEST = "test"


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClassSource:
    """Source of a class container. Classes carry no file position."""

    class_name: str


@dataclass(frozen=True)
class FieldSource:
    class_name: str
    field_name: str


@dataclass(frozen=True)
class MethodSource:
    class_name: str
    method_name: str
    parameter_type_names: str  # comma separated, fully qualified


Source = Union[ClassSource, FieldSource, MethodSource]


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

RESERVED_TAG_CHARACTERS: frozenset[str] = frozenset(",()&|!")


@dataclass(frozen=True, order=True)
class Tag:
    """A validated tag name used to select or group rules."""

    name: str

    def __post_init__(self) -> None:
        problem = tag_problem(self.name)
        if problem is not None:
            msg = f"Invalid tag {self.name!r}: {problem}"
            raise DiscoveryConfigurationError(msg)

    def __str__(self) -> str:
        return self.name


def tag_problem(name: str) -> str | None:
    """Return why *name* is not a valid tag, or None when it is."""
    if not name or not name.strip():
        return "must not be blank"
    for char in name:
        if char.isspace():
            return "must not contain whitespace"
        if not char.isprintable():
            return "must not contain control characters"
        if char in RESERVED_TAG_CHARACTERS:
            return f"must not contain reserved character {char!r}"
    return None


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


class DescriptorNode:
    """One node of the discovered tree.

    Children are keyed by unique id, so a node can never hold two children
    with the same id. Every node keeps a reference to its parent, so a node
    held on its own still reports its ancestors and effective tags.
    """

    def __init__(
        self,
        unique_id: UniqueId,
        display_name: str,
        node_type: NodeType,
        *,
        source: Source | None = None,
        declared_tags: Iterable[Tag] = (),
        owner: type | None = None,
        configuration: AnalysisConfiguration | None = None,
        rule: RuleMember | None = None,
        ignored_reason: str | None = None,
    ) -> None:
        self.unique_id = unique_id
        self.display_name = display_name
        self.type = node_type
        self.source = source
        self.declared_tags: frozenset[Tag] = frozenset(declared_tags)
        self.owner = owner
        self.configuration = configuration
        self.rule = rule
        self.ignored_reason = ignored_reason
        self._children: dict[UniqueId, DescriptorNode] = {}
        self._parent: DescriptorNode | None = None

    def __repr__(self) -> str:
        return f"DescriptorNode({self.unique_id}, {self.type.name})"

    # -- structure ----------------------------------------------------------

    @property
    def parent(self) -> DescriptorNode | None:
        return self._parent

    @property
    def children(self) -> tuple[DescriptorNode, ...]:
        return tuple(self._children.values())

    @property
    def is_root(self) -> bool:
        return self._parent is None

    @property
    def is_container(self) -> bool:
        return self.type is NodeType.CONTAINER

    @property
    def is_test(self) -> bool:
        return self.type is NodeType.TEST

    def add_child(self, child: DescriptorNode) -> None:
        if self.is_test:
            msg = f"Test node {self.unique_id} cannot have children"
            raise ValueError(msg)
        if child.unique_id in self._children:
            msg = f"Duplicate child {child.unique_id} under {self.unique_id}"
            raise ValueError(msg)
        child._parent = self
        self._children[child.unique_id] = child

    def remove_child(self, child: DescriptorNode) -> None:
        if self._children.pop(child.unique_id, None) is not None:
            child._parent = None

    def copy(self) -> DescriptorNode:
        """Return a detached copy of this node without children."""
        return DescriptorNode(
            self.unique_id,
            self.display_name,
            self.type,
            source=self.source,
            declared_tags=self.declared_tags,
            owner=self.owner,
            configuration=self.configuration,
            rule=self.rule,
            ignored_reason=self.ignored_reason,
        )

    # -- traversal ----------------------------------------------------------

    def walk(self) -> Iterator[DescriptorNode]:
        """Yield this node and all descendants, depth first, parents before children."""
        yield self
        for child in self._children.values():
            yield from child.walk()

    def descendants(self) -> list[DescriptorNode]:
        return [node for node in self.walk() if node is not self]

    def leaves(self) -> list[DescriptorNode]:
        return [node for node in self.walk() if not node._children]

    def find(self, unique_id: UniqueId) -> DescriptorNode | None:
        if unique_id == self.unique_id:
            return self
        if not self.unique_id.is_prefix_of(unique_id):
            return None
        for child in self._children.values():
            found = child.find(unique_id)
            if found is not None:
                return found
        return None

    # -- tags ---------------------------------------------------------------

    @property
    def tags(self) -> frozenset[Tag]:
        """Effective tags: own declared tags plus those of every ancestor."""
        result: set[Tag] = set(self.declared_tags)
        node = self.parent
        while node is not None:
            result.update(node.declared_tags)
            node = node.parent
        return frozenset(result)

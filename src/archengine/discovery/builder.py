"""Structural tree build: one container per rule class, one test per rule member."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from archengine.core.classes import qualified_name
from archengine.core.descriptor import ClassSource, DescriptorNode, NodeType
from archengine.core.errors import DiscoveryConfigurationError
from archengine.core.unique_id import CLASS_SEGMENT_TYPE, FIELD_SEGMENT_TYPE
from archengine.discovery.reflection import RuleLibrary

if TYPE_CHECKING:
    from collections.abc import Iterable

    from archengine.core.configuration import AnalysisConfiguration
    from archengine.core.unique_id import UniqueId
    from archengine.discovery.reflection import FieldRule, MemberReflector, MethodRule

logger = logging.getLogger(__name__)

ENGINE_DISPLAY_NAME = "ArchEngine"


class DescriptorTreeBuilder:
    """Build the complete tree for a set of root classes, independent of what was requested.

    Ids follow the declaration structure:

    * root class   ``[engine:e]/[class:pkg.Rules]``
    * rule field   ``.../[field:name]``
    * rule method  ``.../[method:name]``
    * library      ``.../[field:name]/[class:pkg.Library]`` (one container node)

    Rule members are reflected, and therefore validated, while the tree is
    built, so a malformed member aborts discovery of its root class with
    :class:`DiscoveryConfigurationError`.
    """

    def __init__(self, reflector: MemberReflector) -> None:
        self._reflector = reflector

    def build(self, engine_id: UniqueId, root_classes: Iterable[type]) -> DescriptorNode:
        root = DescriptorNode(engine_id, ENGINE_DISPLAY_NAME, NodeType.CONTAINER)
        for cls in root_classes:
            root.add_child(self.build_class(engine_id, cls))
        return root

    def build_class(self, parent_id: UniqueId, cls: type) -> DescriptorNode:
        configuration = self._reflector.configuration_of(cls)
        name = qualified_name(cls)
        node = DescriptorNode(
            parent_id.append(CLASS_SEGMENT_TYPE, name),
            cls.__name__,
            NodeType.CONTAINER,
            source=ClassSource(name),
            declared_tags=self._reflector.class_tags(cls),
            owner=cls,
            configuration=configuration,
            ignored_reason=self._reflector.class_ignored_reason(cls),
        )
        self._add_members(node, cls, cls, configuration, (cls,))
        logger.debug("Built %d nodes for %s", len(node.descendants()) + 1, name)
        return node

    def _add_members(
        self,
        parent: DescriptorNode,
        definition: type,
        owner: type,
        configuration: AnalysisConfiguration,
        chain: tuple[type, ...],
    ) -> None:
        for member in self._reflector.rule_members(definition):
            if isinstance(member, RuleLibrary):
                parent.add_child(self._library_node(parent, member, owner, configuration, chain))
            else:
                parent.add_child(self._rule_node(parent, member, owner, configuration))

    def _library_node(
        self,
        parent: DescriptorNode,
        member: RuleLibrary,
        owner: type,
        configuration: AnalysisConfiguration,
        chain: tuple[type, ...],
    ) -> DescriptorNode:
        library = member.definition
        if library in chain:
            cycle = " -> ".join(cls.__name__ for cls in (*chain, library))
            msg = f"Rule library {member.declaring_class.__name__}.{member.name} is cyclic: {cycle}"
            raise DiscoveryConfigurationError(msg)

        name = qualified_name(library)
        node = DescriptorNode(
            parent.unique_id.append(FIELD_SEGMENT_TYPE, member.name).append(
                CLASS_SEGMENT_TYPE, name
            ),
            library.__name__,
            NodeType.CONTAINER,
            source=ClassSource(name),
            declared_tags=member.tags | self._reflector.class_tags(library),
            owner=owner,
            configuration=configuration,
            ignored_reason=(
                member.ignored_reason
                if member.ignored_reason is not None
                else self._reflector.class_ignored_reason(library)
            ),
        )
        self._add_members(node, library, owner, configuration, (*chain, library))
        return node

    @staticmethod
    def _rule_node(
        parent: DescriptorNode,
        member: FieldRule | MethodRule,
        owner: type,
        configuration: AnalysisConfiguration,
    ) -> DescriptorNode:
        return DescriptorNode(
            parent.unique_id.append(member.segment_type, member.name),
            member.name,
            NodeType.TEST,
            source=member.source,
            declared_tags=member.tags,
            owner=owner,
            configuration=configuration,
            rule=member,
            ignored_reason=member.ignored_reason,
        )

"""Requested-subset filter over a fully built descriptor tree."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from archengine.core.descriptor import DescriptorNode
    from archengine.core.unique_id import UniqueId

logger = logging.getLogger(__name__)


def prune(root: DescriptorNode, requested_ids: Iterable[UniqueId]) -> DescriptorNode:
    """Return a copy of *root* holding only what *requested_ids* asks for.

    A requested node is kept with everything below it; its ancestors are kept
    so the path from the root stays intact; everything else is dropped. The
    root itself is always kept. Requested ids that match no node are logged
    and ignored, so they never keep an empty ancestor alive.

    *root* is left untouched.
    """
    matched: set[UniqueId] = set()
    for unique_id in set(requested_ids):
        if root.find(unique_id) is None:
            logger.warning("Requested id %s does not match any discovered rule", unique_id)
        else:
            matched.add(unique_id)

    result = root.copy()
    _copy_requested(root, result, matched)
    return result


def _copy_requested(source: DescriptorNode, target: DescriptorNode, matched: set[UniqueId]) -> None:
    for child in source.children:
        child_id = child.unique_id
        if any(requested.is_prefix_of(child_id) for requested in matched):
            target.add_child(_copy_subtree(child))
        elif any(child_id.is_prefix_of(requested) for requested in matched):
            kept = child.copy()
            target.add_child(kept)
            _copy_requested(child, kept, matched)


def _copy_subtree(node: DescriptorNode) -> DescriptorNode:
    copied = node.copy()
    for child in node.children:
        copied.add_child(_copy_subtree(child))
    return copied

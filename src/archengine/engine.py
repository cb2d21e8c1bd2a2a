"""Engine facade: discovery of rule classes and execution of the discovered tree."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from archengine.core.unique_id import UniqueId
from archengine.discovery.builder import DescriptorTreeBuilder
from archengine.discovery.pruning import prune
from archengine.discovery.reflection import InspectReflector
from archengine.discovery.selectors import SelectorResolver
from archengine.execution.cache import ClassCache
from archengine.execution.coordinator import ExecutionCoordinator
from archengine.execution.evaluator import DefaultRuleEvaluator
from archengine.execution.importer import ModuleClassImporter

if TYPE_CHECKING:
    from archengine.core.descriptor import DescriptorNode
    from archengine.discovery.reflection import MemberReflector
    from archengine.discovery.selectors import DiscoveryRequest
    from archengine.execution.cache import ClassImporter
    from archengine.execution.coordinator import ExecutionListener
    from archengine.execution.evaluator import RuleEvaluator

logger = logging.getLogger(__name__)

ENGINE_ID = "archengine"


@dataclass
class ExecutionRequest:
    """A discovered tree to run, where to report, and how to stop early."""

    root: DescriptorNode
    listener: ExecutionListener
    configuration_parameters: dict[str, str] = field(default_factory=dict)
    cancellation: threading.Event | None = None


class ArchTestEngine:
    """Discover rule classes into a descriptor tree and execute it.

    All collaborators are injectable; by default the engine reflects markers
    with :class:`InspectReflector`, imports classes with
    :class:`ModuleClassImporter` and evaluates rules with
    :class:`DefaultRuleEvaluator`. The engine owns one :class:`ClassCache`
    across executions; each root subtree clears its own entries when done.
    """

    unique_id = ENGINE_ID

    def __init__(
        self,
        reflector: MemberReflector | None = None,
        importer: ClassImporter | None = None,
        evaluator: RuleEvaluator | None = None,
        cache: ClassCache | None = None,
    ) -> None:
        self.reflector: MemberReflector = reflector or InspectReflector()
        self.cache = cache or ClassCache(importer or ModuleClassImporter())
        self.evaluator: RuleEvaluator = evaluator or DefaultRuleEvaluator()

    def discover(
        self, request: DiscoveryRequest, engine_id: UniqueId | None = None
    ) -> DescriptorNode:
        """Resolve *request*, build the full tree of every root class, then prune it.

        Raises :class:`DiscoveryConfigurationError` when a rule member is
        malformed; nothing is executed in that case.
        """
        engine_id = engine_id or UniqueId.for_engine(ENGINE_ID)
        selection = SelectorResolver(self.reflector, engine_id).resolve(request)
        tree = DescriptorTreeBuilder(self.reflector).build(engine_id, selection.root_classes)
        pruned = prune(tree, selection.requested_ids)
        logger.info(
            "Discovered %d rules in %d classes",
            sum(1 for node in pruned.walk() if node.is_test),
            len(pruned.children),
        )
        return pruned

    def execute(self, request: ExecutionRequest) -> None:
        if request.configuration_parameters:
            logger.debug("Configuration parameters: %s", request.configuration_parameters)
        coordinator = ExecutionCoordinator(self.cache, self.evaluator)
        coordinator.execute(request.root, request.listener, request.cancellation)

"""
Pass infrastructure

Validation passes read a finished Module, report into the shared
ErrorCollection and may leave analysis results for later passes. They
never rebuild or mutate the AST.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Dict, List, Sequence, Type

from ..frontend.transformers import FeatureTag
from ..shared.errors import ErrorCollection, GosImplementationError
from ..shared.nodes import Module

logger = logging.getLogger("gos.passes")


class ParseContext:
    """
    Per-parse state handed to every pass: the diagnostics sink, the
    builder's feature tags, ``allow_deprecated`` and the analysis results
    keyed by the pass class that produced them.
    """

    def __init__(self, errors: ErrorCollection, tags: Sequence[FeatureTag],
                 allow_deprecated: bool = True):
        self.errors = errors
        self.tags = tags
        self.allow_deprecated = allow_deprecated
        self._results: Dict[Type['BasePass'], Any] = {}

    def get_analysis(self, pass_class: Type['BasePass']) -> Any:
        try:
            return self._results[pass_class]
        except KeyError:
            raise GosImplementationError(
                f"{pass_class.__name__} has not stored a result in this context") from None

    def set_analysis(self, pass_class: Type['BasePass'], result: Any) -> None:
        self._results[pass_class] = result


class BasePass(ABC):
    """A validation pass; ``requires`` lists passes that must run first."""
    requires: List[Type['BasePass']] = []

    @abstractmethod
    def run(self, module: Module, ctx: ParseContext) -> None:
        raise NotImplementedError


class PassManager:
    """Runs registered passes in dependency order, registration order otherwise."""

    def __init__(self):
        self.passes: List[Type[BasePass]] = []

    def register_pass(self, pass_class: Type[BasePass]) -> None:
        if pass_class not in self.passes:
            self.passes.append(pass_class)

    def run_all(self, module: Module, ctx: ParseContext) -> None:
        for pass_class in self.ordered():
            logger.debug("running %s", pass_class.__name__)
            pass_class().run(module, ctx)
            logger.debug("%s done, %d diagnostic(s) so far", pass_class.__name__, len(ctx.errors))

    def ordered(self) -> List[Type[BasePass]]:
        order: List[Type[BasePass]] = []
        visiting: List[Type[BasePass]] = []

        def visit(pass_class: Type[BasePass]) -> None:
            if pass_class in order:
                return
            if pass_class in visiting:
                cycle = " -> ".join(p.__name__ for p in visiting + [pass_class])
                raise GosImplementationError(f"circular pass dependency: {cycle}")
            if pass_class not in self.passes:
                raise GosImplementationError(f"{pass_class.__name__} is required but not registered")
            visiting.append(pass_class)
            for dependency in pass_class.requires:
                visit(dependency)
            visiting.pop()
            order.append(pass_class)

        for pass_class in self.passes:
            visit(pass_class)
        return order

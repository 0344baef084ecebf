"""
Feature Gate Pass

Turns the builder's feature tags into diagnostics: deprecated constructs
warn (or fail under strict mode), unsupported constructs always fail.
"""

import logging

from .base import BasePass, ParseContext
from ..frontend.transformers import DEPRECATED, UNSUPPORTED
from ..shared.errors import ErrorKind, GosImplementationError, Severity
from ..shared.nodes import Module

logger = logging.getLogger("gos.passes.feature_gate")


class FeatureGatePass(BasePass):
    requires = []

    def run(self, module: Module, ctx: ParseContext) -> None:
        logger.debug("gating %d tagged construct(s)", len(ctx.tags))
        for tag in sorted(ctx.tags, key=lambda t: t.span.start):
            if tag.kind == DEPRECATED:
                severity = Severity.WARNING if ctx.allow_deprecated else Severity.ERROR
                ctx.errors.report(
                    ErrorKind.DEPRECATED,
                    f"{tag.construct} is deprecated",
                    tag.span,
                    severity=severity,
                    help=tag.suggestion,
                    construct=tag.construct,
                    note=None if ctx.allow_deprecated else "deprecated syntax is rejected in strict mode",
                )
            elif tag.kind == UNSUPPORTED:
                ctx.errors.report(
                    ErrorKind.UNSUPPORTED,
                    f"{tag.construct} is not supported",
                    tag.span,
                    help=tag.suggestion,
                    construct=tag.construct,
                )
            else:
                raise GosImplementationError(f"unknown feature tag kind {tag.kind!r}")

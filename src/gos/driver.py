"""
Parse Driver

Orchestrates one parse: scan statement boundaries, parse each fragment
with the shared grammar, build AST statements, merge top-level comments and
run the validation passes. All per-parse state lives in the call, so one
driver serves concurrent parses.
"""

from dataclasses import dataclass, field
from functools import lru_cache
import logging
from typing import List, Optional, Tuple

from lark import Tree
from lark.exceptions import VisitError

from .frontend.parser import Parser
from .frontend.scanner import Fragment, RawComment, scan_statements
from .frontend.transformers import FeatureTag, GosTransformer
from .passes import DEFAULT_PASSES, ParseContext, PassManager
from .shared.errors import (
    Diagnostic, ErrorCollection, ErrorKind, FailFast, GosError, GosImplementationError,
    GosSourceError, ParseFailure,
)
from .shared.nodes import Comment, Module, Statement
from .shared.source_location import SourceMap
from .utils.config import DEFAULT_SOURCE_NAME, MAX_COLLECTED_ERRORS, MAX_NESTING_DEPTH

logger = logging.getLogger("gos.driver")


@dataclass(frozen=True)
class ParseOptions:
    """
    collect_errors: gather every diagnostic instead of stopping at the first error
    allow_deprecated: report deprecated syntax as warnings (errors when False)
    debug: keep the CST fragments on the result
    """
    collect_errors: bool = False
    allow_deprecated: bool = True
    debug: bool = False
    source_name: str = DEFAULT_SOURCE_NAME


@dataclass(frozen=True)
class CstFragment:
    """CST of one statement; tree positions are relative to ``offset``."""
    offset: int
    tree: Tree


@dataclass
class ParseResult:
    """Parse result: a Module on success, else None, plus every diagnostic"""
    module: Optional[Module]
    diagnostics: ErrorCollection
    cst: Tuple[CstFragment, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.module is not None

    @property
    def errors(self) -> List[Diagnostic]:
        return self.diagnostics.errors

    @property
    def warnings(self) -> List[Diagnostic]:
        return self.diagnostics.warnings

    def has_errors(self) -> bool:
        return self.diagnostics.has_errors()

    def has_warnings(self) -> bool:
        return self.diagnostics.has_warnings()

    def unwrap(self) -> Module:
        """Return the module or raise the first error as a GosSourceError."""
        if self.module is not None:
            return self.module
        first = self.errors[0]
        raise GosSourceError(first, self.diagnostics.source_files.get(first.span.file) if first.span else None)


class ParseDriver:
    """
    Parse driver.

    Owns the compiled grammar and the registered passes; both are read-only
    after construction.
    """

    def __init__(self, parser: Optional[Parser] = None):
        self.parser = parser or Parser()
        self.pass_manager = PassManager()
        self._register_passes()

    def _register_passes(self) -> None:
        for pass_class in DEFAULT_PASSES:
            self.pass_manager.register_pass(pass_class)

    def parse(self, source: str, options: ParseOptions = ParseOptions()) -> ParseResult:
        source_map = SourceMap(source, options.source_name)
        errors = ErrorCollection({options.source_name: source}, fail_fast=not options.collect_errors)
        tags: List[FeatureTag] = []
        cst: List[CstFragment] = []
        module: Optional[Module] = None

        try:
            module = self._build_module(source, source_map, errors, tags, cst, options)
            ctx = ParseContext(errors, tags, allow_deprecated=options.allow_deprecated)
            self.pass_manager.run_all(module, ctx)
        except FailFast as e:
            logger.debug("fail-fast stop at %s: %s", e.span, e.message)

        if errors.has_errors():
            module = None
        logger.debug("parsed %s: %d error(s), %d warning(s)", options.source_name,
                     errors.error_count, len(errors.warnings))
        return ParseResult(module=module, diagnostics=errors, cst=tuple(cst))

    def _build_module(self, source: str, source_map: SourceMap, errors: ErrorCollection,
                      tags: List[FeatureTag], cst: List[CstFragment], options: ParseOptions) -> Module:
        fragments, comments = scan_statements(source)
        logger.debug("scanned %d statement fragment(s), %d top-level comment(s)",
                     len(fragments), len(comments))
        statements: List[Statement] = []
        for fragment in fragments:
            if errors.error_count >= MAX_COLLECTED_ERRORS:
                logger.warning("stopping after %d errors", errors.error_count)
                break
            tree = self.parser.parse_fragment(source, fragment, source_map, errors)
            if tree is None:
                continue
            if options.debug:
                cst.append(CstFragment(fragment.start, tree))
            too_deep = Parser.find_too_deep(tree, MAX_NESTING_DEPTH)
            if too_deep is not None:
                errors.report(
                    ErrorKind.NESTING_TOO_DEEP,
                    f"values are nested more than {MAX_NESTING_DEPTH} levels deep",
                    Parser.tree_span(too_deep, fragment, source_map),
                    help="split the value into separate definitions",
                )
                continue
            statements.extend(self._transform(tree, fragment, source_map, errors, tags))
        statements = self._merge_comments(statements, fragments, comments, source_map)
        return Module(statements=tuple(statements), span=source_map.span(0, len(source)))

    def _transform(self, tree: Tree, fragment: Fragment, source_map: SourceMap,
                   errors: ErrorCollection, tags: List[FeatureTag]) -> List[Statement]:
        transformer = GosTransformer(source_map, fragment.start, errors, tags)
        try:
            return transformer.transform(tree)
        except VisitError as e:
            # Lark wraps exceptions raised inside transformer callbacks
            if isinstance(e.orig_exc, (GosError, GosImplementationError)):
                raise e.orig_exc
            raise GosImplementationError(f"AST builder failed on rule '{e.rule}': {e.orig_exc}") from e

    @staticmethod
    def _merge_comments(statements: List[Statement], fragments: List[Fragment],
                        comments: List[RawComment], source_map: SourceMap) -> List[Statement]:
        """Interleave comments outside every statement fragment, by position."""
        top_level = [
            Comment(text=c.text, span=source_map.span(c.start, c.end))
            for c in comments
            if not any(f.start <= c.start < f.end for f in fragments)
        ]
        if not top_level:
            return statements
        merged = list(statements) + top_level
        merged.sort(key=lambda s: s.span.start)
        return merged


@lru_cache(maxsize=1)
def default_driver() -> ParseDriver:
    """Process-wide driver sharing one compiled grammar."""
    return ParseDriver()


def parse(source: str, options: ParseOptions = ParseOptions()) -> ParseResult:
    """Parse GOS source text into a validated Module."""
    return default_driver().parse(source, options)


def parse_with_errors(source: str, source_name: str = DEFAULT_SOURCE_NAME) -> ParseResult:
    """Parse in collect-all mode."""
    return parse(source, ParseOptions(collect_errors=True, source_name=source_name))


def validate(source: str, options: Optional[ParseOptions] = None) -> Module:
    """Parse and return the Module, raising ParseFailure with every error."""
    opts = options or ParseOptions(collect_errors=True)
    result = parse(source, opts)
    if not result.ok:
        raise ParseFailure(result.diagnostics)
    return result.module


def version() -> str:
    from . import __version__
    return __version__

"""
Tests for the parse facade: modes, recovery, results and helpers.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

import gos
from gos import ParseFailure, ParseOptions, parse, parse_with_errors, validate, version
from gos.driver import CstFragment
from gos.shared import ErrorKind, GosSourceError, VarDef
from gos.utils.config import MAX_COLLECTED_ERRORS, MAX_NESTING_DEPTH
from tests.test_utils import kinds, statements_of


class TestModes:

    def test_collect_all_returns_syntax_and_semantic_errors_in_order(self, collect):
        result = collect("var { x = ; };\nvar { y = z; };")
        assert kinds(result.errors) == [ErrorKind.SYNTAX, ErrorKind.UNDEFINED_REFERENCE]
        assert [d.line for d in result.errors] == [1, 2]

    def test_fail_fast_returns_only_the_first_error(self, parse_source):
        result = parse_source("var { x = ; };\nvar { y = z; };")
        assert kinds(result.errors) == [ErrorKind.SYNTAX]
        assert result.module is None

    def test_recovery_continues_after_bad_statement(self, collect):
        result = collect("import ;\nvar { a = ; };\nvar { ok = 1; };\ngraph { }")
        assert [d.line for d in result.errors] == [1, 2, 4]
        assert all(d.kind is ErrorKind.SYNTAX for d in result.errors)

    def test_passes_run_over_surviving_statements(self, collect):
        result = collect("var { a = ; };\nvar { b = a; };")
        assert kinds(result.errors) == [ErrorKind.SYNTAX, ErrorKind.UNDEFINED_REFERENCE]

    def test_warnings_do_not_fail_the_parse(self, parse_source):
        result = parse_source("var { s = {1, 1}; };")
        assert result.ok
        assert result.has_warnings()
        assert not result.has_errors()

    def test_error_cap(self, collect):
        source = "\n".join("var { x = ; };" for _ in range(MAX_COLLECTED_ERRORS + 20))
        result = collect(source)
        assert len(result.errors) == MAX_COLLECTED_ERRORS


class TestNesting:

    def test_depth_at_limit_accepted(self, parse_source):
        value = "[" * MAX_NESTING_DEPTH + "]" * MAX_NESTING_DEPTH
        assert parse_source(f"var {{ v = {value}; }};").ok

    def test_too_deep_reported_not_raised(self, collect):
        depth = MAX_NESTING_DEPTH + 1
        result = collect(f"var {{ v = {'[' * depth}{']' * depth}; }};\nvar {{ w = 1; }};")
        assert kinds(result.errors) == [ErrorKind.NESTING_TOO_DEEP]

    def test_very_deep_input(self, collect):
        depth = 5000
        result = collect(f"var {{ v = {'(' * depth}1{')' * depth}; }};")
        assert kinds(result.errors) == [ErrorKind.NESTING_TOO_DEEP]


class TestResult:

    def test_debug_keeps_cst(self, parse_source):
        result = parse_source("import a;\nvar { b = 1; };", debug=True)
        assert [f.offset for f in result.cst] == [0, 10]
        assert all(isinstance(f, CstFragment) for f in result.cst)
        assert result.cst[1].tree.data == "module"

    def test_no_cst_without_debug(self, parse_source):
        assert parse_source("import a;").cst == ()

    def test_unwrap(self, parse_source):
        module = parse_source("var { a = 1; };").unwrap()
        assert len(statements_of(module, VarDef)) == 1
        with pytest.raises(GosSourceError) as info:
            parse_source("var { a = b; };").unwrap()
        assert info.value.kind is ErrorKind.UNDEFINED_REFERENCE

    def test_results_are_independent(self, parse_source):
        first = parse_source("var { a = 1; };")
        second = parse_source("var { a = 1; };")
        assert first.module == second.module
        assert first.module.statements[0] is not second.module.statements[0]
        assert first.diagnostics is not second.diagnostics


class TestFacade:

    def test_parse_default_options(self):
        result = parse("var { a = 1; };")
        assert result.ok
        assert result.module.span.file == ParseOptions().source_name

    def test_parse_with_errors_collects(self):
        result = parse_with_errors("var { a = b; c = d; };", source_name="x.gos")
        assert [d.name for d in result.errors] == ["b", "d"]
        assert result.errors[0].span.file == "x.gos"

    def test_validate(self):
        assert validate("import a;").statements[0].path == "a"
        with pytest.raises(ParseFailure) as info:
            validate("var { a = b; c = d; };")
        assert info.value.errors.error_count == 2

    def test_version(self):
        assert version() == gos.__version__

    def test_concurrent_parses(self):
        sources = [f"var {{ v{i} = {i}; }};" for i in range(32)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(parse, sources))
        assert [r.module.statements[0].value.value for r in results] == list(range(32))

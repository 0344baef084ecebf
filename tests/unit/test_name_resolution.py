"""
Tests for NameResolutionPass: duplicate definitions, undefined references,
local scopes of graphs and ops, and built-in names.
"""

from gos.passes import NameResolutionPass, ParseContext
from gos.shared import ErrorCollection, ErrorKind
from gos.shared.scope import BindingType, ScopeKind, ScopeManager, Binding
from tests.test_utils import assert_ok, kinds


class TestDuplicateDefinitions:

    def test_duplicate_var_name_in_one_block(self, collect):
        result = collect("var { x = 1; x = 2; };")
        assert kinds(result.errors) == [ErrorKind.DUPLICATE_DEFINITION]
        diag = result.errors[0]
        assert diag.name == "x"
        assert diag.first_span.column == 7
        assert diag.span.column == 14

    def test_exactly_one_report_per_extra_definition(self, collect):
        result = collect("var { x = 1; };\nvar { x = 2; };\nvar { x = 3; };")
        dups = result.diagnostics.of_kind(ErrorKind.DUPLICATE_DEFINITION)
        assert [d.line for d in dups] == [2, 3]
        assert all(d.first_span.line == 1 for d in dups)

    def test_clash_across_definition_kinds(self, collect):
        source = "graph g {}\nop g() { 1 };\nimport lib.g;\nvar { v = 1; } as g;"
        result = collect(source)
        assert kinds(result.errors) == [ErrorKind.DUPLICATE_DEFINITION] * 3

    def test_shared_alias_bound_once(self, parse_source):
        assert_ok(parse_source("var { a = 1; b = 2; c = 3; } as cfg;"))

    def test_alias_clashing_with_var(self, collect):
        result = collect("var { cfg = 1; };\nvar { a = 2; } as cfg;")
        assert kinds(result.errors) == [ErrorKind.DUPLICATE_DEFINITION]

    def test_graph_alias_is_bound(self, collect):
        result = collect("graph g as p {}\nvar { p = 1; };")
        assert kinds(result.errors) == [ErrorKind.DUPLICATE_DEFINITION]

    def test_names_are_case_sensitive(self, parse_source):
        assert_ok(parse_source("var { name = 1; Name = 2; };"))

    def test_duplicate_op_params(self, collect):
        result = collect("op f(a, a) { a };")
        assert kinds(result.errors) == [ErrorKind.DUPLICATE_DEFINITION]

    def test_duplicate_node_names(self, collect):
        result = collect("graph g { n {} n {} }")
        assert kinds(result.errors) == [ErrorKind.DUPLICATE_DEFINITION]


class TestUndefinedReferences:

    def test_single_undefined_reference(self, collect):
        result = collect("var { x = y; };")
        assert len(result.errors) == 1
        diag = result.errors[0]
        assert diag.kind is ErrorKind.UNDEFINED_REFERENCE
        assert diag.name == "y"
        assert (diag.line, diag.column) == (1, 11)

    def test_forward_reference_resolves(self, parse_source):
        assert_ok(parse_source("var { a = b; };\nvar { b = 1; };"))

    def test_reference_to_alias_and_import(self, parse_source):
        assert_ok(parse_source("import std.paths;\nvar { a = 1; } as cfg;\nvar { p = [cfg.a, paths.home]; };"))

    def test_dotted_reference_resolves_first_segment(self, collect):
        result = collect("var { a = missing.field; };")
        assert [d.name for d in result.errors] == ["missing"]

    def test_references_inside_nested_values(self, collect):
        result = collect("var { d = {k: [u, (v,)], 'w': {x}}; };")
        assert [d.name for d in result.errors] == ["u", "v", "x"]

    def test_builtin_name(self, parse_source):
        assert_ok(parse_source("var { b = builtin.env; };"))

    def test_op_params_scoped_to_body(self, collect):
        result = collect("op f(p) { p };\nvar { q = p; };")
        assert [d.name for d in result.errors] == ["p"]
        assert result.errors[0].line == 2

    def test_node_names_scoped_to_graph(self, collect):
        result = collect("graph g { a { x = 1; } b { from_a = a; } }\nvar { z = a; };")
        assert [(d.name, d.line) for d in result.errors] == [("a", 2)]

    def test_graph_metadata_sees_nodes(self, parse_source):
        assert_ok(parse_source("graph g { entry = start; start { x = 1; } }"))

    def test_module_names_visible_in_graph(self, parse_source):
        assert_ok(parse_source("var { retries = 3; };\ngraph g { n { r = retries; } }"))


class TestPassDirectly:

    def test_analysis_result_is_module_scope(self, parse_source):
        module = assert_ok(parse_source("var { a = 1; } as cfg;\nop f() { a };"))
        ctx = ParseContext(ErrorCollection(), [])
        NameResolutionPass().run(module, ctx)
        scope = ctx.get_analysis(NameResolutionPass)
        assert scope.kind is ScopeKind.MODULE
        assert scope.names() == ["a", "cfg", "f"]
        assert scope.lookup("builtin").binding_type is BindingType.BUILTIN


class TestScopeManager:

    def test_first_binding_wins(self):
        scopes = ScopeManager()
        with scopes.scope(ScopeKind.MODULE):
            assert scopes.define(Binding("x", BindingType.VARIABLE, None)) is None
            existing = scopes.define(Binding("x", BindingType.OP, None))
            assert existing.binding_type is BindingType.VARIABLE

    def test_inner_scope_shadows_and_pops(self):
        scopes = ScopeManager(["builtin"])
        with scopes.scope(ScopeKind.MODULE):
            scopes.define(Binding("p", BindingType.VARIABLE, None))
            with scopes.scope(ScopeKind.OP):
                scopes.define(Binding("p", BindingType.PARAMETER, None))
                assert scopes.lookup("p").binding_type is BindingType.PARAMETER
                assert scopes.enclosing(ScopeKind.MODULE) is not None
            assert scopes.lookup("p").binding_type is BindingType.VARIABLE
            assert scopes.lookup("builtin") is not None

#!/usr/bin/env python3
"""
Tests for statement building: var blocks, imports, graphs, ops, top-level
comments and the spans attached to every node.
"""

from gos.shared import Comment, GraphDef, Import, OpDef, VarDef
from tests.test_utils import assert_ok, only, statements_of


class TestVarBlocks:

    def test_one_var_def_per_binding(self, parse_source):
        module = assert_ok(parse_source("var { a = 1; b = 'two'; };"))
        a, b = statements_of(module, VarDef)
        assert (a.name.name, a.value.value) == ("a", 1)
        assert (b.name.name, b.value.value) == ("b", "two")
        assert a.alias is None

    def test_alias_shared_by_block(self, parse_source):
        module = assert_ok(parse_source("var { a = 1; b = 2; } as cfg;"))
        a, b = statements_of(module, VarDef)
        assert a.alias is b.alias
        assert a.alias.name == "cfg"

    def test_var_def_span_is_the_binding(self, parse_source):
        var = only(assert_ok(parse_source("var {\n  answer = 42;\n};")), VarDef)
        assert (var.span.line, var.span.column) == (2, 3)
        assert (var.span.end_line, var.span.end_column) == (2, 15)
        assert (var.name.span.line, var.name.span.column) == (2, 3)
        assert var.value.span.column == 12


class TestImports:

    def test_binding_name_from_path(self, parse_source):
        module = assert_ok(parse_source('import "lib/shared.gos"; import std.math; import "x" as y;'))
        names = [i.binding_name for i in statements_of(module, Import)]
        assert names == ["shared", "math", "y"]

    def test_string_path_binds_file_stem(self, parse_source):
        module = assert_ok(parse_source('import "data/config.toml"; import "plain";\nvar { x = config; y = plain; };'))
        first, second = statements_of(module, Import)
        assert (first.binding_name, first.from_string) == ("config", True)
        assert second.binding_name == "plain"

    def test_dotted_path_binds_last_segment(self, parse_source):
        imp = only(assert_ok(parse_source("import std.io;")), Import)
        assert not imp.from_string
        assert imp.binding_name == "io"

    def test_import_span(self, parse_source):
        imp = only(assert_ok(parse_source("  import a.b;")), Import)
        assert imp.span.column == 3
        assert imp.span.end_column == 14


class TestGraphsAndOps:

    def test_graph_structure(self, parse_source):
        source = """
graph etl as nightly {
    owner = "data";
    extract { source = "s3://bucket"; }
    load { target = extract; }
}
"""
        graph = only(assert_ok(parse_source(source)), GraphDef)
        assert graph.alias.name == "nightly"
        assert [n.name.name for n in graph.nodes] == ["extract", "load"]
        assert graph.metadata.get("owner").value == "data"
        assert graph.nodes[1].field_map()["target"].name == "extract"
        assert graph.span.line == 2

    def test_op_body_references_params(self, parse_source):
        op = only(assert_ok(parse_source("op pair(a, b) { (a, b) };")), OpDef)
        assert [item.name for item in op.body.items] == ["a", "b"]


class TestComments:

    def test_top_level_comments_become_statements(self, parse_source):
        source = "# header\nvar { x = 1; };\n// between\nimport a;\n/* end */"
        module = assert_ok(parse_source(source))
        kinds = [type(s).__name__ for s in module.statements]
        assert kinds == ["Comment", "VarDef", "Comment", "Import", "Comment"]
        assert [c.text for c in statements_of(module, Comment)] == ["# header", "// between", "/* end */"]

    def test_comments_inside_statements_dropped(self, parse_source):
        module = assert_ok(parse_source("var {\n  # note\n  x = 1;\n};"))
        assert statements_of(module, Comment) == []

    def test_comment_between_brace_and_alias_dropped(self, parse_source):
        module = assert_ok(parse_source("var { x = 1; } # why\n as cfg;"))
        assert statements_of(module, Comment) == []

    def test_definitions_skip_comments(self, parse_source):
        module = assert_ok(parse_source("# c\nimport a;"))
        assert len(module.definitions()) == 1


class TestSpans:

    def test_sibling_spans_ordered_and_disjoint(self, parse_source):
        source = "# c\nvar { a = 1; b = [1, 2]; } as v;\nimport x;\ngraph g { n { k = a; } }\nop f(p) { p };\n"
        module = assert_ok(parse_source(source))
        spans = [s.span for s in module.statements]
        for earlier, later in zip(spans, spans[1:]):
            assert earlier.start.offset <= earlier.end.offset
            assert earlier.end.offset <= later.start.offset

    def test_module_span_covers_source(self, parse_source):
        source = "import a;\n"
        module = assert_ok(parse_source(source))
        assert module.span.start.offset == 0
        assert module.span.end.offset == len(source)
        assert module.span.covers(module.statements[0].span)

    def test_source_name_in_spans(self, parse_source):
        module = assert_ok(parse_source("import a;", source_name="main.gos"))
        assert str(module.statements[0].span) == "main.gos:1:1"

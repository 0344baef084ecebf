"""
Tests for FeatureGatePass: deprecated meta blocks and unsupported syntax.
"""

from gos.frontend.transformers import DEPRECATED, UNSUPPORTED, FeatureTag
from gos.passes import FeatureGatePass, ParseContext
from gos.shared import ErrorCollection, ErrorKind, GraphDef, Severity, SourceMap, VarDef
from tests.test_utils import assert_ok, kinds, only, statements_of


class TestDeprecatedMeta:

    def test_top_level_meta_warns_by_default(self, parse_source):
        result = parse_source("meta { author = 'x'; }")
        module = assert_ok(result)
        assert kinds(result.warnings) == [ErrorKind.DEPRECATED]
        warning = result.warnings[0]
        assert warning.severity is Severity.WARNING
        assert warning.construct == "meta block"
        assert warning.suggestion == "use a var block"
        var = only(module, VarDef)
        assert var.name.name == "author"

    def test_top_level_meta_is_error_when_disallowed(self, parse_source):
        result = parse_source("meta { author = 'x'; }", allow_deprecated=False)
        assert not result.ok
        assert kinds(result.errors) == [ErrorKind.DEPRECATED]
        assert result.errors[0].severity is Severity.ERROR

    def test_meta_inside_graph_becomes_metadata(self, parse_source):
        result = parse_source("graph g { meta { owner = 'ops'; } n {} }")
        graph = only(assert_ok(result), GraphDef)
        assert graph.metadata.get("owner").value == "ops"
        assert kinds(result.warnings) == [ErrorKind.DEPRECATED]

    def test_meta_and_field_share_metadata_keys(self, collect):
        result = collect("graph g { owner = 'a'; meta { owner = 'b'; } }")
        assert ErrorKind.DUPLICATE_KEY in kinds(result.errors)

    def test_meta_followed_by_other_statements(self, parse_source):
        module = assert_ok(parse_source("meta { a = 1; };\nvar { b = a; };"))
        assert [v.name.name for v in statements_of(module, VarDef)] == ["a", "b"]


class TestUnsupported:

    def test_from_import(self, collect):
        result = collect("from lib import a, b;")
        assert kinds(result.errors) == [ErrorKind.UNSUPPORTED]
        assert result.errors[0].construct == "from-import"

    def test_edge_statement(self, collect):
        result = collect("graph g { a {} b {} a -> b; }")
        assert kinds(result.errors) == [ErrorKind.UNSUPPORTED]
        assert result.errors[0].construct == "edge"

    def test_unsupported_even_when_deprecated_allowed(self, parse_source):
        assert not parse_source("from 'x.gos' import y;", allow_deprecated=True).ok


class TestPassDirectly:

    def test_tags_reported_in_source_order(self):
        source_map = SourceMap("0123456789")
        late = FeatureTag(UNSUPPORTED, "edge", source_map.span(6, 8))
        early = FeatureTag(DEPRECATED, "meta block", source_map.span(1, 3), "use a var block")
        errors = ErrorCollection()
        FeatureGatePass().run(None, ParseContext(errors, [late, early]))
        assert kinds(errors.diagnostics) == [ErrorKind.DEPRECATED, ErrorKind.UNSUPPORTED]

"""
Tests for source, sink and transform recognizers.
"""

import unittest

from taint_review.parser import JavaScriptParser, NodeKind
from taint_review.patterns import (
    CODE_EXEC,
    DATABASE_QUERY,
    OPEN_REDIRECT,
    PROCESS_EXEC,
    RAW_MARKUP_INJECTION,
    PatternCatalog,
    callee_name,
    member_call,
)


class TestPatternCatalog(unittest.TestCase):
    """Test cases for the pattern catalog."""

    def setUp(self):
        """Set up test fixtures."""
        self.parser = JavaScriptParser()
        self.catalog = PatternCatalog()

    def _first(self, code, kind, filename='test.js'):
        tree = self.parser.parse(code, filename)
        return next(node for node in tree.walk() if node.kind is kind)

    def _sink_kinds(self, code, filename='test.js'):
        tree = self.parser.parse(code, filename)
        kinds = []
        for node in tree.walk():
            kinds.extend(self.catalog.sink_kinds(node))
        return kinds

    def test_request_sources(self):
        """Test request body/query/params access is a source."""
        for code in ('x = req.body.name;', 'x = req.query.id;', 'x = req.params.slug;'):
            node = self._first(code, NodeKind.MEMBER)
            self.assertTrue(self.catalog.is_source(node), code)

    def test_other_sources(self):
        """Test environment, location and storage reads are sources."""
        for code in (
            'x = process.env.API_TOKEN;',
            'x = window.location.href;',
            'x = localStorage.getItem("k");',
            'x = document.cookie;',
            'x = sessionStorage.getItem("k");',
        ):
            node = self._first(code, NodeKind.MEMBER)
            self.assertTrue(self.catalog.is_source(node), code)

    def test_non_sources(self):
        """Test ordinary property access is not a source."""
        for code in ('x = request.headers;', 'x = reqs.bodyText;', 'x = localStorage.setItem;'):
            node = self._first(code, NodeKind.MEMBER)
            self.assertFalse(self.catalog.is_source(node), code)

    def test_sources_ignore_other_node_kinds(self):
        """Test string literals mentioning a source are not sources."""
        tree = self.parser.parse('x = "req.query.id";', 'test.js')
        self.assertFalse(any(self.catalog.is_source(n) for n in tree.walk()))

    def test_code_exec_sinks(self):
        """Test eval and vm calls are code-execution sinks."""
        self.assertEqual(self._sink_kinds('eval(code);'), [CODE_EXEC])
        self.assertEqual(self._sink_kinds('vm.runInNewContext(code);'), [CODE_EXEC])

    def test_process_exec_sinks(self):
        """Test child_process calls and bare exec are process sinks."""
        self.assertEqual(self._sink_kinds('child_process.spawn(cmd);'), [PROCESS_EXEC])
        self.assertEqual(self._sink_kinds('exec(cmd);'), [PROCESS_EXEC])
        self.assertEqual(self._sink_kinds('execSync(cmd);'), [PROCESS_EXEC])

    def test_markup_sinks(self):
        """Test dangerouslySetInnerHTML and document.write are markup sinks."""
        code = 'const el = <div dangerouslySetInnerHTML={{ __html: html }} />;'
        self.assertEqual(self._sink_kinds(code, 'c.jsx'), [RAW_MARKUP_INJECTION])
        self.assertEqual(self._sink_kinds('document.write(html);'), [RAW_MARKUP_INJECTION])

    def test_database_sinks(self):
        """Test query/execute methods are database sinks, case-insensitively."""
        self.assertEqual(self._sink_kinds('db.query(sql);'), [DATABASE_QUERY])
        self.assertEqual(self._sink_kinds('pool.execute(sql);'), [DATABASE_QUERY])
        self.assertEqual(self._sink_kinds('conn.rawQuery(sql);'), [DATABASE_QUERY])
        self.assertEqual(self._sink_kinds('cursor.EXECUTE(sql);'), [DATABASE_QUERY])

    def test_database_sink_requires_identifier_target(self):
        """Test only identifier.method(...) calls count as database sinks."""
        self.assertEqual(self._sink_kinds('this.db.query(sql);'), [])
        self.assertEqual(self._sink_kinds('getDb().query(sql);'), [])

    def test_dom_query_is_not_database_sink(self):
        """Test DOM lookups are not treated as database queries."""
        self.assertEqual(self._sink_kinds('document.querySelector("#id");'), [])
        self.assertEqual(self._sink_kinds('document.querySelectorAll("p");'), [])

    def test_redirect_sink(self):
        """Test res.redirect is recognized."""
        self.assertEqual(self._sink_kinds('res.redirect(url);'), [OPEN_REDIRECT])

    def test_unrelated_calls_are_not_sinks(self):
        """Test ordinary calls do not match any sink."""
        self.assertEqual(self._sink_kinds('console.log(x); foo(bar); evaluate(x);'), [])

    def test_transforms(self):
        """Test sanitizer, encoding and schema validation calls are transforms."""
        for code in (
            'x = DOMPurify.sanitize(html);',
            'x = sanitizeInput(v);',
            'x = encodeURIComponent(v);',
            'x = encodeURI(v);',
            'x = zod.parse(v);',
            'x = UserSchema.safeParse(v);',
            'x = escapeHtml(v);',
        ):
            node = self._first(code, NodeKind.CALL)
            self.assertTrue(self.catalog.is_transform(node), code)

    def test_non_transforms(self):
        """Test unrelated calls are not transforms."""
        for code in ('x = JSON.parse(v);', 'x = parseInt(v);', 'x = format(v);'):
            node = self._first(code, NodeKind.CALL)
            self.assertFalse(self.catalog.is_transform(node), code)

    def test_call_target_helpers(self):
        """Test callee helpers for bare and member calls."""
        call = self._first('eval(x);', NodeKind.CALL)
        self.assertEqual(callee_name(call), 'eval')
        self.assertIsNone(member_call(call))

        call = self._first('db.query(x);', NodeKind.CALL)
        self.assertIsNone(callee_name(call))
        self.assertEqual(member_call(call), ('db', 'query'))

    def test_catalog_extension(self):
        """Test new recognizers can be registered."""
        catalog = PatternCatalog()
        catalog.add_source('url params', r'searchParams\.get')
        catalog.add_sink('navigation', lambda node: callee_name(node) == 'navigate')
        catalog.add_transform('allow list', r'isAllowed')

        self.assertTrue(catalog.is_source(self._first('x = url.searchParams.get("a");', NodeKind.CALL)))
        self.assertEqual(catalog.sink_kinds(self._first('navigate(x);', NodeKind.CALL)), ['navigation'])
        self.assertTrue(catalog.is_transform(self._first('isAllowed(x);', NodeKind.CALL)))

    def test_empty_catalog(self):
        """Test an empty catalog recognizes nothing."""
        catalog = PatternCatalog(sources=[], sinks=[], transforms=[])
        node = self._first('eval(req.body.x);', NodeKind.CALL)
        self.assertFalse(catalog.is_source(node))
        self.assertEqual(catalog.sink_kinds(node), [])


if __name__ == '__main__':
    unittest.main()

"""
Tests for unified diff handling.
"""

import unittest

from taint_review.diffs import (
    DiffStats,
    added_line_numbers,
    build_unified,
    detect_languages,
    parse_unified_diff,
)

GIT_DIFF = """\
diff --git a/src/app.js b/src/app.js
index 83db48f..bf269f4 100644
--- a/src/app.js
+++ b/src/app.js
@@ -1,3 +1,4 @@
 const express = require('express');
-const a = 1;
+const id = req.query.id;
+db.query(id);
 module.exports = app;
diff --git a/new.ts b/new.ts
new file mode 100644
index 0000000..e69de29
--- /dev/null
+++ b/new.ts
@@ -0,0 +1,2 @@
+export const x = 1;
+export const y = 2;
diff --git a/schema.sql b/schema.sql
deleted file mode 100644
index 1234567..0000000
--- a/schema.sql
+++ /dev/null
@@ -1,2 +0,0 @@
--- a comment
-DROP TABLE users;
"""

RENAME_DIFF = """\
diff --git a/old.js b/new.js
similarity index 100%
rename from old.js
rename to new.js
"""

PLAIN_DIFF = """\
--- a.js\t2024-01-01 10:00:00
+++ a.js\t2024-01-02 10:00:00
@@ -1 +1 @@
-x = 1;
+x = 2;
--- b.js\t2024-01-01 10:00:00
+++ b.js\t2024-01-02 10:00:00
@@ -1,2 +1,2 @@
 keep();
-old();
+fresh();
\\ No newline at end of file
"""


class TestParseUnifiedDiff(unittest.TestCase):
    """Test cases for diff parsing."""

    def test_git_diff_files(self):
        """Test files, statuses and counts are extracted."""
        files = parse_unified_diff(GIT_DIFF)
        self.assertEqual([f.filename for f in files], ['src/app.js', 'new.ts', 'schema.sql'])
        self.assertEqual([f.status for f in files], ['modified', 'added', 'removed'])
        self.assertEqual([(f.additions, f.deletions) for f in files], [(2, 1), (2, 0), (0, 2)])

    def test_removed_line_looking_like_header(self):
        """Test a removed '-- comment' line stays inside its hunk."""
        schema = parse_unified_diff(GIT_DIFF)[2]
        self.assertIn('--- a comment', schema.patch)
        self.assertTrue(schema.patch.startswith('@@ -1,2 +0,0 @@'))

    def test_patch_holds_hunks_only(self):
        """Test headers are not part of the patch text."""
        app = parse_unified_diff(GIT_DIFF)[0]
        self.assertTrue(app.patch.startswith('@@ -1,3 +1,4 @@'))
        self.assertNotIn('index 83db48f', app.patch)
        self.assertIn('+db.query(id);', app.patch)

    def test_rename(self):
        """Test pure renames keep both names and have no patch."""
        files = parse_unified_diff(RENAME_DIFF)
        self.assertEqual(len(files), 1)
        self.assertEqual(files[0].status, 'renamed')
        self.assertEqual(files[0].filename, 'new.js')
        self.assertEqual(files[0].previous_filename, 'old.js')
        self.assertEqual(files[0].patch, '')

    def test_plain_unified_diff(self):
        """Test diff -u output without git headers."""
        files = parse_unified_diff(PLAIN_DIFF)
        self.assertEqual([f.filename for f in files], ['a.js', 'b.js'])
        self.assertEqual([(f.additions, f.deletions) for f in files], [(1, 1), (1, 1)])
        self.assertTrue(files[1].patch.endswith('\\ No newline at end of file'))

    def test_binary_file(self):
        """Test binary changes are flagged."""
        diff = (
            'diff --git a/logo.png b/logo.png\n'
            'index 1111111..2222222 100644\n'
            'Binary files a/logo.png and b/logo.png differ\n'
        )
        files = parse_unified_diff(diff)
        self.assertTrue(files[0].binary)
        self.assertEqual(files[0].patch, '')

    def test_empty_diff(self):
        """Test empty input gives no files."""
        self.assertEqual(parse_unified_diff(''), [])


class TestDiffHelpers(unittest.TestCase):
    """Test cases for diff helpers."""

    def test_added_line_numbers(self):
        """Test post-change line numbers of added lines."""
        app = parse_unified_diff(GIT_DIFF)[0]
        self.assertEqual(added_line_numbers(app.patch), [2, 3])

    def test_added_line_numbers_across_hunks(self):
        """Test numbering restarts at each hunk header."""
        patch = '@@ -1,2 +1,2 @@\n a\n+b\n@@ -10,1 +20,2 @@\n c\n+d\n'
        self.assertEqual(added_line_numbers(patch), [2, 21])

    def test_detect_languages(self):
        """Test languages are listed once, in order of first appearance."""
        names = ['a.ts', 'b.tsx', 'c.js', 'Makefile', 'd.SQL']
        self.assertEqual(detect_languages(names), ['TypeScript', 'JavaScript', 'SQL'])

    def test_build_unified(self):
        """Test the concatenated blob and statistics."""
        unified = build_unified(parse_unified_diff(GIT_DIFF))
        self.assertEqual(unified.stats, DiffStats(files_changed=3, additions=4, deletions=3))
        self.assertIn('# File: src/app.js', unified.text)
        self.assertIn('# File: schema.sql', unified.text)
        self.assertEqual(unified.languages, ['JavaScript', 'TypeScript', 'SQL'])

    def test_build_unified_skips_empty_patches(self):
        """Test files without hunks are counted but not concatenated."""
        unified = build_unified(parse_unified_diff(RENAME_DIFF))
        self.assertEqual(unified.text, '')
        self.assertEqual(unified.stats.files_changed, 1)


if __name__ == '__main__':
    unittest.main()

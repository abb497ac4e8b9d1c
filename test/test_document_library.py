import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import shutil
import tempfile
import unittest

from document_library import DocumentLibrary
from errors import FormatterError
from models import WorkspaceFile


class TestDocumentLibrary(unittest.TestCase):
    def setUp(self):
        self.library = DocumentLibrary()
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_snippets_are_numbered(self):
        first = self.library.add_snippet('{"a": 1}')
        second = self.library.add_snippet('<a/>')
        self.assertEqual(first.name, "Snippet 1")
        self.assertEqual(second.name, "Snippet 2")
        self.assertEqual(second.raw, '<a/>')
        self.assertEqual(self.library.snippet_count, 3)

    def test_numbering_not_reused_after_removal(self):
        first = self.library.add_snippet("1")
        self.library.remove_file(first.id)
        self.assertEqual(self.library.add_snippet("2").name, "Snippet 2")

    def test_counter_is_per_library(self):
        self.library.add_snippet("x")
        self.assertEqual(DocumentLibrary().add_snippet("y").name, "Snippet 1")

    def test_named_files_do_not_advance_counter(self):
        self.library.add_file("config.json", "{}")
        self.assertEqual(self.library.add_snippet("[]").name, "Snippet 1")

    def test_get_and_remove(self):
        doc = self.library.add_file("data.xml", "<a/>")
        other = self.library.add_file("data.xml", "<b/>")
        self.assertNotEqual(doc.id, other.id)
        self.assertIs(self.library.get_file(doc.id), doc)

        self.library.remove_file(doc.id)
        self.assertIsNone(self.library.get_file(doc.id))
        self.assertEqual(self.library.files, [other])

    def test_remove_unknown_is_ignored(self):
        self.library.add_file("a.json", "1")
        self.library.remove_file("missing")
        self.assertEqual(len(self.library.files), 1)

    def test_load_utf8_file(self):
        path = os.path.join(self.temp_dir, "data.json")
        with open(path, 'w', encoding='utf-8') as f:
            f.write('{"name": "héllo"}')
        doc = self.library.load_file(path)
        self.assertEqual(doc.name, "data.json")
        self.assertEqual(doc.raw, '{"name": "héllo"}')
        self.assertIs(self.library.get_file(doc.id), doc)

    def test_load_utf8_bom_file(self):
        path = os.path.join(self.temp_dir, "bom.xml")
        with open(path, 'wb') as f:
            f.write(b'\xef\xbb\xbf<a/>')
        self.assertEqual(self.library.load_file(path).raw, '<a/>')

    def test_load_cp1251_file(self):
        path = os.path.join(self.temp_dir, "legacy.xml")
        with open(path, 'wb') as f:
            f.write('<a>Привет</a>'.encode('cp1251'))
        self.assertEqual(self.library.load_file(path).raw, '<a>Привет</a>')

    def test_load_missing_file(self):
        with self.assertRaises(FormatterError):
            self.library.load_file(os.path.join(self.temp_dir, "missing.json"))
        self.assertEqual(self.library.files, [])

    def test_workspace_file_from_dict(self):
        doc = WorkspaceFile.from_dict({"id": "1", "name": "n", "raw": "r"})
        self.assertEqual(doc, WorkspaceFile("1", "n", "r"))


if __name__ == '__main__':
    unittest.main()

# -*- coding: utf-8 -*-

import os
import shutil
import tempfile
import unittest
from unittest.mock import MagicMock

from rootify.errors import QueryError, StoreUnavailable
from rootify.service import RootService
from rootify.store import HistoryStore, WordRootStore


class TestRootService(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.mkdtemp(prefix="rootify_test_")
        self.store = WordRootStore.open(os.path.join(self.tmp, "rootify.db"))
        self.history = HistoryStore(self.store.db)
        self.service = RootService(self.store, self.history)

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def test_each_call_uses_current_dictionary(self):
        self.assertEqual(self.service.translate_text("你好"), "你_好")
        self.store.add("你", "you")
        self.assertEqual(self.service.translate_text("你好"), "you_好")
        self.store.add("好", "good")
        self.assertEqual(self.service.translate_text("你好"), "you_good")
        self.assertTrue(self.service.is_translation_complete("你好"))

    def test_engine_is_isolated_from_later_writes(self):
        self.store.add("你", "you")
        engine = self.service.engine()
        self.store.add("你", "thou")
        self.store.add("好", "good")
        self.assertEqual(engine.translate("你好"), "you_好")

    def test_segment_text(self):
        self.store.import_roots({"火": "fire", "火山": "volcano"})
        segments = self.service.segment_text("火山火")
        self.assertEqual([(s.chinese, s.is_unknown) for s in segments], [("火山", False), ("火", False)])

    def test_lookup_in_text(self):
        self.store.add("火山", "volcano")
        result = self.service.lookup_in_text("大火山", 1)
        self.assertEqual((result.selected.start, result.selected.end), (1, 3))
        self.assertEqual(result.segment.english, "volcano")

    def test_translate_and_record(self):
        self.store.add("你", "you")
        out = self.service.translate_and_record("你好", save_history=True)
        self.assertEqual(out.translation, "you_好")
        self.assertFalse(out.complete)
        recent = self.history.recent()
        self.assertEqual([(r.chinese_text, r.english_text) for r in recent], [("你好", "you_好")])

    def test_translate_without_history(self):
        self.service.translate_and_record("你好")
        self.service.translate_and_record("   ", save_history=True)
        self.assertEqual(self.history.recent(), [])

    def test_import_csv_dry_run_writes_nothing(self):
        self.store.add("你", "you")
        result = self.service.import_csv("中文词根,英文对应\n你,thou\n好,good\n", dry_run=True)
        self.assertFalse(result.imported)
        self.assertEqual((result.added, result.updated), (1, 1))
        self.assertEqual(dict(self.store.get_all()), {"你": "you"})

    def test_import_csv(self):
        self.store.add("你", "you")
        result = self.service.import_csv("中文词根,英文对应\n你,thou\n好,good\n")
        self.assertTrue(result.imported)
        self.assertEqual(dict(self.store.get_all()), {"你": "thou", "好": "good"})

    def test_import_csv_with_no_rows(self):
        result = self.service.import_csv("中文词根,英文对应\n")
        self.assertFalse(result.imported)
        self.assertEqual(result.preview, [])

    def test_export_then_import_csv_keeps_values(self):
        roots = {
            "说": '"hi"',
            "讲": 'to say "hi"',
            "行": "line1\nline2",
            "火山": "volcano, active",
        }
        self.store.import_roots(roots)
        target = WordRootStore.open(os.path.join(self.tmp, "target.db"))

        result = RootService(target).import_csv(self.store.export())

        self.assertTrue(result.imported)
        self.assertEqual(dict(target.get_all()), roots)

    def test_store_errors_propagate(self):
        store = MagicMock()
        store.get_all.side_effect = QueryError("failed to query roots: disk I/O error")
        service = RootService(store)
        with self.assertRaises(QueryError):
            service.translate_text("你好")
        with self.assertRaises(QueryError):
            service.segment_text("你好")
        with self.assertRaises(QueryError):
            service.is_translation_complete("你好")

    def test_uninitialized_store(self):
        from rootify.store import Database

        service = RootService(WordRootStore(Database(os.path.join(self.tmp, "other.db"))))
        with self.assertRaises(StoreUnavailable):
            service.segment_text("你好")


if __name__ == "__main__":
    unittest.main()

# tests/test_schedule.py
# PURE HELPERS – NO DATABASE

from django.test import SimpleTestCase

from core.exceptions import ScheduleException
from core.hashing import canonical_json, content_hash
from programs import schedule


def item(item_id, item_type="exercise_template"):
    return {"id": item_id, "type": item_type}


class TestContentHash(SimpleTestCase):

    def test_key_order_does_not_matter(self):
        self.assertEqual(content_hash({"a": 1, "b": [1, 2]}), content_hash({"b": [1, 2], "a": 1}))

    def test_canonical_form_has_no_whitespace(self):
        self.assertEqual(canonical_json({"b": 1, "a": None}), '{"a":null,"b":1}')

    def test_different_content_differs(self):
        self.assertNotEqual(content_hash([1, 2]), content_hash([2, 1]))


class TestNormalizeSchedule(SimpleTestCase):

    # ---------- SHAPE ----------

    def test_empty_schedule_is_one_empty_week(self):
        self.assertEqual(schedule.normalize_schedule(None), [[[] for _ in range(7)]])
        self.assertEqual(schedule.normalize_schedule([]), [[[] for _ in range(7)]])

    def test_short_week_is_padded(self):
        normalized = schedule.normalize_schedule([[[item("a")]]])
        self.assertEqual(len(normalized[0]), 7)
        self.assertEqual(normalized[0][0], [item("a")])
        self.assertEqual(normalized[0][6], [])

    def test_extra_days_are_dropped(self):
        week = [[item(str(i))] for i in range(9)]
        normalized = schedule.normalize_schedule([week])
        self.assertEqual(len(normalized[0]), 7)
        self.assertEqual(normalized[0][6], [item("6")])

    def test_wrapped_days_are_flattened(self):
        normalized = schedule.normalize_schedule([[{"exercises": [item("g", "group")]}, {"note": "rest"}]])
        self.assertEqual(normalized[0][0], [item("g", "group")])
        self.assertEqual(normalized[0][1], [])

    def test_extra_item_keys_are_stripped(self):
        normalized = schedule.normalize_schedule([[[{"id": "a", "type": "group", "label": "x"}]]])
        self.assertEqual(normalized[0][0], [item("a", "group")])

    def test_null_week_becomes_empty(self):
        normalized = schedule.normalize_schedule([None, [[item("a")]]])
        self.assertEqual(normalized[0], [[] for _ in range(7)])
        self.assertEqual(normalized[1][0], [item("a")])

    def test_wrapped_and_flat_forms_hash_equal(self):
        flat = [[[item("a")], [], [item("b", "group")]]]
        wrapped = [[{"exercises": [item("a")]}, {"exercises": []}, {"exercises": [item("b", "group")]}]]
        self.assertEqual(schedule.schedule_hash(flat), schedule.schedule_hash(wrapped))

    # ---------- REJECTED INPUT ----------

    def test_unknown_item_type(self):
        with self.assertRaises(ScheduleException):
            schedule.normalize_schedule([[[{"id": "a", "type": "video"}]]])

    def test_item_without_id(self):
        with self.assertRaises(ScheduleException):
            schedule.normalize_schedule([[[{"type": "group"}]]])

    def test_schedule_must_be_list(self):
        with self.assertRaises(ScheduleException):
            schedule.normalize_schedule({"weeks": 1})

    def test_day_must_be_list(self):
        with self.assertRaises(ScheduleException):
            schedule.normalize_schedule([["not a day"]])


class TestPatientOverride(SimpleTestCase):

    def setUp(self):
        self.base = schedule.normalize_schedule([[[item("a")], [item("b")]]])

    def test_override_day_replaces_base_day(self):
        merged = schedule.merge_with_override(self.base, [[[], [item("c")]]])
        self.assertEqual(merged[0][0], [item("a")])
        self.assertEqual(merged[0][1], [item("c")])

    def test_empty_override_days_keep_base(self):
        merged = schedule.merge_with_override(self.base, [[[], []]])
        self.assertEqual(merged, self.base)

    def test_override_past_base_grows_schedule(self):
        merged = schedule.merge_with_override(self.base, [[], [[], [], [item("z")]]])
        self.assertEqual(len(merged), 2)
        self.assertEqual(merged[1][2], [item("z")])
        self.assertEqual(merged[1][0], [])

    def test_no_override_copies_base(self):
        merged = schedule.merge_with_override(self.base, None)
        self.assertEqual(merged, self.base)
        merged[0][0].append(item("x"))
        self.assertEqual(self.base[0][0], [item("a")])

    def test_no_base_uses_override(self):
        merged = schedule.merge_with_override(None, [[[item("c")]]])
        self.assertEqual(merged[0][0], [item("c")])
        self.assertEqual(schedule.merge_with_override(None, None), [])


class TestScheduleReferences(SimpleTestCase):

    def test_referenced_ids_are_distinct_in_order(self):
        stored = [
            [[item("t2"), item("g1", "group")], [item("t1"), item("t2")]],
            [[item("g1", "group"), item("g2", "group")]],
        ]
        template_ids, group_ids = schedule.referenced_ids(stored)
        self.assertEqual(template_ids, ["t2", "t1"])
        self.assertEqual(group_ids, ["g1", "g2"])

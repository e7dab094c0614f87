"""Tests for meter.events."""

import unittest
from datetime import datetime

from meter.events import ERROR, INFO, SUCCESS, EventLog


def _fixed_now():
    return datetime(2024, 1, 1, 9, 5, 7)


class TestEventLog(unittest.TestCase):
    def test_newest_first(self):
        log = EventLog(now=_fixed_now)
        log.add(INFO, "first")
        log.add(SUCCESS, "second")
        self.assertEqual([e.message for e in log.entries], ["second", "first"])

    def test_bounded_to_fifty(self):
        log = EventLog(now=_fixed_now)
        for i in range(60):
            log.add(INFO, f"m{i}")
        self.assertEqual(len(log), 50)
        self.assertEqual(log.entries[0].message, "m59")
        self.assertEqual(log.entries[-1].message, "m10")

    def test_time_format(self):
        entry = EventLog(now=_fixed_now).add(ERROR, "Connection Lost")
        self.assertEqual(entry.time, "09:05:07")
        self.assertEqual(entry.to_dict(), {"time": "09:05:07", "type": "error",
                                           "message": "Connection Lost"})

    def test_unknown_kind(self):
        log = EventLog()
        with self.assertRaises(ValueError):
            log.add("warning", "nope")
        self.assertEqual(len(log), 0)

    def test_on_entry_callback(self):
        seen = []
        log = EventLog(now=_fixed_now)
        log.on_entry = seen.append
        log.add(INFO, "hello")
        self.assertEqual([e.message for e in seen], ["hello"])

    def test_mirrored_to_logging(self):
        log = EventLog(now=_fixed_now)
        with self.assertLogs("meter.events", level="ERROR") as cm:
            log.add(ERROR, "Speed test failed (Network Error)")
        self.assertIn("Speed test failed", cm.output[0])

    def test_entries_is_a_copy(self):
        log = EventLog()
        log.add(INFO, "x")
        log.entries.clear()
        self.assertEqual(len(log), 1)

    def test_clear(self):
        log = EventLog()
        log.add(INFO, "x")
        log.clear()
        self.assertEqual(log.entries, [])


if __name__ == "__main__":
    unittest.main()

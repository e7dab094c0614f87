"""Tests for meter.monitor."""

import asyncio
import unittest

from fakes import FakeProbe

from meter.events import ERROR, SUCCESS, EventLog
from meter.monitor import ConnectivityMonitor


class FlakyProbe(FakeProbe):
    """Ping succeeds or fails according to a scripted list of booleans."""

    def __init__(self, script):
        super().__init__()
        self.script = list(script)

    async def _ping(self):
        ok = self.script[min(self.ping_calls, len(self.script) - 1)]
        self.fail_ping_at = None if ok else self.ping_calls
        return await super()._ping()


def _messages(log):
    return [(e.kind, e.message) for e in reversed(log.entries)]


class TestConnectivityMonitor(unittest.IsolatedAsyncioTestCase):
    async def test_online_from_the_start_is_silent(self):
        log = EventLog()
        monitor = ConnectivityMonitor(FlakyProbe([True, True]), log)
        self.assertTrue(await monitor.check())
        self.assertTrue(await monitor.check())
        self.assertEqual(log.entries, [])
        self.assertTrue(monitor.online)

    async def test_transitions_logged_once_each(self):
        log = EventLog()
        monitor = ConnectivityMonitor(FlakyProbe([True, False, False, True, True]), log)
        results = [await monitor.check() for _ in range(5)]

        self.assertEqual(results, [True, False, False, True, True])
        self.assertEqual(_messages(log), [
            (ERROR, "Connection Lost"),
            (SUCCESS, "Connection Restored"),
        ])

    async def test_offline_at_start(self):
        log = EventLog()
        monitor = ConnectivityMonitor(FlakyProbe([False, True]), log)
        await monitor.check()
        await monitor.check()
        self.assertEqual(_messages(log), [
            (ERROR, "Connection Lost"),
            (SUCCESS, "Connection Restored"),
        ])

    async def test_periodic_checks_survive_offline_results(self):
        log = EventLog()
        probe = FlakyProbe([False])
        monitor = ConnectivityMonitor(probe, log, interval=0.001)
        monitor.start()
        while probe.ping_calls < 3:
            await asyncio.sleep(0.001)
        monitor.stop()
        await monitor.wait()

        self.assertGreaterEqual(probe.ping_calls, 3)
        self.assertFalse(monitor.online)
        self.assertEqual(_messages(log), [(ERROR, "Connection Lost")])


if __name__ == "__main__":
    unittest.main()

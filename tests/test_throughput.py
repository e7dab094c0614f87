"""Tests for meter.download -- time-boxed concurrent batch sampling."""

import unittest

from fakes import FakeClock, FakeProbe, budget_for, durations_for

from meter.constants import BITS_PER_MEGABIT
from meter.download import ThroughputResult, ThroughputSample, ThroughputSampler
from meter.exceptions import AggregationError, ProbeError

BITS = BITS_PER_MEGABIT  # 1 Mbit resource keeps the arithmetic readable


async def _measure(speeds, concurrency=1, **probe_kwargs):
    clock = FakeClock()
    durations = durations_for(speeds, BITS, concurrency)
    probe = FakeProbe(clock=clock, batch_durations=durations, concurrency=concurrency, **probe_kwargs)
    sampler = ThroughputSampler(probe, url=probe.download_url, clock=clock)
    result = await sampler.measure(
        resource_size_bits=BITS,
        concurrency=concurrency,
        time_budget_ms=budget_for(durations),
    )
    return result, probe


class TestThroughputSampler(unittest.IsolatedAsyncioTestCase):
    async def test_trimmed_mean_of_three(self):
        result, _ = await _measure([10.0, 12.0, 100.0])
        self.assertEqual(len(result.samples), 3)
        self.assertAlmostEqual(result.final_mbps, 12.0)

    async def test_two_samples_plain_average(self):
        result, _ = await _measure([50.0, 70.0])
        self.assertEqual(len(result.samples), 2)
        self.assertAlmostEqual(result.final_mbps, 60.0)

    async def test_single_sample(self):
        result, _ = await _measure([33.0])
        self.assertAlmostEqual(result.final_mbps, 33.0)

    async def test_many_samples_trim_only_one_per_side(self):
        speeds = [5.0, 40.0, 40.0, 40.0, 40.0, 40.0, 40.0, 40.0, 400.0]
        result, _ = await _measure(speeds)
        self.assertEqual(len(result.samples), 9)
        self.assertAlmostEqual(result.final_mbps, 40.0)

    async def test_batches_run_concurrently(self):
        result, probe = await _measure([20.0, 30.0], concurrency=4)
        self.assertEqual(probe.download_calls, 8)
        self.assertEqual(probe.max_in_flight, 4)
        self.assertEqual(result.batches, 2)
        self.assertAlmostEqual(result.final_mbps, 25.0)

    async def test_running_mean_published_per_batch(self):
        clock = FakeClock()
        durations = durations_for([50.0, 70.0, 30.0], BITS)
        probe = FakeProbe(clock=clock, batch_durations=durations)
        sampler = ThroughputSampler(probe, url=probe.download_url, clock=clock)

        seen = []
        sampler.on_sample = lambda s, running, elapsed: seen.append((s.mbps, running, elapsed))
        await sampler.measure(BITS, 1, budget_for(durations))

        self.assertEqual(len(seen), 3)
        self.assertAlmostEqual(seen[0][1], 50.0)
        self.assertAlmostEqual(seen[1][1], 60.0)
        self.assertAlmostEqual(seen[2][1], 50.0)
        elapsed = [e for _, _, e in seen]
        self.assertEqual(elapsed, sorted(elapsed))

    async def test_budget_overshoot_finishes_last_batch(self):
        result, _ = await _measure([10.0, 1.0])
        # second batch takes 1 s and starts just before the budget runs out
        self.assertAlmostEqual(result.duration_ms, 1100.0)
        self.assertEqual(len(result.samples), 2)

    async def test_samples_are_timestamped(self):
        result, _ = await _measure([10.0, 20.0])
        stamps = [s.measured_at for s in result.samples]
        self.assertAlmostEqual(stamps[0], 0.1)
        self.assertAlmostEqual(stamps[1], 0.15)

    async def test_failed_member_aborts_the_phase(self):
        clock = FakeClock()
        durations = durations_for([10.0, 10.0, 10.0], BITS, 3)
        probe = FakeProbe(clock=clock, batch_durations=durations, concurrency=3, fail_batch_at=1)
        sampler = ThroughputSampler(probe, url=probe.download_url, clock=clock)
        with self.assertRaises(ProbeError):
            await sampler.measure(BITS, 3, budget_for(durations))
        # no third batch was started
        self.assertEqual(probe.download_calls, 6)
        self.assertEqual(probe.in_flight, 0)

    async def test_zero_budget_collects_nothing(self):
        probe = FakeProbe()
        sampler = ThroughputSampler(probe, url=probe.download_url, clock=FakeClock())
        with self.assertRaises(AggregationError):
            await sampler.measure(BITS, 1, 0)
        self.assertEqual(probe.download_calls, 0)

    async def test_aggregation_error_is_a_probe_error(self):
        self.assertTrue(issubclass(AggregationError, ProbeError))

    async def test_invalid_concurrency(self):
        sampler = ThroughputSampler(FakeProbe(), clock=FakeClock())
        with self.assertRaises(ValueError):
            await sampler.measure(BITS, 0, 1000)
        with self.assertRaises(ValueError):
            await sampler.measure(BITS, 33, 1000)


class TestThroughputResult(unittest.TestCase):
    def test_calculate(self):
        r = ThroughputResult(samples=[
            ThroughputSample(mbps=10.0, measured_at=1.0),
            ThroughputSample(mbps=12.0, measured_at=2.0),
            ThroughputSample(mbps=100.0, measured_at=3.0),
        ])
        r.calculate()
        self.assertAlmostEqual(r.final_mbps, 12.0)
        self.assertEqual(r.speeds, [10.0, 12.0, 100.0])

    def test_to_dict(self):
        r = ThroughputResult(
            samples=[ThroughputSample(mbps=50.123, measured_at=1.0)],
            final_mbps=50.123,
            duration_ms=6000.0,
            batches=1,
        )
        d = r.to_dict()
        self.assertEqual(d["speed_mbps"], 50.12)
        self.assertEqual(d["samples"], [50.12])
        self.assertEqual(d["batches"], 1)


if __name__ == "__main__":
    unittest.main()

"""Unit tests for ui.output -- JSON creation and text formatting."""

import json
import os
import tempfile
import unittest

from meter.models import Metrics, NetworkInfo
from meter.qos import classify
from ui.output import create_result_json, format_text_result, save_json, save_report


def _metrics():
    return Metrics(download=60.004, upload=18.0, ping=21.0, jitter=4.0, signal_strength=79.0)


class TestCreateResultJson(unittest.TestCase):
    def _make(self, **overrides):
        defaults = dict(
            metrics=_metrics(),
            network=NetworkInfo(ip="203.0.113.5", isp="ExampleISP"),
            latency_results={"latency_ms": 21.0, "jitter_ms": 4.0, "samples": [20.0, 22.0]},
            download_results={"speed_mbps": 60.0, "samples": [50.0, 70.0], "batches": 2},
        )
        defaults.update(overrides)
        return create_result_json(**defaults)

    def test_basic_structure(self):
        r = self._make()
        for key in ("timestamp", "network", "metrics", "upload", "latency", "download"):
            self.assertIn(key, r)
        self.assertNotIn("qos", r)

    def test_metrics_rounded(self):
        m = self._make()["metrics"]
        self.assertEqual(m["download"], 60.0)
        self.assertEqual(m["signalStrength"], 79.0)

    def test_upload_flagged_as_estimate(self):
        up = self._make()["upload"]
        self.assertTrue(up["estimated"])
        self.assertEqual(up["speed_mbps"], 18.0)

    def test_optional_phases_omitted(self):
        r = self._make(latency_results=None, download_results=None)
        self.assertNotIn("latency", r)
        self.assertNotIn("download", r)

    def test_qos_included(self):
        r = self._make(qos=classify(_metrics()))
        self.assertEqual(len(r["qos"]), 4)
        self.assertEqual(r["qos"][0], {"name": "4K Streaming", "pass": True})

    def test_network(self):
        self.assertEqual(self._make()["network"]["isp"], "ExampleISP")

    def test_serialisable(self):
        json.dumps(self._make(qos=classify(_metrics())))


class TestFiles(unittest.TestCase):
    def test_save_json_roundtrip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "result.json")
            save_json({"download": 60.0}, path)
            with open(path) as f:
                self.assertEqual(json.load(f), {"download": 60.0})
            self.assertEqual(os.listdir(tmpdir), ["result.json"])

    def test_save_report(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "history.csv")
            save_report("a,b\n1,2", path)
            with open(path) as f:
                self.assertEqual(f.read(), "a,b\n1,2\n")

    def test_unwritable_path(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "missing", "out.json")
            with self.assertRaises(IOError):
                save_json({}, path)


class TestFormatText(unittest.TestCase):
    def test_contents(self):
        text = format_text_result(_metrics(), "ExampleISP")
        self.assertIn("ISP: ExampleISP", text)
        self.assertIn("Ping: 21.0 ms (jitter: 4.0 ms)", text)
        self.assertIn("Download: 60.00 Mbps", text)
        self.assertIn("Upload (estimated): 18.00 Mbps", text)


if __name__ == "__main__":
    unittest.main()

# tests/test_run_log.py
from __future__ import annotations

import io
import json
import tempfile
import unittest
from pathlib import Path

from wp_posts.run_log import RunLogger


class TestRunLogger(unittest.TestCase):
    def test_writes_jsonl_to_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "logs" / "events.log"
            with RunLogger.open(path) as log:
                log.info("post_touched", post_id=42, extra="x")
                log.warning("gateway_retry", attempt=1)

            lines = path.read_text(encoding="utf-8").splitlines()

        first = json.loads(lines[0])
        self.assertEqual(first["event"], "post_touched")
        self.assertEqual(first["level"], "INFO")
        self.assertEqual(first["post_id"], "42")
        self.assertEqual(first["data"], {"extra": "x"})
        self.assertEqual(json.loads(lines[1])["level"], "WARN")
        self.assertNotIn("post_id", json.loads(lines[1]))

    def test_appends_by_default(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "events.log"
            with RunLogger.open(path) as log:
                log.info("one")
            with RunLogger.open(path) as log:
                log.info("two")
            events = [json.loads(ln)["event"] for ln in path.read_text(encoding="utf-8").splitlines()]
        self.assertEqual(events, ["one", "two"])

    def test_exception_includes_traceback_and_leaves_stream_open(self) -> None:
        stream = io.StringIO()
        log = RunLogger(stream=stream, session_id="s1")
        try:
            raise RuntimeError("bad thing")
        except RuntimeError as e:
            log.exception("command_failed", exc=e)
        log.close()

        record = json.loads(stream.getvalue())
        self.assertEqual(record["session_id"], "s1")
        self.assertEqual(record["data"]["error"]["type"], "RuntimeError")
        self.assertIn("bad thing", record["data"]["error"]["traceback"])
        self.assertFalse(stream.closed)

    def test_requires_a_target(self) -> None:
        with self.assertRaises(ValueError):
            RunLogger()


if __name__ == "__main__":
    unittest.main()

# tests/test_cli_smoke.py
from __future__ import annotations

import json
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path


def _run_cli(args: list[str], *, env_extra: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
    repo_root = Path(__file__).resolve().parents[1]

    env = dict(os.environ)
    env.pop("WP_USERNAME", None)
    env.pop("WP_PASSWORD", None)
    env.update(env_extra or {})

    existing_pp = env.get("PYTHONPATH", "")
    env["PYTHONPATH"] = f"{repo_root}{os.pathsep}{existing_pp}" if existing_pp else str(repo_root)

    return subprocess.run(
        [sys.executable, "-m", "wp_posts", *args],
        cwd=repo_root,
        env=env,
        capture_output=True,
        text=True,
    )


class TestCLISmoke(unittest.TestCase):
    def test_offline_scan_and_latest(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg_path = Path(td) / "config.yaml"
            cfg_path.write_text("{}", encoding="utf-8")
            log_path = Path(td) / "events.log"

            proc = _run_cli(
                ["scan", "--config", str(cfg_path), "--offline", "--batch-size", "2", "--log", str(log_path)]
            )
            self.assertEqual(proc.returncode, 0, msg=proc.stderr)
            self.assertIn("post_id=1 ", proc.stdout)
            self.assertIn("post_id=5 ", proc.stdout)
            self.assertIn("visited=3", proc.stdout)

            events = [
                json.loads(ln)["event"]
                for ln in log_path.read_text(encoding="utf-8").splitlines()
                if ln.strip()
            ]
            self.assertEqual(events[0], "command_started")
            self.assertIn("post_scan_completed", events)

            proc = _run_cli(["find", "2", "--config", str(cfg_path), "--offline"])
            self.assertEqual(proc.returncode, 0, msg=proc.stderr)
            payload = json.loads(proc.stdout)
            self.assertEqual(payload["identifier"], "2")
            self.assertEqual(payload["categories"], ["Training"])
            self.assertNotIn("author_id", payload)

    def test_exit_codes(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg_path = Path(td) / "config.yaml"
            cfg_path.write_text("{}", encoding="utf-8")

            proc = _run_cli(["find", "999", "--config", str(cfg_path), "--offline"])
            self.assertEqual(proc.returncode, 4, msg=proc.stderr)
            self.assertIn("999", proc.stderr)

            # No credentials in the environment.
            proc = _run_cli(["touch", "1", "--config", str(cfg_path)])
            self.assertEqual(proc.returncode, 2, msg=proc.stderr)
            self.assertIn("WP_USERNAME", proc.stderr)

            proc = _run_cli(["latest", "--config", str(Path(td) / "missing.yaml"), "--offline"])
            self.assertEqual(proc.returncode, 2, msg=proc.stderr)


if __name__ == "__main__":
    unittest.main()

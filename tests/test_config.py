# tests/test_config.py
from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from wp_posts.config import load_config, resolve_runtime_secrets
from wp_posts.errors import ConfigError
from wp_posts.retry import RetryConfig


_VALID_YAML = """\
wordpress:
  xmlrpc_url: https://blog.example.com/xmlrpc.php
  blog_id: 1
  username_env: WP_USERNAME
  password_env: WP_PASSWORD
  timeout_seconds: 15

repository:
  batch_size: 50

retry:
  max_attempts: 4
  base_delay_seconds: 1.0
  max_delay_seconds: 8.0
  jitter_ratio: 0.0
  retry_after_cap_seconds: 30
"""


class TestConfig(unittest.TestCase):
    def _write(self, td: str, text: str) -> Path:
        path = Path(td) / "config.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_load_config_ok(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg = load_config(self._write(td, _VALID_YAML))

        self.assertEqual(cfg.wordpress.xmlrpc_url, "https://blog.example.com/xmlrpc.php")
        self.assertEqual(cfg.repository.batch_size, 50)
        self.assertEqual(
            RetryConfig.from_settings(cfg.retry),
            RetryConfig(
                max_attempts=4,
                base_delay_seconds=1.0,
                max_delay_seconds=8.0,
                jitter_ratio=0.0,
                retry_after_cap_seconds=30.0,
            ),
        )

    def test_empty_file_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg = load_config(self._write(td, ""))
        self.assertEqual(cfg.repository.batch_size, 25)
        self.assertEqual(cfg.wordpress.username_env, "WP_USERNAME")

    def test_rejects_invalid_values(self) -> None:
        bad = [
            _VALID_YAML.replace("batch_size: 50", "batch_size: 0"),
            _VALID_YAML.replace("https://blog.example.com/xmlrpc.php", "ftp://nope"),
            _VALID_YAML.replace("max_delay_seconds: 8.0", "max_delay_seconds: 0.1"),
            _VALID_YAML + "unknown_section: {}\n",
            "- just\n- a list\n",
            "wordpress: [unclosed\n",
        ]
        for text in bad:
            with tempfile.TemporaryDirectory() as td:
                with self.assertRaises(ConfigError, msg=text):
                    load_config(self._write(td, text))

    def test_error_message_names_the_field(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = self._write(td, _VALID_YAML.replace("batch_size: 50", "batch_size: 0"))
            with self.assertRaises(ConfigError) as ctx:
                load_config(path)
        self.assertIn("repository.batch_size", str(ctx.exception))

    def test_missing_file(self) -> None:
        with self.assertRaises(ConfigError):
            load_config("/nonexistent/config.yaml")

    def test_resolve_runtime_secrets_requires_env(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg = load_config(self._write(td, _VALID_YAML))

        with self.assertRaises(ConfigError) as ctx:
            resolve_runtime_secrets(cfg, environ={"WP_USERNAME": "editor"})
        self.assertIn("WP_PASSWORD", str(ctx.exception))

        secrets = resolve_runtime_secrets(
            cfg, environ={"WP_USERNAME": " editor ", "WP_PASSWORD": "s3cret"}
        )
        self.assertEqual(secrets.username, "editor")
        self.assertEqual(secrets.password, "s3cret")


if __name__ == "__main__":
    unittest.main()

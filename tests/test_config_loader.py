import os
import tempfile
import unittest

from vmigrate.config_loader import ConfigLoader


class TestConfigLoader(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def _write(self, content):
        path = os.path.join(self.tmpdir.name, "migration.yaml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def test_missing_file_uses_defaults(self):
        with self.assertLogs("vmigrate", level="WARNING"):
            config = ConfigLoader(os.path.join(self.tmpdir.name, "nope.yaml"))
        self.assertEqual(config.get_max_retries(), 3)
        self.assertEqual(config.get_migration_timeout(), 600)
        self.assertEqual(config.get_poll_interval(), 10)
        self.assertEqual(config.get_retry_backoff(), 30)
        self.assertEqual(config.get_inter_vm_delay(), 5)
        self.assertTrue(config.is_live_migration_enabled())
        self.assertTrue(config.is_cold_migration_enabled())
        self.assertFalse(config.should_reinspect_on_retry())
        self.assertEqual(config.get_strategy(), "vm_count")
        self.assertEqual(config.get_hooks(), {})
        self.assertEqual(config.get_block_migration(), "auto")

    def test_defaults_are_not_shared_between_instances(self):
        missing = os.path.join(self.tmpdir.name, "nope.yaml")
        first = ConfigLoader(missing)
        first.config['migration']['max_retries'] = 9
        self.assertEqual(ConfigLoader(missing).get_max_retries(), 3)

    def test_file_values_override_defaults(self):
        path = self._write(
            "migration:\n"
            "  max_retries: 5\n"
            "  timeout_seconds: 120\n"
            "  enable_cold_migration: false\n"
            "  block_migration: false\n"
            "hooks:\n"
            "  post_migration: /usr/local/bin/notify --quiet\n"
        )
        config = ConfigLoader(path)
        self.assertEqual(config.get_max_retries(), 5)
        self.assertEqual(config.get_migration_timeout(), 120)
        self.assertEqual(config.get_poll_interval(), 10)
        self.assertFalse(config.is_cold_migration_enabled())
        self.assertFalse(config.get_block_migration())
        self.assertEqual(config.get_hooks(), {"post_migration": "/usr/local/bin/notify --quiet"})

    def test_invalid_yaml_falls_back_to_defaults(self):
        path = self._write("migration: [unclosed\n")
        with self.assertLogs("vmigrate", level="ERROR"):
            config = ConfigLoader(path)
        self.assertEqual(config.get_max_retries(), 3)

    def test_log_config_repeats_load_problem(self):
        config = ConfigLoader(self._write("migration: [unclosed\n"))
        with self.assertLogs("vmigrate", level="INFO") as logs:
            config.log_config()
        self.assertTrue(logs.output[0].startswith("ERROR:vmigrate:[ConfigLoader] Error parsing YAML"))

    def test_log_config_reports_source_file(self):
        path = self._write("{}\n")
        config = ConfigLoader(path)
        with self.assertLogs("vmigrate", level="INFO") as logs:
            config.log_config()
        self.assertIn(f"Configuration loaded from '{path}'", logs.output[0])

    def test_non_mapping_falls_back_to_defaults(self):
        path = self._write("- just\n- a list\n")
        with self.assertLogs("vmigrate", level="ERROR"):
            config = ConfigLoader(path)
        self.assertEqual(config.get_migration_timeout(), 600)

    def test_invalid_numbers_use_defaults(self):
        path = self._write("migration:\n  max_retries: zero\n  timeout_seconds: -5\n")
        config = ConfigLoader(path)
        with self.assertLogs("vmigrate", level="WARNING"):
            self.assertEqual(config.get_max_retries(), 3)
        self.assertEqual(config.get_migration_timeout(), 600)

    def test_unsupported_strategy_falls_back(self):
        path = self._write("load_balancing:\n  strategy: cpu\n")
        config = ConfigLoader(path)
        with self.assertLogs("vmigrate", level="WARNING"):
            self.assertEqual(config.get_strategy(), "vm_count")

    def test_boolean_strings(self):
        path = self._write("migration:\n  reinspect_on_retry: 'yes'\n  enable_live_migration: 'off'\n")
        config = ConfigLoader(path)
        self.assertTrue(config.should_reinspect_on_retry())
        self.assertFalse(config.is_live_migration_enabled())

    def test_get_missing_key_returns_default(self):
        config = ConfigLoader(self._write("{}\n"))
        self.assertEqual(config.get("nope", "missing", default=7), 7)


if __name__ == "__main__":
    unittest.main()

import unittest

from vmigrate.dependencies import check_dependencies, find_missing_dependencies
from vmigrate.exceptions import DependencyMissingError


def which_none(name):
    return None


def which_all(name):
    return f"/usr/bin/{name}"


class TestDependencies(unittest.TestCase):

    def test_nothing_missing(self):
        missing = find_missing_dependencies(hooks={"pre_migration": "notify"},
                                            environ={"OS_AUTH_URL": "https://keystone:5000/v3"},
                                            which=which_all)
        self.assertEqual(missing, [])

    def test_cloud_name_counts_as_credentials(self):
        self.assertEqual(find_missing_dependencies(cloud="prod", environ={}), [])

    def test_os_cloud_env_counts_as_credentials(self):
        self.assertEqual(find_missing_dependencies(environ={"OS_CLOUD": "prod"}), [])

    def test_missing_credentials(self):
        missing = find_missing_dependencies(environ={})
        self.assertEqual(len(missing), 1)
        self.assertIn("OpenStack credentials", missing[0])

    def test_missing_hook_executable(self):
        missing = find_missing_dependencies(hooks={"on_failure": "/opt/page --loud"},
                                            environ={"OS_CLOUD": "prod"}, which=which_none)
        self.assertEqual(missing, ["on_failure hook (/opt/page --loud)"])

    def test_missing_is_fatal(self):
        with self.assertRaises(DependencyMissingError) as ctx:
            check_dependencies(environ={})
        self.assertEqual(len(ctx.exception.missing), 1)

    def test_missing_is_a_warning_in_dry_run(self):
        with self.assertLogs("vmigrate", level="WARNING"):
            missing = check_dependencies(environ={}, dry_run=True)
        self.assertEqual(len(missing), 1)


if __name__ == "__main__":
    unittest.main()

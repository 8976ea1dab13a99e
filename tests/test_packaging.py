import os
import sys
import unittest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
SERVICE_ROOT = os.path.join(PROJECT_ROOT, 'chat_service')


@unittest.skipIf(sys.version_info < (3, 11), "tomllib needs Python 3.11")
class TestPackaging(unittest.TestCase):
    def setUp(self):
        import tomllib
        with open(os.path.join(PROJECT_ROOT, 'pyproject.toml'), 'rb') as f:
            self.pyproject = tomllib.load(f)

    def test_no_top_level_modules_installed(self):
        setuptools_config = self.pyproject["tool"]["setuptools"]
        self.assertEqual(setuptools_config["py-modules"], [])
        self.assertEqual(setuptools_config["packages"], [])
        self.assertNotIn("package-dir", setuptools_config)

    def test_service_modules_load_from_service_directory(self):
        import lifecycle
        self.assertEqual(os.path.dirname(os.path.abspath(lifecycle.__file__)), SERVICE_ROOT)


if __name__ == "__main__":
    unittest.main()

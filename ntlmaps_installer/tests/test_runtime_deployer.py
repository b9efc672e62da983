# Path and File Name : ntlmaps_installer/tests/test_runtime_deployer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests install tree creation and NTLMAPS program file deployment

"""
Tests for RuntimeLayout and RuntimeDeployer.
"""

import unittest
import tempfile
import shutil
import stat
import os
import pwd
import grp
from pathlib import Path
from unittest.mock import patch
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from ntlmaps_installer.accounts import ServiceAccount
from ntlmaps_installer.errors import MissingSourceError, ResourceCreationError
from ntlmaps_installer.runtime import RuntimeDeployer, RuntimeLayout
from ntlmaps_installer.runtime.layout import lchown
from ntlmaps_installer.tests.fakes import ChownRecorder, make_source


def _mode(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


class TestRuntimeLayout(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.root = self.temp_dir / "opt_ntlmaps"
        self.owner = ServiceAccount("ntlmaps", "ntlmaps", self.root, "/bin/false")
        self.chown = ChownRecorder()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_creates_tree_with_owner_and_mode(self):
        dirs = RuntimeLayout(0o755, chown=self.chown).ensure_tree(self.root, ["lib", "logs"], self.owner)

        self.assertEqual(dirs, [self.root, self.root / "lib", self.root / "logs"])
        for d in dirs:
            self.assertTrue(d.is_dir())
            self.assertIn(d, self.chown.paths())
        self.assertTrue(all(c[1:] == ("ntlmaps", "ntlmaps") for c in self.chown.calls))
        self.assertEqual(_mode(self.root), 0o755)

    def test_existing_tree_is_not_an_error(self):
        layout = RuntimeLayout(0o755, chown=self.chown)
        layout.ensure_tree(self.root, ["lib", "logs"], self.owner)
        (self.root / "logs" / "proxy.log").write_text("kept\n")
        layout.ensure_tree(self.root, ["lib", "logs"], self.owner)
        self.assertEqual((self.root / "logs" / "proxy.log").read_text(), "kept\n")

    def test_symlinks_in_tree_are_not_chowned(self):
        outside = self.temp_dir / "shadow"
        outside.write_text("root:x\n")
        (self.root / "logs").mkdir(parents=True)
        (self.root / "logs" / "evil.log").symlink_to(outside)

        RuntimeLayout(0o755, chown=self.chown).ensure_tree(self.root, ["lib", "logs"], self.owner)

        self.assertNotIn(self.root / "logs" / "evil.log", self.chown.paths())
        self.assertNotIn(outside, self.chown.paths())

    def test_symlinked_subdirectory_is_replaced(self):
        outside = self.temp_dir / "etc"
        outside.mkdir()
        self.root.mkdir()
        (self.root / "logs").symlink_to(outside)

        RuntimeLayout(0o755, chown=self.chown).ensure_tree(self.root, ["lib", "logs"], self.owner)

        self.assertFalse((self.root / "logs").is_symlink())
        self.assertTrue((self.root / "logs").is_dir())
        self.assertTrue(outside.is_dir())

    def test_default_chown_does_not_follow_symlinks(self):
        link = self.temp_dir / "link"
        link.symlink_to(self.temp_dir / "target")
        user = pwd.getpwuid(os.getuid()).pw_name
        group = grp.getgrgid(os.getgid()).gr_name

        with patch('os.chown') as chown:
            lchown(link, user, group)

        chown.assert_called_once_with(link, os.getuid(), os.getgid(), follow_symlinks=False)

    def test_chown_failure_raises(self):
        def failing_chown(path, user=None, group=None):
            raise LookupError(f"no such user: {user}")

        with self.assertRaises(ResourceCreationError):
            RuntimeLayout(chown=failing_chown).ensure_tree(self.root, ["lib"], self.owner)


class TestRuntimeDeployer(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.source = make_source(self.temp_dir)
        self.root = self.temp_dir / "opt_ntlmaps"
        self.root.mkdir()
        self.owner = ServiceAccount("ntlmaps", "ntlmaps", self.root, "/bin/false")
        self.chown = ChownRecorder()
        self.deployer = RuntimeDeployer(file_mode=0o644, chown=self.chown)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_missing_lib_raises(self):
        shutil.rmtree(self.source / "lib")
        with self.assertRaises(MissingSourceError):
            self.deployer.check_sources(self.source)

    def test_missing_main_raises(self):
        (self.source / "main.py").unlink()
        with self.assertRaises(MissingSourceError):
            self.deployer.check_sources(self.source)

    def test_missing_source_touches_nothing(self):
        empty = self.temp_dir / "empty"
        empty.mkdir()
        with self.assertRaises(MissingSourceError):
            self.deployer.install_artifacts(empty, self.root, self.owner)
        self.assertEqual(list(self.root.iterdir()), [])
        self.assertEqual(self.chown.calls, [])

    def test_installs_program_files(self):
        self.deployer.install_artifacts(self.source, self.root, self.owner)

        self.assertEqual((self.root / "main.py").read_text(), "import server\nserver.main()\n")
        self.assertTrue((self.root / "lib" / "server.py").is_file())
        self.assertTrue((self.root / "lib" / "utils" / "__init__.py").is_file())
        self.assertEqual(_mode(self.root / "main.py"), 0o644)
        self.assertEqual(_mode(self.root / "lib" / "server.py"), 0o644)
        self.assertIn(self.root / "lib" / "utils" / "__init__.py", self.chown.paths())

    def test_skips_bytecode_caches(self):
        cache = self.source / "lib" / "utils" / "__pycache__"
        cache.mkdir()
        (cache / "x.cpython-311.pyc").write_bytes(b"\0")
        (self.source / "lib" / "__pycache__").mkdir()

        self.deployer.install_artifacts(self.source, self.root, self.owner)

        self.assertFalse((self.root / "lib" / "__pycache__").exists())
        self.assertFalse((self.root / "lib" / "utils" / "__pycache__").exists())

    def test_rerun_replaces_previous_copy(self):
        self.deployer.install_artifacts(self.source, self.root, self.owner)
        (self.source / "main.py").write_text("# v2\n")
        (self.root / "lib" / "utils" / "stale.py").write_text("")

        self.deployer.install_artifacts(self.source, self.root, self.owner)

        self.assertEqual((self.root / "main.py").read_text(), "# v2\n")
        self.assertFalse((self.root / "lib" / "utils" / "stale.py").exists())

    def test_symlinked_destination_is_replaced_not_written_through(self):
        victim = self.temp_dir / "passwd"
        victim.write_text("root:x:0:0\n")
        (self.root / "lib").mkdir()
        (self.root / "lib" / "server.py").symlink_to(victim)
        (self.root / "main.py").symlink_to(victim)

        self.deployer.install_artifacts(self.source, self.root, self.owner)

        self.assertEqual(victim.read_text(), "root:x:0:0\n")
        self.assertFalse((self.root / "lib" / "server.py").is_symlink())
        self.assertEqual((self.root / "lib" / "server.py").read_text(), "def main():\n    pass\n")
        self.assertFalse((self.root / "main.py").is_symlink())
        self.assertNotIn(victim, self.chown.paths())

    def test_symlinked_library_dir_is_replaced(self):
        outside = self.temp_dir / "elsewhere"
        outside.mkdir()
        (self.root / "lib").symlink_to(outside)

        self.deployer.install_artifacts(self.source, self.root, self.owner)

        self.assertFalse((self.root / "lib").is_symlink())
        self.assertEqual(list(outside.iterdir()), [])

    def test_stray_symlink_is_not_chmodded(self):
        victim = self.temp_dir / "shadow"
        victim.write_text("secret\n")
        os.chmod(victim, 0o600)
        (self.root / "lib").mkdir()
        (self.root / "lib" / "evil.py").symlink_to(victim)

        self.deployer.install_artifacts(self.source, self.root, self.owner)

        self.assertEqual(_mode(victim), 0o600)


if __name__ == '__main__':
    unittest.main()

# Path and File Name : ntlmaps_installer/tests/test_systemd_writer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests the hardened NTLMAPS systemd unit and its registration

"""
Tests for SystemdWriter.
Verifies hardening directives, account binding and daemon-reload after write.
"""

import unittest
import tempfile
import shutil
import stat
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from ntlmaps_installer.errors import ResourceCreationError
from ntlmaps_installer.services import SystemdWriter
from ntlmaps_installer.system import SystemdServiceManager
from ntlmaps_installer.tests.fakes import FakeRunner, make_params


class TestSystemdWriter(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.unit_dir = self.temp_dir / "systemd"
        self.runner = FakeRunner()
        self.writer = SystemdWriter(SystemdServiceManager(self.runner), unit_dir=self.unit_dir)
        self.params = make_params(Path("/srv"), home=Path("/srv/ntlmaps"), user="proxy", group="proxies")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_unit_binds_account_and_install_root(self):
        lines = self.writer.generate_unit(self.params).splitlines()

        self.assertIn("User=proxy", lines)
        self.assertIn("Group=proxies", lines)
        self.assertIn("WorkingDirectory=/srv/ntlmaps", lines)
        self.assertIn("ExecStart=/usr/bin/python3 /srv/ntlmaps/main.py", lines)
        self.assertIn("ReadWritePaths=/srv/ntlmaps", lines)

    def test_unit_hardening(self):
        lines = self.writer.generate_unit(self.params).splitlines()

        for directive in (
            "Type=simple",
            "Restart=always",
            "RestartSec=10",
            "NoNewPrivileges=true",
            "PrivateTmp=true",
            "ProtectSystem=strict",
            "ProtectHome=true",
            "CapabilityBoundingSet=CAP_NET_BIND_SERVICE",
            "AmbientCapabilities=CAP_NET_BIND_SERVICE",
            "BindReadOnlyPaths=/etc/resolv.conf",
            "WantedBy=multi-user.target",
        ):
            self.assertIn(directive, lines)

    def test_register_writes_then_reloads(self):
        unit_file = self.writer.register_service(self.params)

        self.assertEqual(unit_file, self.unit_dir / "ntlmaps.service")
        self.assertEqual(unit_file.read_text(), self.writer.generate_unit(self.params))
        self.assertEqual(stat.S_IMODE(unit_file.stat().st_mode), 0o644)
        self.assertEqual(self.runner.commands, [['systemctl', 'daemon-reload']])

    def test_register_overwrites_existing_unit(self):
        self.unit_dir.mkdir()
        (self.unit_dir / "ntlmaps.service").write_text("[Service]\nExecStart=/bin/true\n")

        unit_file = self.writer.register_service(self.params)

        self.assertNotIn("/bin/true", unit_file.read_text())

    def test_reload_failure_raises(self):
        self.runner.returncodes[('systemctl', 'daemon-reload')] = 1
        with self.assertRaises(ResourceCreationError):
            self.writer.register_service(self.params)

    def test_remove_unit_when_absent(self):
        self.assertFalse(self.writer.remove_unit(self.params))
        self.writer.register_service(self.params)
        self.assertTrue(self.writer.remove_unit(self.params))
        self.assertFalse((self.unit_dir / "ntlmaps.service").exists())


if __name__ == '__main__':
    unittest.main()

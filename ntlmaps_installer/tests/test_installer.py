# Path and File Name : ntlmaps_installer/tests/test_installer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: End-to-end tests of the install pipeline and CLI entry point against fake host subsystems

"""
Tests for NtlmapsInstaller and main().

Every host path is redirected into a temp directory; host commands go to
a recording FakeRunner, users and groups to a FakeIdentity.
"""

import unittest
import tempfile
import shutil
import stat
import io
import os
from pathlib import Path
from unittest.mock import patch
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from ntlmaps_installer.errors import (
    ActivationError,
    InstallLockError,
    InsufficientPrivilegeError,
    MissingSourceError,
)
from ntlmaps_installer.install_lock import InstallLock
from ntlmaps_installer.installer import NtlmapsInstaller, main
from ntlmaps_installer.reporter import render_summary
from ntlmaps_installer.tests.fakes import (
    IS_ACTIVE,
    ChownRecorder,
    FakeIdentity,
    FakeRunner,
    make_params,
    make_profile,
    make_source,
)


class TestNtlmapsInstaller(unittest.TestCase):
    """Install pipeline behaviour."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.profile = make_profile(self.temp_dir)
        self.params = make_params(self.temp_dir)
        self.source = make_source(self.temp_dir)
        self.events = []
        self.runner = FakeRunner(binaries=('systemctl', 'firewall-cmd'), events=self.events)
        self.identity = FakeIdentity(events=self.events)
        self.chown = ChownRecorder(events=self.events)
        self.stdout = patch('sys.stdout', new_callable=io.StringIO)
        self.stdout.start()

    def tearDown(self):
        self.stdout.stop()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _installer(self, euid=0, source=None, params=None):
        return NtlmapsInstaller(
            params or self.params,
            profile=self.profile,
            source_dir=source or self.source,
            runner=self.runner,
            identity=self.identity,
            geteuid=lambda: euid,
            chown=self.chown,
            sleep=lambda seconds: None,
            confirm=lambda question: False,
        )

    def _host_untouched(self):
        self.assertEqual(self.identity.calls, [])
        self.assertEqual(self.runner.commands, [])
        self.assertEqual(self.chown.calls, [])
        self.assertFalse(self.params.home.exists())
        self.assertFalse(self.profile.systemd_unit_dir.exists())
        self.assertFalse(self.profile.logrotate_dir.exists())
        self.assertFalse(self.profile.state_dir.exists())

    def test_full_install(self):
        installer = self._installer()
        installer.run()

        home = self.params.home
        self.assertEqual(len(installer.completed_steps), len(installer.install_steps()))
        self.assertTrue((home / "main.py").is_file())
        self.assertTrue((home / "lib" / "server.py").is_file())
        self.assertTrue((home / "logs").is_dir())
        self.assertEqual(stat.S_IMODE((home / "server.cfg").stat().st_mode), 0o600)
        self.assertEqual(stat.S_IMODE(home.stat().st_mode), 0o755)
        self.assertTrue((self.profile.systemd_unit_dir / "ntlmaps.service").is_file())
        self.assertTrue((self.profile.logrotate_dir / "ntlmaps").is_file())

        state = installer.state_store.load_state()
        self.assertTrue(state["firewall_rule_added"])
        self.assertEqual(state["home"], str(home))

        self.assertTrue(self.runner.ran('firewall-cmd', '--permanent', '--add-port=5865/tcp'))
        self.assertTrue(self.runner.ran('systemctl', 'enable', 'ntlmaps.service'))
        self.assertTrue(self.runner.ran('systemctl', 'start', 'ntlmaps.service'))
        self.assertIn("NTLMAPS installation completed!", sys.stdout.getvalue())

    def test_step_banners(self):
        self._installer().run()
        output = sys.stdout.getvalue()
        self.assertIn("[1/11] Checking NTLMAPS source files...", output)
        self.assertIn("[11/11] Installation summary...", output)

    def test_account_exists_before_ownership_assigned(self):
        self._installer().run()

        kinds = [e[0] if e[0] != 'identity' else e[1] for e in self.events]
        self.assertLess(kinds.index('useradd'), kinds.index('chown'))
        self.assertLess(kinds.index('groupadd'), kinds.index('useradd'))

    def test_unit_written_before_service_started(self):
        self._installer().run()

        commands = self.runner.commands
        reload_at = commands.index(['systemctl', 'daemon-reload'])
        self.assertLess(reload_at, commands.index(['systemctl', 'enable', 'ntlmaps.service']))
        self.assertLess(commands.index(['systemctl', 'enable', 'ntlmaps.service']),
                        commands.index(['systemctl', 'start', 'ntlmaps.service']))

    def test_rerun_is_idempotent(self):
        self._installer().run()
        first_unit = (self.profile.systemd_unit_dir / "ntlmaps.service").read_text()

        self._installer().run()

        self.assertEqual(len(self.identity.created('groupadd')), 1)
        self.assertEqual(len(self.identity.created('useradd')), 1)
        self.assertEqual((self.profile.systemd_unit_dir / "ntlmaps.service").read_text(), first_unit)
        self.assertEqual(stat.S_IMODE(self.params.config_path.stat().st_mode), 0o600)

    def test_missing_source_changes_nothing(self):
        empty = self.temp_dir / "empty"
        empty.mkdir()
        installer = self._installer(source=empty)

        with self.assertRaises(MissingSourceError):
            installer.run()

        self.assertEqual(installer.completed_steps, [])
        self._host_untouched()

    def test_non_root_changes_nothing(self):
        with self.assertRaises(InsufficientPrivilegeError):
            self._installer(euid=1000).run()
        self._host_untouched()

    def test_activation_failure_leaves_files_in_place(self):
        self.runner.returncodes[IS_ACTIVE] = 3
        installer = self._installer()

        with self.assertRaises(ActivationError):
            installer.run()

        self.assertEqual(installer.completed_steps[-1], "Saving installation state")
        self.assertTrue(self.params.config_path.is_file())
        self.assertTrue((self.profile.systemd_unit_dir / "ntlmaps.service").is_file())
        self.assertIsNotNone(installer.state_store.load_state())
        self.assertFalse(self.runner.ran('systemctl', 'disable', 'ntlmaps.service'))

    def test_absent_firewall_is_not_fatal(self):
        self.runner.binaries.discard('firewall-cmd')
        installer = self._installer()
        installer.run()

        self.assertFalse(installer.firewall_rule_added)
        self.assertFalse(installer.state_store.load_state()["firewall_rule_added"])

    def test_concurrent_run_rejected(self):
        with InstallLock(self.profile.lock_file):
            with self.assertRaises(InstallLockError):
                self._installer().run()
        self.assertEqual(self.identity.calls, [])

    def test_install_then_uninstall(self):
        installed = make_params(self.temp_dir, port=8080)
        self._installer(params=installed).run()
        installer = self._installer()
        installer.uninstaller.confirm = lambda question: True

        report = installer.uninstall()

        self.assertTrue(report.unit_removed)
        self.assertTrue(report.state_removed)
        self.assertTrue(self.runner.ran('firewall-cmd', '--permanent', '--remove-port=8080/tcp'))
        self.assertFalse(self.params.home.exists())
        self.assertFalse((self.profile.systemd_unit_dir / "ntlmaps.service").exists())
        self.assertFalse((self.profile.logrotate_dir / "ntlmaps").exists())

    def test_uninstall_requires_root(self):
        with self.assertRaises(InsufficientPrivilegeError):
            self._installer(euid=1000).uninstall()
        self.assertEqual(self.runner.commands, [])

    def test_summary_lists_proxy_settings(self):
        summary = render_summary(self.params)
        self.assertIn("Listen Port: 5865", summary)
        self.assertIn("Parent Proxy: proxy.example.com:3128", summary)
        self.assertIn("export http_proxy=http://localhost:5865/", summary)
        self.assertIn("journalctl -u ntlmaps -f", summary)


@patch('ntlmaps_installer.installer.setup_logging')
class TestMain(unittest.TestCase):
    """CLI exit codes."""

    @patch('sys.stdout', new_callable=io.StringIO)
    def test_help_exits_zero(self, stdout, _logging):
        self.assertEqual(main(['--help']), 0)
        self.assertIn("NTLM_PORT=", stdout.getvalue())
        self.assertIn("--uninstall", stdout.getvalue())

    @patch('sys.stderr', new_callable=io.StringIO)
    def test_unknown_option_exits_one(self, stderr, _logging):
        self.assertEqual(main(['--bogus']), 1)
        self.assertIn("Unknown option", stderr.getvalue())

    @patch('ntlmaps_installer.installer.NtlmapsInstaller')
    @patch('sys.stderr', new_callable=io.StringIO)
    def test_abbreviated_uninstall_rejected(self, stderr, installer_cls, _logging):
        for argv in (['--uninst'], ['--un'], ['--sou', '/tmp']):
            self.assertEqual(main(argv), 1)
        installer_cls.assert_not_called()
        self.assertIn("Unknown option", stderr.getvalue())

    @patch('ntlmaps_installer.installer.NtlmapsInstaller')
    @patch('sys.stderr', new_callable=io.StringIO)
    def test_yes_without_uninstall_rejected(self, stderr, installer_cls, _logging):
        self.assertEqual(main(['--yes']), 1)
        installer_cls.assert_not_called()
        self.assertIn("--yes is only valid together with --uninstall", stderr.getvalue())

    @patch('ntlmaps_installer.installer.NtlmapsInstaller')
    def test_yes_with_uninstall_confirms_purge(self, installer_cls, _logging):
        self.assertEqual(main(['--uninstall', '--yes']), 0)
        confirm = installer_cls.call_args.kwargs['confirm']
        self.assertTrue(confirm("Remove user ntlmaps and directory /opt/ntlmaps? [y/N]: "))
        installer_cls.return_value.uninstall.assert_called_once_with()

    @patch('os.geteuid', return_value=1000)
    @patch('sys.stderr', new_callable=io.StringIO)
    def test_non_root_exits_one(self, stderr, _euid, _logging):
        self.assertEqual(main([]), 1)
        self.assertIn("must be run as root", stderr.getvalue())

    @patch('os.geteuid', return_value=1000)
    @patch('sys.stderr', new_callable=io.StringIO)
    def test_non_root_uninstall_exits_one(self, stderr, _euid, _logging):
        self.assertEqual(main(['--uninstall']), 1)
        self.assertIn("Uninstall failed", stderr.getvalue())

    @patch.dict(os.environ, {'NTLM_PORT': 'not-a-port'})
    @patch('sys.stderr', new_callable=io.StringIO)
    def test_invalid_parameter_exits_one(self, stderr, _logging):
        self.assertEqual(main([]), 1)
        self.assertIn("NTLM_PORT", stderr.getvalue())


if __name__ == '__main__':
    unittest.main()

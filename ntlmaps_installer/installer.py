# Path and File Name : ntlmaps_installer/installer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Main installer orchestrator - provisions NTLMAPS as a hardened systemd service, and tears it down

"""
NTLMAPS Installer: Main orchestrator for installation and teardown.

Install pipeline (strictly sequential, first failure aborts, no rollback):
  privilege check -> install lock -> source check -> account -> directories
  -> program files -> server.cfg -> systemd unit -> logrotate -> firewall
  -> install state -> enable/start/verify -> summary

Every step after the privilege check is idempotent; re-running the installer
is the documented recovery path after any failure or interruption.
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .accounts.account_provisioner import AccountProvisioner, ServiceAccount
from .config.config_writer import ConfigWriter
from .errors import (
    ActivationError,
    InstallerError,
    ParameterError,
    UnknownOptionError,
)
from .install_lock import InstallLock
from .install_state import InstallStateStore
from .logging_setup import setup_logging
from .parameters import InstallParameters, resolve_parameters
from .profile import InstallProfile, load_profile
from .reporter import show_info, usage_epilog
from .runtime.layout import ChownFn, RuntimeLayout, lchown
from .runtime.runtime_deployer import RuntimeDeployer
from .services.activator import ServiceActivator
from .services.firewall_registrar import FirewallRegistrar
from .services.logrotate_writer import LogrotateWriter
from .services.systemd_writer import SystemdWriter, file_sha256
from .system.command_runner import CommandRunner
from .system.firewall import Firewalld
from .system.identity import HostIdentity
from .system.privilege import PrivilegeGuard
from .system.service_manager import SystemdServiceManager
from .uninstaller import ConfirmFn, UninstallReport, Uninstaller, prompt_confirmation

logger = logging.getLogger(__name__)

Step = Tuple[str, Callable[[], None]]


class NtlmapsInstaller:
    """Main installer orchestrator."""

    VERSION = "1.0.0"

    def __init__(self,
                 params: InstallParameters,
                 profile: Optional[InstallProfile] = None,
                 source_dir: Optional[Path] = None,
                 runner: Optional[CommandRunner] = None,
                 identity: Optional[HostIdentity] = None,
                 geteuid: Optional[Callable[[], int]] = None,
                 chown: ChownFn = lchown,
                 sleep: Callable[[float], None] = time.sleep,
                 confirm: ConfirmFn = prompt_confirmation):
        self.params = params
        self.profile = profile if profile is not None else load_profile()
        self.source_dir = Path(source_dir) if source_dir is not None else Path.cwd()
        runner = runner if runner is not None else CommandRunner()
        profile = self.profile

        self.privilege_guard = PrivilegeGuard(geteuid)
        self.identity = identity if identity is not None else HostIdentity(runner)
        self.service_manager = SystemdServiceManager(runner)
        self.firewall = Firewalld(runner)
        self.lock = InstallLock(profile.lock_file)

        self.account_provisioner = AccountProvisioner(
            self.identity, shell=profile.account_shell, comment=profile.account_comment)
        self.layout = RuntimeLayout(root_mode=profile.root_mode, chown=chown)
        self.runtime_deployer = RuntimeDeployer(
            entry_point=profile.entry_point,
            library_dir=profile.library_dir,
            file_mode=profile.program_file_mode,
            chown=chown,
        )
        self.config_writer = ConfigWriter(mode=profile.config_mode, chown=chown)
        self.systemd_writer = SystemdWriter(
            self.service_manager,
            unit_dir=profile.systemd_unit_dir,
            description=profile.service_description,
            documentation=profile.service_documentation,
            python=profile.python,
            restart=profile.restart,
            restart_sec=profile.restart_sec,
            capabilities=profile.capabilities,
            unit_mode=profile.unit_mode,
        )
        self.logrotate_writer = LogrotateWriter(
            policy_dir=profile.logrotate_dir,
            cadence=profile.rotation_cadence,
            policy_mode=profile.policy_mode,
        )
        self.firewall_registrar = FirewallRegistrar(self.firewall)
        self.activator = ServiceActivator(
            self.service_manager, grace_seconds=profile.grace_seconds, sleep=sleep)
        self.state_store = InstallStateStore(profile.state_dir)
        self.uninstaller = Uninstaller(
            self.service_manager,
            self.systemd_writer,
            self.logrotate_writer,
            self.firewall_registrar,
            self.identity,
            self.state_store,
            confirm=confirm,
        )

        # Populated as the pipeline runs
        self.completed_steps: List[str] = []
        self.account: Optional[ServiceAccount] = None
        self.unit_path: Optional[Path] = None
        self.rotation_path: Optional[Path] = None
        self.firewall_rule_added = False

    # ------------------------------------------------------------------
    # Install steps
    # ------------------------------------------------------------------

    def _check_sources(self) -> None:
        # Before any mutation: a missing source must leave the host untouched
        self.runtime_deployer.check_sources(self.source_dir)

    def _create_user(self) -> None:
        p = self.params
        self.account = self.account_provisioner.ensure_account(p.user, p.group, p.home)

    def _create_directories(self) -> None:
        self.layout.ensure_tree(self.params.home, self.profile.subdirectories, self._owner())

    def _install_files(self) -> None:
        self.runtime_deployer.install_artifacts(self.source_dir, self.params.home, self._owner())

    def _create_config(self) -> None:
        self.config_writer.render_config(self.params.config_path, self.params, self._owner())

    def _create_service(self) -> None:
        self.unit_path = self.systemd_writer.register_service(self.params, self.profile.entry_point)

    def _create_logrotate(self) -> None:
        log_glob = str(self.params.logs_dir / self.profile.log_glob)
        self.rotation_path = self.logrotate_writer.register_rotation(
            self.params.service_name, log_glob, self.profile.rotation_count)

    def _setup_firewall(self) -> None:
        self.firewall_rule_added = self.firewall_registrar.open_port(self.params.port)

    def _save_state(self) -> None:
        state = self.state_store.create_state(
            self.params,
            firewall_rule_added=self.firewall_rule_added,
            unit_sha256=file_sha256(self.unit_path),
            logrotate_sha256=file_sha256(self.rotation_path),
            version=self.VERSION,
        )
        self.state_store.save_state(state)

    def _enable_service(self) -> None:
        self.activator.activate(self.params.unit_name)

    def _show_info(self) -> None:
        show_info(self.params)

    def _owner(self) -> ServiceAccount:
        if self.account is None:
            raise InstallerError("Service account must be provisioned before ownership is assigned")
        return self.account

    def install_steps(self) -> List[Step]:
        return [
            ("Checking NTLMAPS source files", self._check_sources),
            ("Creating user and group", self._create_user),
            ("Creating directories", self._create_directories),
            ("Installing NTLMAPS files", self._install_files),
            ("Creating configuration file", self._create_config),
            ("Creating systemd service", self._create_service),
            ("Setting up log rotation", self._create_logrotate),
            ("Setting up firewall rules", self._setup_firewall),
            ("Saving installation state", self._save_state),
            ("Enabling and starting service", self._enable_service),
            ("Installation summary", self._show_info),
        ]

    def _run_pipeline(self, steps: Sequence[Step]) -> None:
        total = len(steps)
        for index, (label, step) in enumerate(steps, start=1):
            print(f"\n[{index}/{total}] {label}...")
            step()
            self.completed_steps.append(label)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run(self) -> None:
        """
        SINGLE AUTHORITATIVE INSTALL ENTRYPOINT.

        Raises:
            InstallerError: On the first failing step; earlier steps stay applied
        """
        self.privilege_guard.require_root()

        with self.lock:
            p = self.params
            logger.info("Starting NTLMAPS installation")
            logger.info("Using configuration:")
            logger.info(f"  User: {p.user}")
            logger.info(f"  Home: {p.home}")
            logger.info(f"  Port: {p.port}")
            logger.info(f"  Proxy: {p.parent_proxy}:{p.parent_proxy_port}")
            logger.info(f"  Domain: {p.nt_domain}")

            self._run_pipeline(self.install_steps())

    def uninstall(self) -> UninstallReport:
        """
        Teardown entrypoint.

        Raises:
            InstallerError: If privilege, locking or a removal step fails
        """
        self.privilege_guard.require_root()

        with self.lock:
            return self.uninstaller.uninstall(self.params)


class _InstallerArgumentParser(argparse.ArgumentParser):
    """argparse that raises instead of exiting on bad arguments."""

    def error(self, message):
        raise UnknownOptionError(message)


def build_parser(epilog: str) -> argparse.ArgumentParser:
    parser = _InstallerArgumentParser(
        prog='ntlmaps-installer',
        allow_abbrev=False,
        description='Install NTLMAPS (NTLM Authorization Proxy Server) as a systemd service',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    parser.add_argument(
        '--uninstall',
        action='store_true',
        help='Uninstall the service'
    )
    parser.add_argument(
        '--source',
        type=Path,
        default=None,
        help='Directory holding main.py and lib/ (default: current directory)'
    )
    parser.add_argument(
        '--yes', '-y',
        action='store_true',
        help='With --uninstall: remove user and directory without asking'
    )
    return parser


def _help_epilog(profile: InstallProfile) -> str:
    try:
        return usage_epilog(resolve_parameters(profile=profile))
    except ParameterError:
        return usage_epilog(resolve_parameters(environ={}, profile=profile))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    CLI entry point for installer.

    Returns:
        Process exit code (0 on success, 1 on any failure)
    """
    try:
        profile = load_profile()
    except InstallerError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    parser = build_parser(_help_epilog(profile))
    try:
        args = parser.parse_args(argv)
        if args.yes and not args.uninstall:
            parser.error("--yes is only valid together with --uninstall")
    except UnknownOptionError as e:
        print(f"✗ Unknown option: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1
    except SystemExit as e:
        # --help
        return e.code if isinstance(e.code, int) else 0

    setup_logging()
    action = "Uninstall" if args.uninstall else "Installation"

    try:
        params = resolve_parameters(profile=profile)
        confirm = (lambda question: True) if args.yes else prompt_confirmation
        installer = NtlmapsInstaller(
            params, profile=profile, source_dir=args.source, confirm=confirm)

        if args.uninstall:
            installer.uninstall()
        else:
            installer.run()
        return 0
    except KeyboardInterrupt:
        print(f"\n\n{action} cancelled by user. Re-run to complete.", file=sys.stderr)
        return 1
    except ActivationError as e:
        print(f"\n✗ {action} failed: {e}", file=sys.stderr)
        print("  Installed files and configuration were left in place for inspection.", file=sys.stderr)
        return 1
    except InstallerError as e:
        print(f"\n✗ {action} failed: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"\n✗ Fatal error during {action.lower()}: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())

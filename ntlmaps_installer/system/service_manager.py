# Path and File Name : ntlmaps_installer/system/service_manager.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: systemd service manager interface (systemctl) - reload, enable/disable, start/stop, status

"""
Service Manager: narrow interface to systemd via systemctl.

RuntimeProcessState is owned by systemd; this class only issues commands and
observes state. No transition is assumed to complete synchronously.
"""

from .command_runner import CommandRunner


class SystemdServiceManager:
    """systemctl wrapper."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def daemon_reload(self) -> None:
        self.runner.run_checked(['systemctl', 'daemon-reload'])

    def enable(self, unit: str) -> None:
        self.runner.run_checked(['systemctl', 'enable', unit])

    def disable(self, unit: str) -> None:
        self.runner.run_checked(['systemctl', 'disable', unit])

    def start(self, unit: str) -> None:
        self.runner.run_checked(['systemctl', 'start', unit])

    def stop(self, unit: str) -> None:
        self.runner.run_checked(['systemctl', 'stop', unit])

    def try_stop(self, unit: str) -> bool:
        """Stop without failing when the unit is unknown or already stopped."""
        return self.runner.succeeds(['systemctl', 'stop', unit])

    def is_active(self, unit: str) -> bool:
        return self.runner.succeeds(['systemctl', 'is-active', '--quiet', unit])

    def is_enabled(self, unit: str) -> bool:
        return self.runner.succeeds(['systemctl', 'is-enabled', '--quiet', unit])

    def status(self, unit: str) -> str:
        """Return `systemctl status` output for diagnostics (never raises)."""
        result = self.runner.run(['systemctl', 'status', '--no-pager', unit])
        return (result.stdout or "") + (result.stderr or "")

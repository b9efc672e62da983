# Path and File Name : ntlmaps_installer/reporter.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Human-readable install summary and CLI usage text

"""
Reporter: presentation only. Nothing here touches the host.
"""

from .parameters import InstallParameters


def render_summary(params: InstallParameters) -> str:
    name = params.service_name
    lines = [
        "=" * 80,
        "NTLMAPS installation completed!",
        "=" * 80,
        "",
        "Configuration:",
        f"  Service Name: {name}",
        f"  User/Group: {params.user}/{params.group}",
        f"  Install Path: {params.home}",
        f"  Listen Port: {params.port}",
        f"  Parent Proxy: {params.parent_proxy}:{params.parent_proxy_port}",
        f"  Domain: {params.nt_domain}",
        "",
        "Service Management:",
        f"  Status: systemctl status {name}",
        f"  Start:  systemctl start {name}",
        f"  Stop:   systemctl stop {name}",
        f"  Logs:   journalctl -u {name} -f",
        "",
        f"Configuration file: {params.config_path}",
        f"Log files: {params.logs_dir}/",
        "",
        "To use the proxy, set:",
        f"  export http_proxy=http://localhost:{params.port}/",
        f"  export https_proxy=http://localhost:{params.port}/",
    ]
    return "\n".join(lines)


def show_info(params: InstallParameters) -> None:
    print(render_summary(params))


def usage_epilog(params: InstallParameters) -> str:
    """Environment defaults and examples appended to --help."""
    return f"""Environment variables (with defaults):
  NTLM_USER={params.user}
  NTLM_GROUP={params.group}
  NTLM_HOME={params.home}
  NTLM_PORT={params.port}
  PARENT_PROXY={params.parent_proxy}
  PARENT_PROXY_PORT={params.parent_proxy_port}
  NT_DOMAIN={params.nt_domain}
  NTLMAPS_INSTALL_LOG  (optional) also write installer log to this file

Examples:
  # Basic installation (run from the ntlmaps source directory)
  sudo ntlmaps-installer

  # Custom configuration
  sudo NTLM_PORT=8080 PARENT_PROXY=proxy.company.com ntlmaps-installer

  # Remove the service
  sudo ntlmaps-installer --uninstall
"""

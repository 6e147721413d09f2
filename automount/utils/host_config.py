"""
Host-specific configuration file selection.

Every machine running the agent gets its own ``<hostname>-settings.env`` so
bookmark aliases and retry policy can differ per workstation while sharing
one checked-in ``settings.env`` template.
"""

import logging
import shutil
import socket
from pathlib import Path

BASE_SETTINGS_FILE = "settings.env"
HOST_SETTINGS_SUFFIX = "-settings.env"


def get_hostname() -> str:
    """Get the current hostname (without domain)."""
    return socket.gethostname().split(".")[0]


def get_hostname_settings_file(config_dir: Path = Path(".")) -> str:
    """
    Return the settings file for this host, seeding it from the base file.

    If ``<hostname>-settings.env`` is missing but ``settings.env`` exists, the
    base file is copied with a short header. Without a base file the base name
    is returned so pydantic-settings simply finds nothing and uses defaults.
    """
    base_settings = config_dir / BASE_SETTINGS_FILE
    host_settings = config_dir / f"{get_hostname()}{HOST_SETTINGS_SUFFIX}"

    try:
        if host_settings.exists():
            logging.debug(f"Using existing host-specific configuration: {host_settings}")
            return str(host_settings)

        if not base_settings.exists():
            logging.debug(f"No {BASE_SETTINGS_FILE} found, using built-in defaults")
            return str(base_settings)

        shutil.copy2(base_settings, host_settings)
        content = host_settings.read_text(encoding="utf-8")
        header = (
            f"# Network auto mount settings for host: {get_hostname()}\n"
            f"# Seeded from {BASE_SETTINGS_FILE}; edit freely for this machine\n\n"
        )
        host_settings.write_text(header + content, encoding="utf-8")
        logging.info(f"Created host-specific configuration: {host_settings}")
        return str(host_settings)

    except OSError as e:
        logging.error(f"Error handling host-specific settings: {e}")
        return str(base_settings)


def list_all_settings_files(config_dir: Path = Path(".")) -> list[str]:
    """List the base settings file and all host-specific variants present."""
    settings_files = []

    if (config_dir / BASE_SETTINGS_FILE).exists():
        settings_files.append(str(config_dir / BASE_SETTINGS_FILE))

    for file_path in sorted(config_dir.glob(f"*{HOST_SETTINGS_SUFFIX}")):
        settings_files.append(str(file_path))

    return settings_files

"""
Checks against the local host, run before touching any interface or unit.
"""

import logging
import os
import shutil
from typing import Optional

from .common import command
from . import paths


LOG = logging.getLogger(__name__)


def is_root() -> bool:
    """
    Test if the current process is running with an effective UID of 0.
    """
    return os.geteuid() == 0


def get_tool(name: str) -> Optional[str]:
    """
    Look up the full path to an executable, or `None` if it's not installed.  Names with a directory
    component are checked as-is rather than searched for on `PATH`.
    """
    path = shutil.which(name)
    LOG.debug("Tool %r resolved to %r", name, path)
    return path


def interface_exists(iface: str, ip: str = paths.IP) -> bool:
    """
    Test if a network interface with the given name is present.
    """
    try:
        proc = command([ip, "link", "show", iface], check=False, quiet=True)
    except OSError:
        LOG.debug("Couldn't run %r", ip, exc_info=True)
        return False
    return proc.returncode == 0

"""
Persistent systemd units, and their enabled/active state.

Unit files are only ever created, never rewritten: an existing unit that doesn't match what we'd
generate is assumed to have been customised by an operator, and is left alone with a warning.
"""

import logging
import os.path
from subprocess import CompletedProcess
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from .common import command, Result, State, Unset
from . import paths


LOG = logging.getLogger(__name__)

ENV = Environment(loader=FileSystemLoader(os.path.join(os.path.dirname(os.path.dirname(__file__)),
                                                       "templates")),
                  keep_trailing_newline=True)

TEMPLATE = "disable-offload.service.j2"


class Systemctl:
    """
    Thin client around systemctl.  Unit state is queried on every call, and never cached.
    """

    def __init__(self, path: str = paths.SYSTEMCTL):
        self.path = path

    def call(self, *args: str, check: bool = True, quiet: bool = False) -> "CompletedProcess[bytes]":
        return command([self.path] + list(args), check=check, quiet=quiet)

    def is_enabled(self, unit: str) -> bool:
        return self.call("is-enabled", unit, check=False, quiet=True).returncode == 0

    def is_active(self, unit: str) -> bool:
        return self.call("is-active", unit, check=False, quiet=True).returncode == 0

    def status(self, unit: str) -> int:
        """
        Print the unit's status to the terminal.  Non-zero codes (e.g. for inactive units) aren't
        treated as failures.
        """
        return self.call("--no-pager", "--full", "status", unit, check=False).returncode


def unit_name(iface: str) -> str:
    """
    Name of the unit that disables offloads on an interface.
    """
    return "disable-offload-{}.service".format(iface)


def unit_path(iface: str, unit_dir: Optional[str] = None) -> str:
    return os.path.join(unit_dir or paths.UNIT_DIR, unit_name(iface))


def render_unit(iface: str, exec_start: str) -> str:
    """
    Generate the contents of a oneshot unit running the given command once the network is up.
    """
    return ENV.get_template(TEMPLATE).render(iface=iface, exec_start=exec_start)


def get_exec_start(path: str) -> Optional[str]:
    """
    Read the command from the first `ExecStart=` line of a unit file, if it has one.
    """
    with open(path) as unit:
        for line in unit:
            if line.startswith("ExecStart="):
                return line.rstrip("\n").split("=", 1)[1]
    return None


def is_compatible(path: str, exec_start: str) -> bool:
    """
    Test if a unit file has an `ExecStart=` line running exactly the given command.
    """
    expected = "ExecStart={}".format(exec_start)
    with open(path) as unit:
        return expected in unit.read().splitlines()


def ensure_unit(path: str, iface: str, exec_start: str) -> Result[bool]:
    """
    Create a unit file if one doesn't exist.  The result value is whether the unit on disk runs the
    expected command.
    """
    if os.path.isfile(path):
        if is_compatible(path, exec_start):
            LOG.info("Unit file %s exists with expected ExecStart, no rewrite needed", path)
            return Result(State.unchanged, True)
        LOG.warning("Unit file %s exists but ExecStart differs, not modifying it\n"
                    "    Expected: %s\n    Found:    %s",
                    path, exec_start, get_exec_start(path) or "")
        return Result(State.unchanged, False)
    LOG.info("Creating unit file %s", path)
    with open(path, "w") as unit:
        unit.write(render_unit(iface, exec_start))
    return Result(State.created, True)


def reload(systemctl: Systemctl) -> Result[Unset]:
    """
    Have systemd pick up new or changed unit files.
    """
    systemctl.call("daemon-reload")
    return Result(State.success)


def enable(systemctl: Systemctl, unit: str) -> Result[Unset]:
    """
    Enable a unit to start at boot.
    """
    if systemctl.is_enabled(unit):
        LOG.info("Service %s already enabled", unit)
        return Result(State.unchanged)
    LOG.info("Enabling service %s", unit)
    systemctl.call("enable", unit)
    return Result(State.success)


def start(systemctl: Systemctl, unit: str) -> Result[Unset]:
    """
    Start a unit now, if it isn't already active.
    """
    if systemctl.is_active(unit):
        LOG.info("Service %s already active", unit)
        return Result(State.unchanged)
    LOG.info("Starting service %s", unit)
    systemctl.call("start", unit)
    return Result(State.success)

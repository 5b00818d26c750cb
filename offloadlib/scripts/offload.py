"""
Scripts to manage NIC offloads.
"""

from typing import List

from .utils import entrypoint, require_interface, require_root, require_tools
from ..plumbing import ethtool, paths, systemd
from ..plumbing.ethtool import Ethtool, Offload
from ..plumbing.systemd import Systemctl
from ..tasks import offload


def _report(title: str, offloads: List[Offload]):
    print("{} (key offloads):".format(title))
    for line in ethtool.format_offloads(offloads):
        print(line)
    print()
    if ethtool.count_enabled(offloads):
        print("Toggleable offloads currently ENABLED:")
        for line in ethtool.list_enabled(offloads):
            print(line)
    else:
        print("All toggleable offloads are OFF.")


@entrypoint
def disable(iface: str):
    """
    Disable all toggleable NIC offloads, now and on every boot via a systemd unit.

    Usage: {script} IFACE
    """
    require_root()
    require_tools(paths.ETHTOOL, paths.SYSTEMCTL)
    require_interface(iface)
    tool = Ethtool()
    systemctl = Systemctl()
    print("Interface: {}".format(iface))
    print()
    result = offload.disable(iface, tool, systemctl)
    before, after = result.value
    _report("Before", before)
    print()
    _report("After", after)
    print()
    print("Unit status:")
    systemctl.status(systemd.unit_name(iface))
    print()
    print("Done." if result else "Done, nothing to change.")


@entrypoint
def status(iface: str):
    """
    Show the tracked offloads of an interface, and the state of its persistent unit.

    Usage: {script} IFACE
    """
    require_tools(paths.ETHTOOL, paths.SYSTEMCTL)
    require_interface(iface)
    tool = Ethtool()
    systemctl = Systemctl()
    print("Interface: {}".format(iface))
    print()
    _report("Current", ethtool.get_offloads(tool, iface))
    print()
    unit = systemd.unit_name(iface)
    path = systemd.unit_path(iface)
    expected = ethtool.expected_command(tool, iface)
    try:
        compatible = systemd.is_compatible(path, expected)
    except FileNotFoundError:
        print("Unit file {} not installed.".format(path))
        return
    if compatible:
        print("Unit file {} runs the expected command.".format(path))
    else:
        print("Unit file {} differs:".format(path))
        print("    Expected: {}".format(expected))
        print("    Found:    {}".format(systemd.get_exec_start(path) or ""))
    print("Enabled: {}".format("yes" if systemctl.is_enabled(unit) else "no"))
    print("Active:  {}".format("yes" if systemctl.is_active(unit) else "no"))

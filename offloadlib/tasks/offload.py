"""
Disabling NIC offloads, both now and on every boot.
"""

import logging
from typing import List, Optional, Tuple

from ..plumbing.common import Collect, Result, State
from ..plumbing.ethtool import Ethtool, Offload
from ..plumbing.systemd import Systemctl
from ..plumbing import ethtool, systemd


LOG = logging.getLogger(__name__)

Offloads = Tuple[List[Offload], List[Offload]]


@Result.collect
def disable_runtime(tool: Ethtool, iface: str) -> Collect[Offloads]:
    """
    Switch off any enabled offloads on the live interface, and re-read the state afterwards.

    Returns the offloads as reported before and after the change.
    """
    before = ethtool.get_offloads(tool, iface)
    if ethtool.count_enabled(before):
        yield ethtool.disable_offloads(tool, iface)
    else:
        LOG.info("All toggleable offloads already off, skipping runtime ethtool call")
    after = ethtool.get_offloads(tool, iface)
    return (before, after)


@Result.collect
def ensure_persistent(systemctl: Systemctl, iface: str, exec_start: str,
                      unit_dir: Optional[str] = None) -> Collect[str]:
    """
    Install, enable and start a unit that reapplies the given command at boot.
    """
    unit = systemd.unit_name(iface)
    res_unit = yield from systemd.ensure_unit(systemd.unit_path(iface, unit_dir), iface, exec_start)
    if res_unit.state == State.created:
        yield systemd.reload(systemctl)
    yield systemd.enable(systemctl, unit)
    yield systemd.start(systemctl, unit)
    return unit


@Result.collect
def disable(iface: str, tool: Optional[Ethtool] = None, systemctl: Optional[Systemctl] = None,
            unit_dir: Optional[str] = None) -> Collect[Offloads]:
    """
    Disable offloads on an interface now, and persistently via systemd.
    """
    tool = tool or Ethtool()
    systemctl = systemctl or Systemctl()
    res_runtime = yield from disable_runtime(tool, iface)
    yield ensure_persistent(systemctl, iface, ethtool.expected_command(tool, iface), unit_dir)
    return res_runtime.value

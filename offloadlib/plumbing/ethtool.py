"""
NIC offload state, as reported and changed by ethtool.

Only the seven offloads in `FEATURES` are ever considered; anything else ethtool reports (including
the indented sub-features beneath each of them) is ignored.
"""

from collections import OrderedDict
import logging
import re
from subprocess import CalledProcessError
from typing import Iterable, List, NamedTuple

from .common import command, Result, State
from . import paths


LOG = logging.getLogger(__name__)

FEATURES = OrderedDict((("gso", "generic-segmentation-offload"),
                        ("gro", "generic-receive-offload"),
                        ("tso", "tcp-segmentation-offload"),
                        ("tx", "tx-checksumming"),
                        ("rx", "rx-checksumming"),
                        ("rxvlan", "rx-vlan-offload"),
                        ("txvlan", "tx-vlan-offload")))
"""
Toggleable offloads, mapping the `ethtool -K` short name to the `ethtool -k` long name.  Order
matters: it determines the argument order of the generated command.
"""

PATTERN = re.compile(r"^({}):".format("|".join(sorted(FEATURES.values()))))


class Offload(NamedTuple):
    """
    Current setting of a single offload on an interface.
    """

    name: str
    enabled: bool
    fixed: bool
    """
    Hardware-locked, can't be changed regardless of what's requested.
    """


class Ethtool:
    """
    Thin client around the ethtool binary.
    """

    def __init__(self, path: str = paths.ETHTOOL):
        self.path = path

    def show_features(self, iface: str) -> str:
        """
        Fetch the raw `ethtool -k` output for an interface.
        """
        proc = command([self.path, "-k", iface], output=True, quiet=True)
        return proc.stdout.decode("utf-8")

    def set_features(self, iface: str, settings: List[str]) -> int:
        """
        Apply `ethtool -K` settings, and return the exit code rather than raising on failure.
        """
        return command(self.disable_args(iface, settings), check=False).returncode

    def disable_args(self, iface: str, settings: List[str]) -> List[str]:
        return [self.path, "-K", iface] + settings


def disable_settings() -> List[str]:
    """
    Arguments to `ethtool -K` that switch off every tracked offload.
    """
    settings: List[str] = []
    for short in FEATURES:
        settings += [short, "off"]
    return settings


def expected_command(tool: Ethtool, iface: str) -> str:
    """
    Full command line that disables all tracked offloads on an interface.
    """
    return " ".join(tool.disable_args(iface, disable_settings()))


def get_status(tool: Ethtool, iface: str) -> List[str]:
    """
    Fetch the status lines of the tracked offloads.  Failures to query the interface are treated as
    having nothing to report.
    """
    try:
        raw = tool.show_features(iface)
    except (CalledProcessError, OSError) as ex:
        LOG.debug("Couldn't query offloads for %r: %s", iface, ex)
        return []
    return [line for line in raw.splitlines() if PATTERN.match(line)]


def parse_offloads(lines: Iterable[str]) -> List[Offload]:
    """
    Parse `name: state [annotations]` lines into `Offload` records.
    """
    offloads: List[Offload] = []
    for line in lines:
        if not PATTERN.match(line):
            continue
        name, _, rest = line.partition(":")
        words = rest.split()
        enabled = bool(words) and words[0] == "on"
        offloads.append(Offload(name, enabled, "[fixed]" in rest))
    return offloads


def get_offloads(tool: Ethtool, iface: str) -> List[Offload]:
    """
    Query and parse the tracked offloads for an interface.
    """
    return parse_offloads(get_status(tool, iface))


def count_enabled(offloads: Iterable[Offload]) -> int:
    """
    Count offloads that are on and can be switched off.
    """
    return sum(1 for offload in offloads if offload.enabled and not offload.fixed)


def list_enabled(offloads: Iterable[Offload]) -> List[str]:
    """
    Bullet-point names of offloads that are on and can be switched off.
    """
    return ["- {}".format(offload.name) for offload in offloads
            if offload.enabled and not offload.fixed]


def format_offloads(offloads: Iterable[Offload]) -> List[str]:
    """
    Render offloads back into `name: state` lines, as ethtool reports them.
    """
    return ["{}: {}{}".format(offload.name, "on" if offload.enabled else "off",
                              " [fixed]" if offload.fixed else "")
            for offload in offloads]


def disable_offloads(tool: Ethtool, iface: str) -> Result[int]:
    """
    Switch off every tracked offload at runtime.

    All offloads are passed regardless of which are currently on.  A non-zero exit code is expected
    when the driver doesn't implement some of them, and is only noted -- the supported ones are
    still applied.
    """
    LOG.info("Disabling all toggleable offloads on %s", iface)
    code = tool.set_features(iface, disable_settings())
    if code:
        LOG.info("Note: ethtool reported some flags unsupported (normal for some NICs)")
    return Result(State.success, code)

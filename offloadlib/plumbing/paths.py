"""
Locations of the external tools and files managed by this library.
"""

ETHTOOL = "/sbin/ethtool"
"""
ethtool binary, used both at runtime and in the generated unit's ExecStart line.
"""

SYSTEMCTL = "systemctl"
"""
systemd control command, resolved via `PATH`.
"""

IP = "ip"
"""
iproute2 command, used to check that an interface exists.
"""

UNIT_DIR = "/etc/systemd/system"
"""
Directory holding locally-installed systemd units.
"""

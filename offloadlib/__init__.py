"""
Idempotent management of NIC offload settings, at runtime and across reboots.
"""

"""Android runtime helpers.

Thin wrappers around adb so the adb command executor can install, launch,
stop and query applications without an automation server.
"""

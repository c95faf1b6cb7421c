"""napi - session-authenticated HTTP control plane for user services, files and `at` jobs"""

__version__ = "0.1.0"

"""
wsrepos - repository rule reconciliation for Bazel workspaces

Keeps go_repository rules in a WORKSPACE file (or a .bzl macro) in step
with explicit import paths or a dependency lock manifest.
"""

__version__ = "0.4.0"
__all__ = ["__version__"]

"""
gp_operator_plugins
===================

Pluggable mutation, selection and survival operators for genetic
programming searches over expression trees, loadable at runtime without
restarting the host search.
"""

from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    """Return the installed package version or '0.0.0' when unavailable."""
    try:
        return version("gp-operator-plugins")
    except PackageNotFoundError:
        return "0.0.0"


__all__ = ["get_version"]

"""Runtime feature detection for optional extras.

Checks availability of optional dependencies to determine which
stream adapters can be used.
"""
from __future__ import annotations


def _check_import(module_name: str) -> bool:
    """Check if a module is importable."""
    try:
        __import__(module_name)
        return True
    except ImportError:
        return False


HAS_HTTPX: bool = _check_import("httpx")


def require_extra(extra_name: str, package_name: str) -> None:
    """Raise ImportError with installation hint if extra is not available.

    Args:
        extra_name: Name of the pip extra (e.g., 'http')
        package_name: Name of the required package (e.g., 'httpx')

    Raises:
        ImportError: With installation instructions when package is not available.
    """
    if _check_import(package_name):
        return
    raise ImportError(
        f"The '{extra_name}' extra is required for this feature. "
        f"Install it with: pip install teestream[{extra_name}]"
    )

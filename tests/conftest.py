"""Pytest configuration for mac-icon-fetcher tests."""

import sys
from pathlib import Path

# Add the repository root so mac_icon_fetcher imports without installation
package_root = Path(__file__).parent.parent
if str(package_root) not in sys.path:
    sys.path.insert(0, str(package_root))


def pytest_configure(config):
    """Configure pytest before test collection."""
    if str(package_root) not in sys.path:
        sys.path.insert(0, str(package_root))

"""mac-icon-fetcher - application icon pipeline for the documentation site.

This package provides:
- Spotlight-based resolution of application names to installed bundles
- Icon location and extraction to fixed-size PNG files
- Comment-preserving updates of the site's JS data file
- A bounded, retrying batch runner with grouped failure reporting
"""

__version__ = "1.0.0"
__author__ = "mac-icon-fetcher contributors"
__license__ = "MIT"

__all__ = ["__version__", "__author__", "__license__"]

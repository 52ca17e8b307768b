"""
Setup configuration for mac-icon-fetcher.

Icon pipeline for the documentation site's application list.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = requirements_file.read_text().strip().split("\n") if requirements_file.exists() else []

# Read long description from README if it exists
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="mac-icon-fetcher",
    version="1.0.0",
    description="Fetch macOS application icons and sync them into a site data file",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="mac-icon-fetcher contributors",
    author_email="",
    packages=find_packages(include=["mac_icon_fetcher", "mac_icon_fetcher.*"]),
    install_requires=requirements,
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "mac-icon-fetcher=mac_icon_fetcher.cli.commands:cli_main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: MacOS :: MacOS X",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
        ],
    },
)

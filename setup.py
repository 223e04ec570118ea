#!/usr/bin/env python3
# =============================================================================
#  analyzer-shims: setup.py  (legacy compatibility shim)
#
#  All authoritative metadata lives in pyproject.toml.
#  This file exists so that:
#
#    1.  `pip install -e .` works on older pip / setuptools that pre-date
#        PEP 660 editable installs.
#    2.  `python setup.py sdist bdist_wheel` still works for CI scripts
#        that haven't migrated to `python -m build`.
#
#  For new tooling, prefer:
#      pip install -e ".[dev]"
#      python -m build
#      python -m pytest
# =============================================================================

from __future__ import annotations

import re
from pathlib import Path

from setuptools import setup, find_packages

# ---------------------------------------------------------------------------
#  Read version from pyproject.toml so we have a single source of truth.
# ---------------------------------------------------------------------------
_HERE = Path(__file__).resolve().parent


def _read_version() -> str:
    """Extract the version string from pyproject.toml."""
    pyproject = _HERE / "pyproject.toml"
    text = pyproject.read_text(encoding="utf-8")
    match = re.search(r'^version\s*=\s*"([^"]+)"', text, re.MULTILINE)
    if match:
        return match.group(1)
    return "0.0.0"


def _read_long_description() -> str:
    """Read README.md for the long description."""
    readme = _HERE / "README.md"
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


# ---------------------------------------------------------------------------
#  Main setup() call: mirrors pyproject.toml but keeps legacy compat.
#
#  testmirror is a library only; hosts drive it through MirrorPipeline,
#  so there is no console_scripts entry point.
# ---------------------------------------------------------------------------
setup(
    name="analyzer-shims",
    version=_read_version(),
    description=(
        "Analyzer host shims, the SA1213 ordering rule, and the testmirror "
        "versioned test-class source generator."
    ),
    long_description=_read_long_description(),
    long_description_content_type="text/markdown",
    license="MIT",
    author="analyzer-shims contributors",
    python_requires=">=3.10",
    packages=find_packages(
        include=[
            "analyzer_shims",
            "analyzer_shims.*",
            "testmirror",
            "testmirror.*",
        ],
        exclude=[
            "tests",
            "tests.*",
        ],
    ),
    install_requires=[
        "sexpdata>=1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "ruff>=0.4",
            "mypy>=1.10",
            "black>=24.0",
            "isort>=5.13",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Software Development :: Quality Assurance",
        "Topic :: Software Development :: Testing",
    ],
    keywords=[
        "static-analysis",
        "source-generator",
        "code-generation",
        "stylecop",
        "test-mirroring",
    ],
    zip_safe=False,
)

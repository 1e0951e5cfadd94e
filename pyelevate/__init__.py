"""
pyelevate: dependency intelligence for Python requirements files

pyelevate inspects a ``requirements.txt`` manifest, determines whether a
newer release exists for each declared package, classifies the nature of
each change and aggregates the results into upgrade statistics and an
upgrade-risk score.

Features include:
    • Best-effort manifest parsing (PyPI, Git, editable and URL sources)
    • Concurrent latest-version resolution against PyPI
    • Patch / minor / major classification of every available upgrade
    • Vulnerability lookups (OSV), download popularity and changelog hints
    • Dependency conflict warnings and upgrade risk simulation
"""

from __future__ import annotations

from pyelevate.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "pyelevate Contributors"
__license__ = "Apache-2.0"
__description__ = "Dependency intelligence for requirements.txt files."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
]

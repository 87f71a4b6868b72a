#
# src/caserun/__init__.py
#
"""
caserun: a sequential test execution engine with lifecycle callbacks and
extensions.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("caserun")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

# 🔼⚙️

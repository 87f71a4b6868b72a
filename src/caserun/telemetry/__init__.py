# src/caserun/telemetry/__init__.py

"""
Logging setup and typing helpers.
"""

from caserun.telemetry.logger import StructLogger, run_context, setup_logging

__all__ = ["StructLogger", "run_context", "setup_logging"]

# 🔼⚙️

# src/caserun/telemetry/logger/__init__.py

from caserun.telemetry.logger.base import StructLogger, run_context, setup_logging

__all__ = ["StructLogger", "run_context", "setup_logging"]

# 🔼⚙️

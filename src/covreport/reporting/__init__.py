"""Reporters attached before and after the payload is written."""

from covreport.reporting.loggers import (
    CoverageTracingLogger,
    DryRunLogger,
    JobLogger,
    Position,
    Reporter,
)

__all__ = ["CoverageTracingLogger", "DryRunLogger", "JobLogger", "Position", "Reporter"]

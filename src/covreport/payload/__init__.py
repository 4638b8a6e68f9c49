"""Coveralls payload output."""

from covreport.payload.writer import JsonWriter, WriterState, job_fields

__all__ = ["JsonWriter", "WriterState", "job_fields"]

"""Saga JavaScript coverage parser.

Saga (saga-maven-plugin) writes its total report as Cobertura-shaped XML,
usually at ``target/saga-coverage/total-coverage.xml``. Its file names often
point at served or generated scripts that are not in the source tree, so
unresolvable files are skipped with a warning instead of failing the run.
"""

from covreport.parsers.base import SourceResolution
from covreport.parsers.cobertura import CoberturaParser


class SagaParser(CoberturaParser):
    """Parser for Saga coverage reports."""

    format_id = "saga"
    default_resolution = SourceResolution.LENIENT

"""Coverage report parsers.

Supported formats:
    - jacoco: Java (Maven/Gradle) JaCoCo XML
    - cobertura: cobertura-maven-plugin, coverage.py, coverlet
    - saga: JavaScript via saga-maven-plugin (Cobertura-shaped XML)
    - lcov: LCOV tracefiles
"""

from covreport.parsers.base import CoverageParser, ReportParser, SourceResolution
from covreport.parsers.cobertura import CoberturaParser
from covreport.parsers.factory import PARSER_BY_FORMAT, CoverageParsersFactory, create_parser
from covreport.parsers.jacoco import JacocoParser
from covreport.parsers.lcov import LcovParser
from covreport.parsers.saga import SagaParser

__all__ = [
    "PARSER_BY_FORMAT",
    "CoberturaParser",
    "CoverageParser",
    "CoverageParsersFactory",
    "JacocoParser",
    "LcovParser",
    "ReportParser",
    "SagaParser",
    "SourceResolution",
    "create_parser",
]

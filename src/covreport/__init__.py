"""covreport - Coverage reports to Coveralls."""

__version__ = "0.1.0"

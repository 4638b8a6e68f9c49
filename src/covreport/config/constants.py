"""Configuration constants.

Values that are protocol constraints or file-layout conventions rather than
user preferences. Configurable values live in models.py.
"""

# =============================================================================
# Coveralls API
# =============================================================================

COVERALLS_URL_DEFAULT = "https://coveralls.io/api/v1/jobs"
"""Jobs endpoint of the Coveralls API."""

COVERALLS_FILE_DEFAULT = "target/coveralls.json"
"""Payload location, relative to the project directory."""

MULTIPART_FIELD = "json_file"
"""Form field name the jobs endpoint expects the payload under."""

RUN_AT_FORMAT = "%Y-%m-%d %H:%M:%S %z"
"""Format of the payload's run_at timestamp."""

# =============================================================================
# Report conventions
# =============================================================================
# File names looked for inside every module's build and reporting directories.

JACOCO_DIRECTORY = "jacoco"
JACOCO_FILE = "jacoco.xml"

COBERTURA_DIRECTORY = "cobertura"
COBERTURA_FILE = "coverage.xml"

SAGA_DIRECTORY = "saga-coverage"
SAGA_FILE = "total-coverage.xml"

BUILD_DIR_DEFAULT = "target"
REPORTING_DIR_DEFAULT = "target/site"

SOURCE_DIRECTORIES_DEFAULT = ("src/main/java",)

PROJECT_CONFIG_FILE = ".covreport.yaml"
"""Project-level YAML configuration, relative to the project directory."""

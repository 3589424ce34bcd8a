"""Exit codes shared by CLI commands."""

SYSTEM_EXIT_CODE = 1
VALIDATION_EXIT_CODE = 2
UPSTREAM_EXIT_CODE = 3
CONFIGURATION_EXIT_CODE = 4
RECORD_EXIT_CODE = 5

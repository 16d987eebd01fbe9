"""Constants for license-curator."""

# Exit codes
EXIT_SUCCESS = 0  # Policy passed / session ready
EXIT_ISSUES = 1  # Violations found / session blocked
EXIT_ERROR = 2  # Command failed due to error

# Placeholder used when a dependency has no license information at all
NO_ASSERTION = "NOASSERTION"

# Actor id recorded for automated decisions and audit entries
SYSTEM_ACTOR = "system"

# Legal disclaimer shown with policy reports
LEGAL_DISCLAIMER_SHORT = (
    "This tool provides license information for informational purposes only. "
    "It does not constitute legal advice."
)

"""Custom exceptions for license-curator.

Each error carries a ``status`` string that an HTTP layer can map to a
response code without inspecting the exception type.
"""


class LicenseCuratorError(Exception):
    """Base exception for all license-curator errors."""

    status = "error"


class ConfigurationError(LicenseCuratorError):
    """Exception raised when a policy, template or scan file is invalid."""

    status = "invalid"


class ValidationError(LicenseCuratorError):
    """Exception raised when a decision request is malformed.

    Examples are MODIFY without a license or an OR choice that is not one
    of the item's options. The target is left unchanged.
    """

    status = "invalid"


class PreconditionError(LicenseCuratorError):
    """Exception raised when a workflow step is not allowed in the current state."""

    status = "precondition_failed"


class NotFoundError(LicenseCuratorError):
    """Exception raised when a session, item, template or dependency is unknown."""

    status = "not_found"

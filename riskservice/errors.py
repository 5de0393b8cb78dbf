"""
Risk Service Errors
===================

Exception hierarchy shared across the risk service.

Construction errors (ambiguous patient, unsupported resource kind) are
fatal to a single event stream build and are never retried internally.
Publishing and storage errors propagate unchanged to the caller.

Author: Risk Service Team
Version: 1.0.0
"""


class RiskServiceError(Exception):
    """Base class for risk service failures."""
    pass


class EventStreamError(RiskServiceError):
    """Raised when clinical records cannot be turned into an event stream."""
    pass


class AmbiguousPatientError(EventStreamError):
    """Raised when a record batch contains more than one patient."""

    def __init__(self, message: str = "Found more than one patient in resources"):
        super().__init__(message)


class UnsupportedResourceKindError(EventStreamError):
    """Raised for a record kind the service cannot convert or query."""

    def __init__(self, kind: str, message: str = ""):
        self.kind = kind
        super().__init__(message or f"Unsupported: Converting {kind} to Event")


class PluginConfigurationError(RiskServiceError):
    """Raised when a plugin's configuration cannot be used."""
    pass


class RiskAssessmentPostError(RiskServiceError):
    """Raised when the FHIR server rejects a risk assessment transaction."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(
            "Risk assessments did not post properly. "
            f"Received response code: {status_code}"
        )

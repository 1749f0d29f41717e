"""
Exception hierarchy for the Capital Agents pipeline.

Business-rule violations are never raised: they are reported as
DataQualityIssue records by the Data Quality Officer. The exceptions here
cover structurally impossible calls (unknown ids, illegal workflow
transitions, duplicate conversions) and persistence/configuration failures.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ImportRowError:
    """
    Structured record for a row that failed shape validation during import.

    Collected alongside the rows that did parse so the caller gets a partial
    result instead of an all-or-nothing failure.
    """

    row_number: int
    """1-based row number in the source table (header is row 1)"""

    message: str
    """Human-readable reason, without the row prefix"""

    entity_type: str = "record"
    """Which importer produced the error (priority, opportunity, ...)"""

    context: dict = field(default_factory=dict)
    """Raw cell values or other debugging context"""

    def to_message(self) -> str:
        """Render as the display string used in ImportResult.errors."""
        return f"Row {self.row_number}: {self.message}"

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/serialization."""
        return {
            "row_number": self.row_number,
            "message": self.message,
            "entity_type": self.entity_type,
            "context": self.context,
        }


# ============================================================================
# BASE EXCEPTION CLASSES
# ============================================================================

class CapitalAgentsException(Exception):
    """
    Base exception for all Capital Agents errors.

    Inheriting from this allows catching all framework errors:
        try:
            ...
        except CapitalAgentsException as e:
            ...
    """

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__


class NotFoundError(CapitalAgentsException):
    """Base class for lookups of entities that do not exist."""
    pass


class WorkflowError(CapitalAgentsException):
    """Base class for illegal lifecycle operations."""
    pass


class PersistenceError(CapitalAgentsException):
    """Base class for state load/save and report output failures."""
    pass


class ConfigurationError(CapitalAgentsException):
    """Base class for configuration/setup issues."""
    pass


# ============================================================================
# LOOKUP EXCEPTIONS
# ============================================================================

class ProjectNotFoundError(NotFoundError):
    """
    Raised when a validated project id is unknown.

    Example:
        raise ProjectNotFoundError("No validated project with id 'VAL-042'")
    """
    pass


class SectorNotFoundError(NotFoundError):
    """
    Raised when a sector id has no allocation record.

    Example:
        raise SectorNotFoundError("No sector allocation for 'SEC-404'")
    """
    pass


class PriorityNotFoundError(NotFoundError):
    """Raised when an investment priority id is unknown."""
    pass


class OpportunityNotFoundError(NotFoundError):
    """Raised when an opportunity id is unknown."""
    pass


class IssueNotFoundError(NotFoundError):
    """Raised when a data quality issue id is unknown."""
    pass


class RuleNotFoundError(NotFoundError):
    """Raised when a validation rule id is not in the catalogue."""
    pass


# ============================================================================
# WORKFLOW EXCEPTIONS
# ============================================================================

class InvalidTransitionError(WorkflowError):
    """
    Raised when a status change is not allowed by the lifecycle.

    Example:
        raise InvalidTransitionError("Cannot move VAL-001 from 'validated' to 'pending'")
    """
    pass


class InvalidOpportunityStateError(WorkflowError):
    """
    Raised when an opportunity that is not approved is converted.

    Example:
        raise InvalidOpportunityStateError("Opportunity OPP-007 is 'new', expected 'approved'")
    """
    pass


class DuplicateProjectError(WorkflowError):
    """
    Raised when a second validated project would reference the same
    opportunity id.
    """
    pass


# ============================================================================
# PERSISTENCE EXCEPTIONS
# ============================================================================

class StateNotFoundError(PersistenceError):
    """
    Raised when no saved state exists at the configured location.

    Example:
        raise StateNotFoundError("State file 'output/state.json' not found")
    """
    pass


class StateLoadError(PersistenceError):
    """Raised when a saved state cannot be parsed back into AppState."""
    pass


class OutputWriteError(PersistenceError):
    """
    Raised when a snapshot or Excel report cannot be written.

    Example:
        raise OutputWriteError("Cannot write quality_2026-10-19.xlsx: Permission denied")
    """
    pass


# ============================================================================
# CONFIGURATION EXCEPTIONS
# ============================================================================

class EnvConfigError(ConfigurationError):
    """
    Raised when an environment variable holds an unusable value.

    Example:
        raise EnvConfigError("CAPITAL_TOTAL_CAPITAL must be a number, got 'lots'")
    """
    pass

"""Exception hierarchy for extraction runs.

Library code raises these; only the CLI catches them, reports to stderr and
turns them into a non-zero exit status.
"""


class ExtractionError(Exception):
    """Base class for all fatal extraction errors."""

    exit_code = 1


class InvalidArgumentError(ExtractionError, ValueError):
    """Command-line input failed validation."""


class InvalidArgumentCount(InvalidArgumentError):
    """Wrong number of positional arguments."""


class InvalidNumericBound(InvalidArgumentError):
    """A bound is not a number, or the bounds are not ordered."""


class InvalidGridResolution(InvalidArgumentError):
    """ny is not a positive integer."""


class InvalidGridError(InvalidGridResolution):
    """The derived column count nx is not positive."""


class SnapshotRestoreFailure(ExtractionError):
    """The snapshot could not be restored into a source mesh."""


class AllocationFailure(ExtractionError, MemoryError):
    """The sample buffer could not be allocated."""


class MissingInputField(ExtractionError, KeyError):
    """A derived-field kernel reads a field the mesh does not hold."""

    def __str__(self):
        return str(self.args[0]) if self.args else ""

"""Exception hierarchy for the analysis engine."""


class TransitOptError(Exception):
    """Base class for all engine errors."""


class ValidationError(TransitOptError, ValueError):
    """A malformed input entity or parameter set."""


class EmptyInputError(ValidationError):
    """The line catalog or the ridership batch has nothing usable in it."""


class InsufficientDataError(TransitOptError):
    """A ranking or statistic needs more distinct groups than the batch has."""

    def __init__(self, required, available, what="groups"):
        self.required = required
        self.available = available
        super().__init__(
            f"need at least {required} distinct {what}, found {available}"
        )


class NoDataError(TransitOptError):
    """A line has no usable ridership data; the line is skipped, not the run."""

    def __init__(self, line_id, reason="no ridership records"):
        self.line_id = line_id
        self.reason = reason
        super().__init__(f"line {line_id}: {reason}")

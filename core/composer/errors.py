"""Exceptions raised while assembling a task graph."""


class TaskConfigurationError(ValueError):
    """A task was declared with a malformed configuration.

    Raised at graph-build time only. A graph containing a task that failed
    to construct cannot be executed until the declaration is fixed.
    """

"""Exception hierarchy for zotero-runner.

Fatal errors (configuration, install, process) propagate to the caller of
:meth:`zotero_runner.runner.Runner.run`. Reload failures are per plugin and are
returned as data inside :class:`zotero_runner.plugins.reload.ReloadOutcome`.
"""


class RunnerError(Exception):
    """Base class for all zotero-runner errors."""


class ConfigurationError(RunnerError):
    """A required path or setting is missing, invalid or unresolvable."""


class InstallError(RunnerError):
    """A plugin could not be installed into the running host."""


class ReloadError(RunnerError):
    """A single plugin could not be reloaded."""


class ProcessError(RunnerError):
    """The host process could not be spawned or its control channel connected."""


class TerminationError(RunnerError):
    """Best-effort teardown failed. Logged by the supervisor, never raised."""


class RunnerStateError(RunnerError):
    """Operation is not valid in the runner's current state."""

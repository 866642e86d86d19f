"""zotero-runner - development sessions for Zotero plugins.

Prepares a disposable run profile, launches Zotero with the remote debugger
enabled, installs plugins under development, and reloads them without a
restart.

Key modules:

- :mod:`zotero_runner.runner` - Session orchestration and run state machine
- :mod:`zotero_runner.profile` - prefs.js generation and extension state
- :mod:`zotero_runner.process` - Host process supervision and forced kill
- :mod:`zotero_runner.plugins` - Temporary/proxy installation and live reload
- :mod:`zotero_runner.remote` - Remote-control client protocol
- :mod:`zotero_runner.config` - YAML configuration
"""

__version__ = "0.2.0"

from zotero_runner.errors import (
    ConfigurationError,
    InstallError,
    ProcessError,
    ReloadError,
    RunnerError,
    RunnerStateError,
    TerminationError,
)
from zotero_runner.options import PluginInfo, RunOptions
from zotero_runner.runner import Runner, RunnerState

__all__ = [
    "ConfigurationError",
    "InstallError",
    "PluginInfo",
    "ProcessError",
    "ReloadError",
    "RunOptions",
    "Runner",
    "RunnerError",
    "RunnerState",
    "RunnerStateError",
    "TerminationError",
]

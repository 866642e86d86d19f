"""Run profile preparation: preferences and extension state."""

from zotero_runner.profile.extensions import activate_addons, write_proxy_file
from zotero_runner.profile.prefs import DEFAULT_PREFS, ProfileManager, format_pref

__all__ = [
    "DEFAULT_PREFS",
    "ProfileManager",
    "activate_addons",
    "format_pref",
    "write_proxy_file",
]

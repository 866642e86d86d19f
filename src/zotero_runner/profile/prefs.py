"""Preference file (``prefs.js``) generation for the run profile.

The host reads ``prefs.js`` top to bottom and the last assignment of a key
wins, so position encodes precedence: built-in defaults first, then whatever
the host persisted in earlier runs, then the caller's overrides.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from pathlib import Path

from zotero_runner.options import PrefValue, RunOptions

logger = logging.getLogger(__name__)

PREFS_FILENAME = "prefs.js"

# Keys the host uses to detect an application upgrade. Dropping them makes the
# host treat the profile as freshly provisioned and rescan extensions.
BUILD_IDENTITY_KEYS = (
    "extensions.lastAppBuildId",
    "extensions.lastAppVersion",
)

DEFAULT_PREFS: dict[str, PrefValue] = {
    # Remote debugging server, needed for the control channel
    "devtools.debugger.remote-enabled": True,
    "devtools.debugger.remote-websocket": True,
    "devtools.debugger.prompt-connection": False,
    "devtools.chrome.enabled": True,
    "devtools.browserconsole.contentMessages": True,
    # Load unsigned, unpackaged extensions from the profile
    "xpinstall.signatures.required": False,
    "extensions.autoDisableScopes": 0,
    "extensions.enableScopes": 15,
    "extensions.experiments.enabled": True,
    "extensions.logging.enabled": True,
    # Send dump() and console output to stdout
    "browser.dom.window.dump.enabled": True,
    "javascript.options.showInConsole": True,
    "dom.report_all_js_exceptions": True,
    # No first-run or update noise during development
    "app.update.enabled": False,
    "extensions.update.enabled": False,
    "extensions.zotero.firstRunGuidance": False,
    "extensions.zotero.firstRun2": False,
}

_PREF_LINE = re.compile(r'^\s*user_pref\(\s*"(?P<key>[^"]+)"\s*,\s*(?P<value>.*?)\s*\)\s*;\s*$')


def format_pref(key: str, value: PrefValue) -> str:
    """Render one ``user_pref`` line."""
    return f'user_pref("{key}", {json.dumps(value, ensure_ascii=False)});'


def parse_pref_line(line: str) -> tuple[str, str] | None:
    """Split a ``user_pref`` line into its key and raw value text.

    Returns:
        ``(key, value_text)`` or None if the line is not a preference
    """
    match = _PREF_LINE.match(line)
    if match is None:
        return None
    return match.group("key"), match.group("value")


def is_build_identity(key: str) -> bool:
    return key in BUILD_IDENTITY_KEYS


def _same_value(value_text: str, value: PrefValue) -> bool:
    try:
        parsed = json.loads(value_text)
    except ValueError:
        return value_text == json.dumps(value, ensure_ascii=False)
    # bool is an int subclass, so 0 == False without the type check
    return type(parsed) is type(value) and parsed == value


class ProfileManager:
    """Merges and persists preference state into a run profile directory."""

    def __init__(self, defaults: Mapping[str, PrefValue] | None = None) -> None:
        self.defaults = dict(DEFAULT_PREFS if defaults is None else defaults)

    @staticmethod
    def prefs_path(profile_dir: Path) -> Path:
        return profile_dir / PREFS_FILENAME

    def build_lines(
        self,
        existing: list[str],
        overrides: Mapping[str, PrefValue],
    ) -> list[str]:
        """Merge defaults, surviving persisted lines and overrides, in that order.

        A persisted line is dropped when it carries a build-identity key, when
        its key is overridden, or when it only restates a default. The last two
        rules keep repeated preparation from duplicating lines.
        """
        overrides = {k: v for k, v in overrides.items() if not is_build_identity(k)}

        surviving: list[str] = []
        for line in existing:
            if not line.strip():
                continue
            parsed = parse_pref_line(line)
            if parsed is not None:
                key, value_text = parsed
                if is_build_identity(key):
                    continue
                if key in overrides:
                    continue
                if key in self.defaults and _same_value(value_text, self.defaults[key]):
                    continue
            surviving.append(line.rstrip())

        return [
            *(format_pref(k, v) for k, v in self.defaults.items()),
            *surviving,
            *(format_pref(k, v) for k, v in overrides.items()),
        ]

    def prepare(self, options: RunOptions) -> Path:
        """Write the merged ``prefs.js`` into the profile directory.

        Args:
            options: Run options; only ``profile_path`` and ``custom_prefs`` are read

        Returns:
            Path of the written preference file
        """
        path = self.prefs_path(options.profile_dir)

        existing: list[str] = []
        if path.exists():
            existing = path.read_text(encoding="utf-8").splitlines()
        else:
            logger.debug("No existing %s in %s, starting fresh", PREFS_FILENAME, path.parent)

        dropped = [k for k in options.custom_prefs if is_build_identity(k)]
        if dropped:
            logger.warning("Ignoring build-identity preference overrides: %s", ", ".join(dropped))

        lines = self.build_lines(existing, options.custom_prefs)

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        logger.debug("Wrote %d preferences to %s", len(lines), path)
        return path

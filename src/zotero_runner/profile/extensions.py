"""Extension state inside a run profile.

Covers the proxy pointer files under ``<profile>/extensions/`` and the host's
activation-state database ``<profile>/extensions.json``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

EXTENSIONS_DIRNAME = "extensions"
ACTIVATION_STATE_FILENAME = "extensions.json"


def proxy_file_path(profile_dir: Path, addon_id: str) -> Path:
    return profile_dir / EXTENSIONS_DIRNAME / addon_id


def packaged_file_path(profile_dir: Path, addon_id: str) -> Path:
    return profile_dir / EXTENSIONS_DIRNAME / f"{addon_id}.xpi"


def write_proxy_file(profile_dir: Path, addon_id: str, build_dir: Path) -> Path:
    """Point the host at an unpackaged build directory.

    Removes a packaged ``<id>.xpi`` for the same id, which the host would
    otherwise load instead of the pointer.

    Returns:
        Path of the pointer file
    """
    path = proxy_file_path(profile_dir, addon_id)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(str(build_dir), encoding="utf-8")
    logger.debug("Proxy file for '%s' written: %s -> %s", addon_id, path, build_dir)

    xpi = packaged_file_path(profile_dir, addon_id)
    if xpi.exists():
        xpi.unlink()
        logger.debug("Removed stale packaged extension %s", xpi)

    return path


def activate_addons(profile_dir: Path, addon_ids: set[str]) -> list[str]:
    """Force-enable inactive entries for ``addon_ids`` in ``extensions.json``.

    Only entries whose ``active`` is ``false`` are touched, and only their
    ``active`` and ``userDisabled`` fields. The file is rewritten only when
    something changed. A missing file is normal before the host has ever
    opened the profile.

    Returns:
        Ids that were flipped to active
    """
    path = profile_dir / ACTIVATION_STATE_FILENAME
    if not path.exists():
        return []

    try:
        content: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Cannot read %s, leaving it for the host to rebuild: %s", path, e)
        return []

    addons = content.get("addons") if isinstance(content, dict) else None
    if not isinstance(addons, list):
        logger.warning("%s has no 'addons' list, skipping activation", path)
        return []

    activated: list[str] = []
    for addon in addons:
        if not isinstance(addon, dict):
            continue
        if addon.get("id") in addon_ids and addon.get("active") is False:
            addon["active"] = True
            addon["userDisabled"] = False
            activated.append(addon["id"])
            logger.debug("Activated '%s' in %s", addon["id"], path)

    if activated:
        path.write_text(
            json.dumps(content, ensure_ascii=False, separators=(",", ":")),
            encoding="utf-8",
        )
    return activated

"""Per-workspace persisted state (the remembered solution choice)."""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .utils.path import normalize_path

logger = logging.getLogger(__name__)

LAST_SOLUTION_KEY = "lastSolutionPathOrFolder"


class WorkspaceState:
    """Small JSON key-value store keyed to one workspace.

    Lives outside the workspace, under ``<state_dir>/workspaces/``, in a file
    named after a hash of the workspace's canonical path.
    """

    def __init__(self, workspace_path: Union[str, Path], state_dir: Union[str, Path]) -> None:
        self.workspace_path = str(workspace_path)
        digest = hashlib.sha1(normalize_path(workspace_path).encode("utf-8")).hexdigest()
        self.file = Path(state_dir) / "workspaces" / f"{digest}.json"

    def _read(self) -> Dict[str, Any]:
        try:
            with open(self.file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable workspace state {self.file}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def update(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``; ``None`` removes the key."""
        data = self._read()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        data["workspace"] = self.workspace_path

        self.file.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.file.with_suffix(".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        tmp.replace(self.file)

    # Remembered solution

    @property
    def last_solution(self) -> Optional[str]:
        value = self.get(LAST_SOLUTION_KEY)
        return value if isinstance(value, str) and value else None

    def remember_solution(self, path: Optional[str]) -> None:
        self.update(LAST_SOLUTION_KEY, path)

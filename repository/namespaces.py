# repository/namespaces.py
from typing import Final

ROOT: Final[str] = "lifecycle"

DOCUMENTS: Final[str] = f"{ROOT}:documents"
WORKSPACES: Final[str] = f"{ROOT}:workspaces"  # per-workspace document index sets
WORKFLOWS: Final[str] = f"{ROOT}:workflows:wipe"

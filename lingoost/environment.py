"""Load dotenv files before settings are read.

Files are read in this order, and a variable set by an earlier file (or by the
real environment) is never overwritten:

1. every path in ``LINGOOST_ENV_FILE`` (``os.pathsep`` separated)
2. ``.env`` in the project root
3. ``.env.<LINGOOST_ENV>`` when ``LINGOOST_ENV`` is set
4. ``.env.local``
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Tuple

from dotenv import load_dotenv

ENV_FILE_ENV = "LINGOOST_ENV_FILE"
ENV_NAME_ENV = "LINGOOST_ENV"
PROJECT_ROOT = Path(__file__).resolve().parents[1]

_loaded: Tuple[Path, ...] | None = None


def dotenv_candidates() -> List[Path]:
    """Return the dotenv paths to try, first match wins, without duplicates."""

    explicit = [
        Path(entry).expanduser().resolve()
        for entry in os.environ.get(ENV_FILE_ENV, "").split(os.pathsep)
        if entry.strip()
    ]
    names = [".env"]
    environment_name = os.environ.get(ENV_NAME_ENV, "").strip()
    if environment_name:
        names.append(f".env.{environment_name}")
    names.append(".env.local")

    ordered: List[Path] = []
    for path in explicit + [(PROJECT_ROOT / name).resolve() for name in names]:
        if path not in ordered:
            ordered.append(path)
    return ordered


def load_environment(*, force: bool = False) -> Tuple[Path, ...]:
    """Load the dotenv candidates once per process and return the files applied."""

    global _loaded
    if _loaded is None or force:
        _loaded = tuple(
            path
            for path in dotenv_candidates()
            if path.is_file() and load_dotenv(path, override=False)
        )
    return _loaded


__all__ = ["dotenv_candidates", "load_environment"]

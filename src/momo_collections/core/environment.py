"""
Utilities for building the environment used by the collection helpers.

The helpers understand .env files, allow callers to layer overrides, and
ultimately return a plain ``dict`` that can be fed into
:class:`momo_collections.core.config.CollectionConfig`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

__all__ = ["CollectionEnvironment", "build_environment"]


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def _parse_env_file(path: Path) -> Optional[Dict[str, str]]:
    try:
        data = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None

    values: Dict[str, str] = {}

    for raw_line in data.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, value = line.split("=", 1)
        values[key.strip()] = _strip_quotes(value.strip())
    return values


@dataclass(frozen=True)
class CollectionEnvironment:
    """
    A resolved set of environment variables used to configure collections.

    ``env_file`` is the .env file that contributed values, or ``None`` when
    no file was read.
    """

    variables: Mapping[str, str]
    env_file: Optional[Path] = None


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> CollectionEnvironment:
    """
    Assemble a :class:`CollectionEnvironment` from multiple sources.

    ``base`` defaults to :data:`os.environ`. ``env_file`` is optional; set it to
    ``None`` to skip file loading entirely. ``overrides`` always win.
    """
    merged: Dict[str, str] = dict(os.environ if base is None else base)

    loaded_from: Optional[Path] = None
    if env_file is not None:
        path = Path(env_file)
        file_values = _parse_env_file(path)
        if file_values is not None:
            loaded_from = path
            for key, value in file_values.items():
                merged.setdefault(key, value)

    if overrides:
        merged.update(overrides)

    return CollectionEnvironment(variables=merged, env_file=loaded_from)

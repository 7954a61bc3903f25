"""
Resolve the variables that configure a facilitator process.

Sources are layered: the process environment, then an optional ``.env`` file
that only fills in missing keys, then explicit overrides which always win.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

__all__ = ["FacilitatorEnvironment", "build_environment", "read_env_file"]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def read_env_file(path: str) -> Dict[str, str]:
    """
    Parse ``KEY=VALUE`` lines from ``path``.

    Blank lines, ``#`` comments and a leading ``export`` are ignored; a
    missing file yields an empty mapping.
    """
    values: Dict[str, str] = {}
    try:
        data = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return values

    for raw_line in data.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, value = line.split("=", 1)
        values[key.strip()] = _unquote(value.strip())
    return values


@dataclass(frozen=True)
class FacilitatorEnvironment:
    variables: Mapping[str, str]

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.variables.get(key)
        if value is None or value.strip() == "":
            return default
        return value.strip()


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> FacilitatorEnvironment:
    """
    ``base`` defaults to :data:`os.environ`; pass ``env_file=None`` to skip
    file loading.
    """
    merged: Dict[str, str] = dict(os.environ if base is None else base)

    if env_file is not None:
        for key, value in read_env_file(env_file).items():
            merged.setdefault(key, value)

    if overrides:
        merged.update(overrides)

    return FacilitatorEnvironment(variables=merged)

"""
Reading Litego settings from the process, a dotenv file and explicit values.

:func:`build_environment` is the entry point used by
:func:`litego_payments.core.config.load_config`. Precedence, lowest first:
dotenv file, process environment (or ``base``), ``overrides``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, MutableMapping, Optional


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _parse_env_file(path: Path) -> Dict[str, str]:
    if not path.is_file():
        return {}
    parsed: Dict[str, str] = {}
    with path.open(encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if line.startswith("export "):
                line = line[len("export "):].lstrip()
            name, sep, raw = line.partition("=")
            if not sep or not name or line.startswith("#"):
                continue
            parsed[name.strip()] = _unquote(raw.strip())
    return parsed


def load_env_file(
    path: str = ".env",
    *,
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Copy dotenv settings from ``path`` into ``environ`` (default :data:`os.environ`).

    Variables that are already set keep their value. A missing file is not an
    error. Returns a snapshot of the updated mapping.
    """
    environ = os.environ if environ is None else environ
    for name, value in _parse_env_file(Path(path)).items():
        if name not in environ:
            environ[name] = value
    return dict(environ)


@dataclass(frozen=True)
class LitegoEnvironment:
    """Snapshot of the merged variables."""

    variables: Mapping[str, str]

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.variables.get(key, default)


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> LitegoEnvironment:
    """
    Resolve the variables a :class:`LitegoConfig` is read from.

    ``base`` stands in for :data:`os.environ`. The dotenv file at ``env_file``
    only supplies names ``base`` lacks; ``env_file=None`` skips it.
    ``overrides`` replace anything.
    """
    variables: Dict[str, str] = {}
    if env_file is not None:
        variables.update(_parse_env_file(Path(env_file)))
    variables.update(os.environ if base is None else base)
    variables.update(overrides or {})
    return LitegoEnvironment(variables=variables)

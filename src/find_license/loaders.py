"""Enumerate Go modules from ``go list -m -json all`` output."""

from __future__ import annotations

import json
import logging
import subprocess
import sys
from pathlib import Path

from pydantic import ValidationError

from find_license.errors.exceptions import ModuleLoadError
from find_license.types import Module

logger = logging.getLogger(__name__)

GO_LIST_COMMAND = ("go", "list", "-m", "-json", "all")


def parse_go_list_output(text: str) -> list[Module]:
    """Decode the stream of concatenated JSON objects ``go list -json`` prints."""
    decoder = json.JSONDecoder()
    modules: list[Module] = []
    pos = 0
    end = len(text)

    while True:
        while pos < end and text[pos].isspace():
            pos += 1
        if pos >= end:
            break
        try:
            obj, pos = decoder.raw_decode(text, pos)
        except json.JSONDecodeError as e:
            raise ModuleLoadError(f"failed to load modules: {e}", original=e) from e
        if not isinstance(obj, dict):
            raise ModuleLoadError(f"failed to load modules: expected object, got {type(obj).__name__}")
        try:
            modules.append(Module.from_go_list(obj))
        except ValidationError as e:
            raise ModuleLoadError(f"failed to load modules: {e}", original=e) from e

    return modules


class GoListLoader:
    """Runs ``go list -m -json all`` in ``cwd`` (requires the go toolchain)."""

    def __init__(self, cwd: str | Path | None = None) -> None:
        self._cwd = cwd

    def load(self) -> list[Module]:
        logger.debug("Load modules from go list")
        try:
            proc = subprocess.run(
                GO_LIST_COMMAND,
                cwd=self._cwd,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError as e:
            raise ModuleLoadError("failed to go list: go command not found", original=e) from e
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip()
            raise ModuleLoadError(f"failed to go list {detail}", original=e) from e

        modules = parse_go_list_output(proc.stdout)
        logger.debug("%d modules loaded (go list %d bytes)", len(modules), len(proc.stdout))
        return modules


class FileLoader:
    """Reads saved ``go list -m -json all`` output from a file, or stdin for ``-``."""

    def __init__(self, path: str | Path) -> None:
        self._path = str(path)

    def load(self) -> list[Module]:
        logger.debug("Load modules from %s", self._path)
        if self._path == "-":
            text = sys.stdin.read()
        else:
            try:
                text = Path(self._path).read_text(encoding="utf-8")
            except OSError as e:
                raise ModuleLoadError(f"failed to read {self._path}: {e}", original=e) from e

        modules = parse_go_list_output(text)
        logger.debug("%d modules loaded (%s %d bytes)", len(modules), self._path, len(text))
        return modules


def remove_indirect(modules: list[Module]) -> list[Module]:
    return [m for m in modules if not m.indirect]


def remove_errored(modules: list[Module]) -> list[Module]:
    """Drop modules that go list could not load, logging each one."""
    kept: list[Module] = []
    for module in modules:
        if module.error is None:
            kept.append(module)
            continue
        logger.info(
            "Got error from %s %s %s", module.path, module.version, json.dumps(module.error)
        )
    return kept

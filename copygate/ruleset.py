"""
Ruleset Source: Read-Once Style Rules

The ruleset is an opaque list of style/quality rules handed to the
rewrite collaborator as context. It is identified by the SHA-256 of
its raw bytes (catalog_version), never by inspecting its content.

A missing or unreadable source degrades to an empty ruleset.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RulesetBundle:
    """Loaded ruleset content plus its content hash."""
    rules: tuple
    catalog_version: str
    path: Optional[str] = None


def stable_hash(raw: bytes) -> str:
    return hashlib.sha256(raw).hexdigest()


def parse_ruleset(raw: bytes, path: Optional[str] = None) -> RulesetBundle:
    """Hash raw bytes and decode them into a rule list (empty on bad JSON)."""
    version = stable_hash(raw)
    rules: list = []
    if raw.strip():
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Ruleset at %s is not valid JSON: %s", path, e)
            data = []
        if isinstance(data, dict) and isinstance(data.get("rules"), list):
            data = data["rules"]
        if isinstance(data, list):
            rules = data
    return RulesetBundle(rules=tuple(rules), catalog_version=version, path=path)


class RulesetSource:
    """
    Lazily loads a ruleset file once and serves the same bundle afterwards.

    Constructed by the hosting process and passed to the pipeline.
    The bundle is immutable once loaded.
    """

    def __init__(self, path: Union[str, Path, None]):
        self._path = str(path) if path else None
        self._bundle: Optional[RulesetBundle] = None

    @property
    def path(self) -> Optional[str]:
        return self._path

    def load(self) -> RulesetBundle:
        if self._bundle is None:
            self._bundle = self._read()
        return self._bundle

    def _read(self) -> RulesetBundle:
        raw = b""
        if self._path:
            try:
                raw = Path(self._path).read_bytes()
            except OSError as e:
                logger.warning(
                    "Ruleset unavailable, continuing with empty ruleset",
                    extra={"path": self._path, "error": str(e)},
                )
        else:
            logger.warning("No ruleset path configured, continuing with empty ruleset")
        return parse_ruleset(raw, path=self._path)

    @classmethod
    def from_rules(cls, rules: list) -> "RulesetSource":
        """Build an in-memory source (used by tests and embedding callers)."""
        raw = json.dumps(rules, sort_keys=True).encode("utf-8")
        source = cls(None)
        source._bundle = parse_ruleset(raw)
        return source

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from risk_check.core.scoring_config import DEFAULT_SCORING_CONFIG, ScoringConfig

logger = logging.getLogger(__name__)

# Version reported when a country has nothing published yet.
DEFAULT_RULESET_VERSION = 1

_ISO_RE = re.compile(r"^[A-Z]{2,3}$")
_VERSION_FILE_RE = re.compile(r"^v(\d+)\.json$")


def _utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _read_json(path: Path) -> Optional[Any]:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable ruleset file %s", path)
        return None


def _write_json_atomic(path: Path, obj: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(path)


def _append_jsonl(path: Path, obj: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(obj, ensure_ascii=False) + "\n")


def normalise_country_iso(country_iso: str) -> str:
    iso = str(country_iso or "").strip().upper()
    if not _ISO_RE.match(iso):
        raise ValueError(f"Invalid country ISO code: {country_iso!r}")
    return iso


@dataclass(frozen=True)
class RulesetPaths:
    """
    On-disk layout::

        <root>/rulesets/<ISO>/meta.json
        <root>/rulesets/<ISO>/versions/v0001.json
        <root>/rulesets/<ISO>/audit.jsonl
    """

    root: Path

    @property
    def rulesets_dir(self) -> Path:
        return Path(self.root) / "rulesets"

    def country_dir(self, country_iso: str) -> Path:
        return self.rulesets_dir / normalise_country_iso(country_iso)

    def meta_path(self, country_iso: str) -> Path:
        return self.country_dir(country_iso) / "meta.json"

    def versions_dir(self, country_iso: str) -> Path:
        return self.country_dir(country_iso) / "versions"

    def version_path(self, country_iso: str, version: int) -> Path:
        return self.versions_dir(country_iso) / f"v{int(version):04d}.json"

    def audit_path(self, country_iso: str) -> Path:
        return self.country_dir(country_iso) / "audit.jsonl"


def init_ruleset_paths(root: str | Path) -> RulesetPaths:
    paths = RulesetPaths(root=Path(root))
    paths.rulesets_dir.mkdir(parents=True, exist_ok=True)
    return paths


def list_countries(paths: RulesetPaths) -> List[str]:
    if not paths.rulesets_dir.exists():
        return []
    isos = [p.name for p in paths.rulesets_dir.iterdir() if p.is_dir() and _ISO_RE.match(p.name)]
    isos.sort()
    return isos


def _published_versions(paths: RulesetPaths, country_iso: str) -> List[int]:
    vdir = paths.versions_dir(country_iso)
    if not vdir.exists():
        return []

    versions: List[int] = []
    for p in vdir.iterdir():
        m = _VERSION_FILE_RE.match(p.name)
        if m:
            versions.append(int(m.group(1)))
    versions.sort()
    return versions


def current_ruleset_version(paths: RulesetPaths, country_iso: str) -> Optional[int]:
    """
    Version recorded in meta.json. When meta.json is missing or unreadable the
    highest version file on disk is used instead.
    """
    meta = _read_json(paths.meta_path(country_iso))
    if isinstance(meta, dict) and meta.get("current_version") is not None:
        return int(meta["current_version"])

    published = _published_versions(paths, country_iso)
    return published[-1] if published else None


def read_ruleset(paths: RulesetPaths, country_iso: str, version: int) -> Optional[Dict[str, Any]]:
    obj = _read_json(paths.version_path(country_iso, version))
    return obj if isinstance(obj, dict) else None


def list_ruleset_versions(paths: RulesetPaths, country_iso: str) -> List[Dict[str, Any]]:
    vdir = paths.versions_dir(country_iso)
    if not vdir.exists():
        return []

    records: List[Dict[str, Any]] = []
    for p in sorted(vdir.glob("v*.json")):
        obj = _read_json(p)
        if isinstance(obj, dict):
            records.append(
                {
                    "version": int(obj.get("version", 0)),
                    "published_at": obj.get("published_at"),
                    "published_by": obj.get("published_by"),
                    "notes": obj.get("notes", ""),
                }
            )
    records.sort(key=lambda r: r["version"])
    return records


def append_audit(paths: RulesetPaths, country_iso: str, event: str, details: Optional[Dict[str, Any]] = None) -> None:
    record: Dict[str, Any] = {"ts": _utc_iso(), "event": str(event)}
    if details:
        record["details"] = details
    _append_jsonl(paths.audit_path(country_iso), record)


def publish_ruleset(
    paths: RulesetPaths,
    country_iso: str,
    published_by: str,
    notes: str = "",
    overrides: Optional[Dict[str, Any]] = None,
    base_config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> int:
    """Publish the next ruleset version for a country and return its number."""
    iso = normalise_country_iso(country_iso)
    publisher = str(published_by or "").strip()
    if not publisher:
        raise ValueError("published_by is required")

    # Rejects bad overrides before anything is written.
    base_config.with_overrides(overrides)

    version = max([current_ruleset_version(paths, iso) or 0] + _published_versions(paths, iso)) + 1
    version_path = paths.version_path(iso, version)
    if version_path.exists():
        raise FileExistsError(f"Ruleset v{version} for {iso} already exists: {version_path}")

    record = {
        "country_iso": iso,
        "version": version,
        "published_at": _utc_iso(),
        "published_by": publisher,
        "notes": str(notes or ""),
        "overrides": dict(overrides or {}),
    }

    _write_json_atomic(version_path, record)

    existing = _read_json(paths.meta_path(iso))
    meta = dict(existing) if isinstance(existing, dict) else {}
    meta.setdefault("country_iso", iso)
    meta.setdefault("created_at", _utc_iso())
    meta["current_version"] = version
    meta["updated_at"] = _utc_iso()
    _write_json_atomic(paths.meta_path(iso), meta)

    append_audit(paths, iso, "publish", {"version": version, "published_by": publisher})
    logger.info("Published ruleset v%d for %s by %s", version, iso, publisher)
    return version


def resolve_scoring_context(
    paths: RulesetPaths,
    country_iso: str,
    base_config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> Tuple[ScoringConfig, int]:
    """Return the scoring config in force for a country and its ruleset version."""
    iso = normalise_country_iso(country_iso)
    version = current_ruleset_version(paths, iso)
    if version is None:
        return base_config, DEFAULT_RULESET_VERSION

    record = read_ruleset(paths, iso, version)
    if record is None:
        raise FileNotFoundError(f"Ruleset v{version} for {iso} is recorded but missing on disk")

    return base_config.with_overrides(record.get("overrides") or {}), version

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from risk_check.core.assessment_engine import build_engine
from risk_check.core.assessment_types import assessment_to_dict
from risk_check.core.errors import ScoringError
from risk_check.core.ruleset_store import (
    DEFAULT_RULESET_VERSION,
    RulesetPaths,
    resolve_scoring_context,
)
from risk_check.core.scoring_config import DEFAULT_SCORING_CONFIG, load_scoring_config
from risk_check.domain.schemas import AssessmentRequest

logger = logging.getLogger("risk_check.cli")

USAGE = "Usage: python -m risk_check.cli.main <input.json> [store_root]\n"


def _configure_logging() -> None:
    level_name = os.environ.get("RISK_CHECK_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_input(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def run_assessment(raw: Dict[str, Any], store_root: Optional[str] = None) -> Dict[str, Any]:
    request = AssessmentRequest.model_validate(raw)

    config = DEFAULT_SCORING_CONFIG
    if request.scoring_config:
        config = load_scoring_config(Path(request.scoring_config))

    if store_root and request.country_iso:
        config, version = resolve_scoring_context(RulesetPaths(root=Path(store_root)), request.country_iso, config)
        if request.ruleset_version is not None and request.ruleset_version != version:
            raise ScoringError(
                f"rulesetVersion {request.ruleset_version} does not match the published "
                f"v{version} for {request.country_iso}"
            )
    else:
        if request.country_iso:
            logger.warning("countryIso %s ignored: no ruleset store given", request.country_iso)
        version = request.ruleset_version or DEFAULT_RULESET_VERSION

    engine = build_engine(config)
    output = engine.run(request.breakdown_payload(), request.partial_sources, version)
    return assessment_to_dict(output)


def main(argv: Optional[List[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 1 or len(args) > 2:
        sys.stderr.write(USAGE)
        return 2

    _configure_logging()

    input_path = args[0]
    store_root = args[1] if len(args) == 2 else None

    try:
        raw = _load_input(input_path)
    except (OSError, json.JSONDecodeError) as e:
        sys.stderr.write(f"Cannot read input {input_path}: {e}\n")
        return 1

    if not isinstance(raw, dict):
        sys.stderr.write("Input must be a JSON object\n")
        return 1

    try:
        result = run_assessment(raw, store_root)
    except ValidationError as e:
        sys.stderr.write(f"Invalid input: {e}\n")
        return 1
    except (ScoringError, FileNotFoundError) as e:
        logger.error("Assessment rejected: %s", e)
        sys.stderr.write(f"Assessment failed: {e}\n")
        return 1

    sys.stdout.write(json.dumps(result, ensure_ascii=False, indent=2))
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

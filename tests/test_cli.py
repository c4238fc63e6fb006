import json
import logging

from risk_check.cli.main import main, run_assessment
from risk_check.core.ruleset_store import init_ruleset_paths, publish_ruleset


def _write(tmp_path, payload, name="input.json"):
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_cli_prints_assessment(tmp_path, capsys):
    path = _write(
        tmp_path,
        {
            "breakdown": {
                "sanctions": 100,
                "pep": 100,
                "adverseMedia": 0,
                "internalHistory": 0,
                "countryBaseline": 0,
            },
            "partialSources": ["sanctions-timeout"],
            "rulesetVersion": 3,
        },
    )

    assert main([path]) == 0

    out = json.loads(capsys.readouterr().out)
    assert out["tier"] == "medium"
    assert abs(out["overallScore"] - 60.0) < 1e-9
    assert out["partialSources"] == ["sanctions-timeout"]
    assert out["rulesetVersion"] == 3


def test_cli_accepts_list_breakdown_with_missing_partial(tmp_path, capsys):
    path = _write(
        tmp_path,
        {
            "breakdown": [
                {"source": "sanctions", "rawScore": None},
                {"source": "pep", "rawScore": 10},
                {"source": "adverseMedia", "rawScore": 10},
                {"source": "internalHistory", "rawScore": 10},
                {"source": "countryBaseline", "rawScore": 10},
            ],
            "partial_sources": ["sanctions-timeout"],
            "ruleset_version": 1,
        },
    )

    assert main([path]) == 0
    out = json.loads(capsys.readouterr().out)
    sanctions = [b for b in out["breakdown"] if b["source"] == "sanctions"][0]
    assert sanctions["rawScore"] == 50.0


def test_cli_uses_ruleset_store(tmp_path, capsys):
    store = tmp_path / "store"
    paths = init_ruleset_paths(store)
    publish_ruleset(paths, "DE", "admin")
    publish_ruleset(paths, "DE", "admin", overrides={"thresholds": {"low_max": 20}})

    path = _write(
        tmp_path,
        {
            "breakdown": {
                "sanctions": 25,
                "pep": 25,
                "adverseMedia": 25,
                "internalHistory": 25,
                "countryBaseline": 25,
            },
            "countryIso": "de",
        },
    )

    assert main([path, str(store)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["rulesetVersion"] == 2
    assert out["tier"] == "medium"


def test_cli_rejects_ruleset_version_that_differs_from_store(tmp_path, capsys):
    store = tmp_path / "store"
    paths = init_ruleset_paths(store)
    publish_ruleset(paths, "DE", "admin")
    publish_ruleset(paths, "DE", "admin")

    payload = {
        "breakdown": {
            "sanctions": 25,
            "pep": 25,
            "adverseMedia": 25,
            "internalHistory": 25,
            "countryBaseline": 25,
        },
        "countryIso": "DE",
        "rulesetVersion": 1,
    }

    assert main([_write(tmp_path, payload), str(store)]) == 1
    assert "does not match the published v2" in capsys.readouterr().err

    payload["rulesetVersion"] = 2
    assert run_assessment(payload, str(store))["rulesetVersion"] == 2


def test_country_without_store_is_logged(caplog):
    payload = {
        "breakdown": {
            "sanctions": 10,
            "pep": 10,
            "adverseMedia": 10,
            "internalHistory": 10,
            "countryBaseline": 10,
        },
        "countryIso": "FR",
    }

    with caplog.at_level(logging.WARNING, logger="risk_check.cli"):
        out = run_assessment(payload)

    assert out["rulesetVersion"] == 1
    assert "countryIso FR ignored" in caplog.text


def test_cli_rejects_out_of_range_score(tmp_path, capsys):
    path = _write(
        tmp_path,
        {
            "breakdown": {
                "sanctions": 140,
                "pep": 0,
                "adverseMedia": 0,
                "internalHistory": 0,
                "countryBaseline": 0,
            },
            "rulesetVersion": 1,
        },
    )

    assert main([path]) == 1
    assert "Assessment failed" in capsys.readouterr().err


def test_cli_rejects_missing_source(tmp_path, capsys):
    path = _write(tmp_path, {"breakdown": {"sanctions": 10}, "rulesetVersion": 1})
    assert main([path]) == 1
    assert "missing sources" in capsys.readouterr().err


def test_cli_rejects_bad_shape(tmp_path, capsys):
    path = _write(tmp_path, {"breakdown": {"sanctions": 10}})
    assert main([path]) == 1
    assert "Invalid input" in capsys.readouterr().err


def test_cli_usage():
    assert main([]) == 2

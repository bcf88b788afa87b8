"""
Tests for utils/ (load_config.py, log.py) and rule-file loading

Covers:
- load_config: caching, validator, data-dir resolution, errors
- load_classifier_config on top of load_config
- topic-gated debug printer
"""

from __future__ import annotations

import importlib
import io
import json

import pytest

load_config_mod = importlib.import_module("shade_catalog.utils.load_config")
log_mod = importlib.import_module("shade_catalog.utils.log")
rules = importlib.import_module("shade_catalog.classification.rules")

load_config = load_config_mod.load_config


@pytest.fixture(autouse=True)
def fresh_cache():
    load_config_mod.clear_config_cache()
    yield
    load_config_mod.clear_config_cache()


def _write(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


# ──────────────────────────────────────────────────────────────────────────────
# load_config
# ──────────────────────────────────────────────────────────────────────────────
def test_returns_parsed_object(tmp_path):
    _write(tmp_path / "cfg.json", {"a": [1, 2]})
    assert load_config("cfg", base_dir=tmp_path) == {"a": [1, 2]}
    assert load_config("cfg.json", base_dir=tmp_path) == {"a": [1, 2]}


def test_results_are_cached(tmp_path):
    _write(tmp_path / "cfg.json", {"x": 1})
    first = load_config("cfg", base_dir=tmp_path)
    assert load_config("cfg", base_dir=tmp_path) is first


def test_validator_result_is_returned_and_cached(tmp_path):
    _write(tmp_path / "cfg.json", {"x": 1})
    calls = []

    def to_keys(data):
        calls.append(data)
        return tuple(data)

    assert load_config("cfg", base_dir=tmp_path, validator=to_keys) == ("x",)
    assert load_config("cfg", base_dir=tmp_path, validator=to_keys) == ("x",)
    assert len(calls) == 1
    # a different validator gets its own cache entry
    assert load_config("cfg", base_dir=tmp_path) == {"x": 1}


def test_validator_errors_become_parse_errors(tmp_path):
    _write(tmp_path / "cfg.json", {"x": 1})

    def reject(_):
        raise KeyError("y")

    with pytest.raises(load_config_mod.ConfigParseError):
        load_config("cfg", base_dir=tmp_path, validator=reject)


def test_non_object_documents_are_rejected(tmp_path):
    _write(tmp_path / "cfg.json", [1, 2])
    with pytest.raises(load_config_mod.ConfigTypeError):
        load_config("cfg", base_dir=tmp_path)


def test_missing_and_escaping_files(tmp_path):
    with pytest.raises(load_config_mod.ConfigFileNotFound):
        load_config("absent", base_dir=tmp_path)
    with pytest.raises(load_config_mod.ConfigFileNotFound):
        load_config("../outside", base_dir=tmp_path / "data")


def test_invalid_json(tmp_path):
    (tmp_path / "bad.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(load_config_mod.ConfigParseError):
        load_config("bad", base_dir=tmp_path)


def test_data_dir_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    _write(tmp_path / "cfg.json", {"from": "env"})
    assert load_config("cfg") == {"from": "env"}


def test_data_dir_discovered_from_cwd(tmp_path, monkeypatch):
    for var in load_config_mod.DATA_DIR_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    data = tmp_path / "data"
    data.mkdir()
    _write(data / "cfg.json", {"found": True})
    nested = tmp_path / "pkg" / "sub"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)
    assert load_config("cfg") == {"found": True}


def test_comments_need_json5(tmp_path):
    pytest.importorskip("json5")
    (tmp_path / "cfg.json5").write_text('{\n  // note\n  "x": 1,\n}\n', encoding="utf-8")
    assert load_config("cfg.json5", base_dir=tmp_path, allow_comments=True) == {"x": 1}


# ──────────────────────────────────────────────────────────────────────────────
# Rule files
# ──────────────────────────────────────────────────────────────────────────────
def test_load_classifier_config_from_file(tmp_path):
    _write(
        tmp_path / "classification_rules.json",
        {
            "rules": [
                {
                    "label": "cool",
                    "when": [{"hue": {"ge": 180, "lt": 300}}],
                    "bands": [[0, 49, "D"], [50, 100, "L"]],
                },
                {"label": "random", "bands": [[0, 100, "M"]]},
            ],
            "contour_fallback_label": "universal",
        },
    )
    cfg = rules.load_classifier_config(base_dir=tmp_path)
    assert cfg.labels == ("cool", "random")
    assert cfg.contour_fallback_label == "universal"
    assert cfg.base_categories == frozenset({"foundation", "concealer", "skin-tint"})
    # the built config itself is what the loader caches
    assert rules.load_classifier_config(base_dir=tmp_path) is cfg


def test_load_classifier_config_rejects_bad_rules(tmp_path):
    _write(tmp_path / "rules.json", {"rules": [{"label": "x", "bands": [[0, 10, "XL"]]}]})
    with pytest.raises(load_config_mod.ConfigParseError):
        rules.load_classifier_config("rules", base_dir=tmp_path)


# ──────────────────────────────────────────────────────────────────────────────
# Debug printer
# ──────────────────────────────────────────────────────────────────────────────
@pytest.fixture
def topics(monkeypatch):
    def _set(value):
        if value is None:
            monkeypatch.delenv(log_mod.ENV_VAR, raising=False)
        else:
            monkeypatch.setenv(log_mod.ENV_VAR, value)
        log_mod.reload_topics()

    yield _set
    monkeypatch.delenv(log_mod.ENV_VAR, raising=False)
    log_mod.reload_topics()


def test_debug_is_silent_by_default(topics):
    topics(None)
    buf = io.StringIO()
    log_mod.debug("hello", topic="build", stream=buf)
    assert buf.getvalue() == ""
    assert not log_mod.is_enabled("build")


def test_debug_prints_enabled_topics(topics):
    topics("Build, classify")
    buf = io.StringIO()
    log_mod.debug("hello", topic="BUILD", stream=buf)
    log_mod.debug("quiet", topic="store", stream=buf)
    out = buf.getvalue()
    assert "[build][DEBUG] hello" in out
    assert "quiet" not in out


def test_debug_all_enables_everything(topics, capsys):
    topics("all")
    log_mod.debug("anything", topic="store", level="info")
    assert "[store][INFO] anything" in capsys.readouterr().err

# -*- coding: utf-8 -*-
"""Tests for configuration loading."""

import json

import pytest

from docktidy.config import (
    DEFAULT_CONFIG,
    build_policy,
    build_prune_options,
    load_config,
    parse_types,
    save_config,
)
from docktidy.models import ResourceType


def test_missing_file_gives_defaults(temp_config_file):
    assert load_config(temp_config_file) == DEFAULT_CONFIG


def test_user_values_override_defaults(temp_config_file):
    save_config({"older_than_days": 30}, temp_config_file)
    config = load_config(temp_config_file)
    assert config["older_than_days"] == 30
    assert config["exclude_labels"] == DEFAULT_CONFIG["exclude_labels"]


def test_invalid_json_falls_back(temp_config_file):
    temp_config_file.parent.mkdir(parents=True)
    temp_config_file.write_text("{not json")
    assert load_config(temp_config_file) == DEFAULT_CONFIG


def test_save_writes_json(temp_config_file):
    save_config({"min_size_bytes": 5}, temp_config_file)
    assert json.loads(temp_config_file.read_text()) == {"min_size_bytes": 5}


def test_build_prune_options_defaults():
    options = build_prune_options(DEFAULT_CONFIG)
    assert options.dry_run
    assert not options.force
    assert options.older_than_days == 7
    assert options.exclude_labels == frozenset({"docktidy.keep"})
    assert options.include_types == frozenset()


def test_build_prune_options_overrides():
    config = dict(DEFAULT_CONFIG, include_types=["image"])
    options = build_prune_options(config, older_than_days=1, force=True, min_size_bytes=None)
    assert options.older_than_days == 1
    assert options.force
    assert options.min_size_bytes == 0
    assert options.include_types == frozenset({ResourceType.IMAGE})


def test_parse_types_rejects_unknown():
    with pytest.raises(ValueError):
        parse_types(["imagez"])


def test_build_policy():
    policy = build_policy(dict(DEFAULT_CONFIG, safe_after_days=10, high_risk_types=["network"]))
    assert policy.safe_after_days == 10
    assert policy.high_risk_types == frozenset({ResourceType.NETWORK})


@pytest.mark.parametrize(
    "key, value",
    [
        ("include_types", ["imagez"]),
        ("high_risk_types", "network"),
        ("safe_after_days", None),
        ("older_than_days", -3),
        ("min_size_bytes", "big"),
        ("timeout_seconds", True),
        ("exclude_labels", [1, 2]),
    ],
)
def test_invalid_value_falls_back_to_default(temp_config_file, key, value):
    save_config({key: value}, temp_config_file)
    config = load_config(temp_config_file)
    assert config[key] == DEFAULT_CONFIG[key]
    # The loaded config always builds cleanly.
    build_prune_options(config)
    build_policy(config)


def test_valid_values_survive_next_to_invalid_ones(temp_config_file):
    save_config({"include_types": ["imagez"], "older_than_days": 30}, temp_config_file)
    config = load_config(temp_config_file)
    assert config["older_than_days"] == 30
    assert config["include_types"] == []


def test_top_level_list_falls_back(temp_config_file):
    temp_config_file.parent.mkdir(parents=True)
    temp_config_file.write_text("[1, 2, 3]")
    assert load_config(temp_config_file) == DEFAULT_CONFIG

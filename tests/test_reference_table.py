import json
from pathlib import Path

import pytest

from components.reference_table import (
    DEFAULT_REFERENCE_TABLE,
    ReferenceTableError,
    load_reference_table,
    load_reference_table_or_default,
    parse_reference_table,
    table_to_payload,
)

ROOT = Path(__file__).resolve().parents[1]


def test_shipped_dataset_matches_builtin_table():
    table = load_reference_table(ROOT / "data" / "emotion_reference.json")
    assert table == DEFAULT_REFERENCE_TABLE
    assert len(table) == 25


def test_builtin_table_respects_domains():
    for point in DEFAULT_REFERENCE_TABLE:
        assert -1.0 <= point.valence <= 1.0
        assert -1.0 <= point.dominance <= 1.0
        assert 0.0 <= point.arousal <= 1.0


def test_payload_conversion_is_lossless():
    assert parse_reference_table(table_to_payload(DEFAULT_REFERENCE_TABLE)) == DEFAULT_REFERENCE_TABLE


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"emotion": "joy"},
        [{"emotion": "joy", "valence": 0.5, "dominance": 0.5}],
        [{"emotion": "joy", "valence": 1.5, "dominance": 0.5, "arousal": 0.5}],
        [{"emotion": "joy", "valence": 0.5, "dominance": 0.5, "arousal": -0.1}],
    ],
)
def test_malformed_payloads_are_rejected(payload):
    with pytest.raises(ReferenceTableError):
        parse_reference_table(payload)


def test_unparseable_file_is_rejected(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ReferenceTableError):
        load_reference_table(path)


def test_undecodable_file_falls_back_to_builtin_table(tmp_path):
    path = tmp_path / "binary.json"
    path.write_bytes(b'[{"emotion": "\xff\xfe", "valence": 0.1, "dominance": 0.1, "arousal": 0.1}]')
    with pytest.raises(ReferenceTableError):
        load_reference_table(path)
    assert load_reference_table_or_default(path) is DEFAULT_REFERENCE_TABLE


def test_fallback_to_builtin_table(tmp_path):
    assert load_reference_table_or_default(None) is DEFAULT_REFERENCE_TABLE
    assert load_reference_table_or_default(tmp_path / "missing.json") is DEFAULT_REFERENCE_TABLE

    path = tmp_path / "empty.json"
    path.write_text("[]", encoding="utf-8")
    assert load_reference_table_or_default(path) is DEFAULT_REFERENCE_TABLE


def test_custom_table_is_loaded(tmp_path):
    path = tmp_path / "custom.json"
    path.write_text(json.dumps([{"emotion": "awe", "valence": 0.4, "dominance": -0.2, "arousal": 0.7}]))
    table = load_reference_table_or_default(path)
    assert [p.label for p in table] == ["awe"]

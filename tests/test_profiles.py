from dataclasses import FrozenInstanceError
from unittest.mock import patch

import pytest

from legaldoc.profile import loader
from legaldoc.profile.loader import get_profile, list_profiles, profile_from_dict, reload_profiles


@pytest.fixture
def profile_dir(tmp_path):
    yield tmp_path
    reload_profiles()


def test_builtin_profiles():
    strict = get_profile("strict")
    assert strict.thresholds.verdict == "dual"
    assert strict.text.min_document_length == 2000
    assert strict.weights.url == 0.4

    lax = get_profile("lax")
    assert lax.thresholds.verdict == "single"
    assert lax.thresholds.single_confidence == 0.3
    assert lax.text.min_document_length == 500
    assert {"strict", "lax"} <= set(list_profiles())


def test_default_profile_follows_config():
    with patch("legaldoc.config.PROFILE", "lax"):
        assert get_profile().name == "lax"
    assert get_profile().name == "strict"


def test_unknown_profile_raises():
    with pytest.raises(KeyError):
        get_profile("nope")


def test_profile_from_dict_fills_defaults():
    p = profile_from_dict({"name": "tight", "text": {"max_chunk_size": 500}})
    assert p.name == "tight"
    assert p.text.max_chunk_size == 500
    assert p.text.min_chunk_size == 200
    assert p.weights.title == 0.3


def test_yaml_profiles_are_loaded(profile_dir):
    (profile_dir / "short.yml").write_text(
        "description: tiny docs\n"
        "thresholds:\n  verdict: single\n"
        "text:\n  min_document_length: 50\n",
        encoding="utf-8",
    )
    (profile_dir / "strict.yaml").write_text("name: strict\ntext:\n  overlap_size: 40\n", encoding="utf-8")
    reload_profiles(profile_dir)

    short = get_profile("short")
    assert short.description == "tiny docs"
    assert short.text.min_document_length == 50
    # a file can override a built-in by name
    assert get_profile("strict").text.overlap_size == 40


def test_malformed_yaml_is_skipped(profile_dir):
    (profile_dir / "broken.yml").write_text("text: [unclosed\n", encoding="utf-8")
    (profile_dir / "unknown.yml").write_text("text:\n  no_such_setting: 1\n", encoding="utf-8")
    with patch.object(loader, "warn") as warn:
        reload_profiles(profile_dir)
    assert warn.call_count == 2
    assert "broken" not in list_profiles()
    assert "unknown" not in list_profiles()
    assert "strict" in list_profiles()


def test_builtin_profiles_cannot_be_altered():
    strict = get_profile("strict")
    with pytest.raises(FrozenInstanceError):
        strict.text.max_chunk_size = 10
    with pytest.raises(FrozenInstanceError):
        strict.thresholds = None
    assert get_profile("strict").text.max_chunk_size == 1000

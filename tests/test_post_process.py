"""Tests for query-string post-processing options."""

from __future__ import annotations

import pytest

from mandelatar.errors import InvalidPostProcessConfig, ValidationError
from mandelatar.params.post_process import PostProcessConfig, ProfileOverlay


def test_empty_query_selects_nothing():
    config = PostProcessConfig.from_query_params([])
    assert config.overlay is None
    assert not config.should_post_process()


def test_profile_overlay():
    config = PostProcessConfig.from_query_params([("overlay", "profile")])
    assert config.overlay == ProfileOverlay(width=300, height=300)
    assert config.should_post_process()


def test_unknown_keys_are_ignored():
    config = PostProcessConfig.from_query_params([("foo", "bar"), ("size", "big")])
    assert config == PostProcessConfig()


def test_unknown_overlay_rejected():
    with pytest.raises(InvalidPostProcessConfig) as exc_info:
        PostProcessConfig.from_query_params([("overlay", "sparkles")])
    assert isinstance(exc_info.value, ValidationError)
    assert str(exc_info.value) == "Validation Error: Invalid overlay type given."


def test_overlay_value_is_case_sensitive():
    with pytest.raises(InvalidPostProcessConfig):
        PostProcessConfig.from_query_params([("overlay", "Profile")])


def test_repeated_key_last_wins():
    config = PostProcessConfig.from_query_params([("overlay", "profile"), ("overlay", "profile")])
    assert config.overlay == ProfileOverlay(width=300, height=300)


def test_bad_value_fails_even_after_good_one():
    with pytest.raises(InvalidPostProcessConfig):
        PostProcessConfig.from_query_params([("overlay", "profile"), ("overlay", "")])


@pytest.mark.parametrize(
    "size, key",
    [
        ((300, 300), "profile_overlay_300x300"),
        ((600, 600), "profile_overlay_600x600"),
        ((128, 128), "profile_overlay_600x600"),
    ],
)
def test_profile_asset_key(size, key):
    assert ProfileOverlay(*size).asset_key == key

"""Unit tests for theme preference storage and resolution."""

from __future__ import annotations

import pytest

from zepbound.theme import STORAGE_KEY, ThemeStore, normalize_theme, theme_switcher_script

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("value", ["purple", "", None, 3, "DARK"])
def test_normalize_theme_falls_back_to_system(value) -> None:
	assert normalize_theme(value) == "system"


def test_invalid_stored_theme_is_purged() -> None:
	"""A stale "purple" entry reads as system and is removed from storage."""

	storage = {STORAGE_KEY: "purple"}
	store = ThemeStore(storage)

	assert store.get_stored_theme() == "system"
	assert STORAGE_KEY not in storage


def test_missing_theme_defaults_to_system() -> None:
	assert ThemeStore({}).get_stored_theme() == "system"


def test_selecting_system_clears_storage() -> None:
	storage = {STORAGE_KEY: "dark"}
	store = ThemeStore(storage, lambda: "dark")

	assert store.select("system") == "dark"
	assert storage == {}


def test_selecting_invalid_value_clears_storage() -> None:
	storage = {STORAGE_KEY: "light"}

	ThemeStore(storage).set_stored_theme("sepia")

	assert storage == {}


def test_explicit_theme_is_persisted_and_wins_over_system() -> None:
	storage: dict[str, str] = {}
	store = ThemeStore(storage, lambda: "dark")

	assert store.select("light") == "light"
	assert storage == {STORAGE_KEY: "light"}


def test_system_change_only_applies_when_following_system() -> None:
	"""System preference flips re-resolve only for the "system" preference."""

	system = {"theme": "light"}
	storage: dict[str, str] = {}
	store = ThemeStore(storage, lambda: system["theme"])

	system["theme"] = "dark"
	assert store.on_system_change() == "dark"

	store.select("light")
	assert store.on_system_change() is None


def test_theme_switcher_script_embeds_storage_rules() -> None:
	script = theme_switcher_script()

	assert 'const storageKey = "theme";' in script
	assert '["system", "light", "dark"]' in script
	assert "(prefers-color-scheme: dark)" in script
	assert "%(" not in script

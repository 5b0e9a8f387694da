from __future__ import annotations

import json
from collections.abc import MutableMapping
from typing import Callable

THEMES = ("system", "light", "dark")
DEFAULT_THEME = "system"
STORAGE_KEY = "theme"
DARK_MEDIA_QUERY = "(prefers-color-scheme: dark)"

THEME_SWITCHER_JS = """(() => {
  const storageKey = %(storage_key)s;
  const allowedThemes = new Set(%(themes)s);
  const defaultTheme = %(default_theme)s;
  const darkQuery = %(dark_query)s;
  const root = document.documentElement;

  const normalizeTheme = (value) => (allowedThemes.has(value) ? value : defaultTheme);

  const getStoredTheme = () => {
    const stored = localStorage.getItem(storageKey);
    if (stored == null) {
      return defaultTheme;
    }
    const normalized = normalizeTheme(stored);
    if (normalized !== stored) {
      localStorage.removeItem(storageKey);
    }
    return normalized;
  };

  const setStoredTheme = (value) => {
    const theme = normalizeTheme(value);
    if (theme === defaultTheme) {
      localStorage.removeItem(storageKey);
      return;
    }
    localStorage.setItem(storageKey, theme);
  };

  const getSystemTheme = () =>
    window.matchMedia && window.matchMedia(darkQuery).matches ? "dark" : "light";

  const applyTheme = (storedTheme) => {
    root.dataset.theme = storedTheme === defaultTheme ? getSystemTheme() : storedTheme;
  };

  applyTheme(getStoredTheme());

  document.addEventListener("DOMContentLoaded", () => {
    const selector = document.querySelector(".theme-selector");
    const select = document.querySelector("#theme-select");
    const currentTheme = getStoredTheme();

    if (selector) {
      selector.removeAttribute("hidden");
      document.querySelectorAll('input[name="theme"]').forEach((input) => {
        input.checked = input.value === currentTheme;
        input.addEventListener("change", () => {
          setStoredTheme(input.value);
          applyTheme(getStoredTheme());
        });
      });
    }

    if (select) {
      select.value = currentTheme;
      select.addEventListener("change", () => {
        setStoredTheme(select.value);
        const nextTheme = getStoredTheme();
        select.value = nextTheme;
        applyTheme(nextTheme);
      });
    }

    if (window.matchMedia) {
      window.matchMedia(darkQuery).addEventListener("change", () => {
        if (getStoredTheme() === defaultTheme) {
          applyTheme(defaultTheme);
        }
      });
    }
  });
})();
"""


def normalize_theme(value: object) -> str:
	return value if isinstance(value, str) and value in THEMES else DEFAULT_THEME


class ThemeStore:
	"""Theme preference kept in any mapping (a session, a dict, ...).

	``system_theme`` reports the concrete theme the system currently prefers.
	"""

	def __init__(
		self,
		storage: MutableMapping[str, str],
		system_theme: Callable[[], str] = lambda: "light",
	) -> None:
		self.storage = storage
		self.system_theme = system_theme

	def get_stored_theme(self) -> str:
		stored = self.storage.get(STORAGE_KEY)
		if stored is None:
			return DEFAULT_THEME
		normalized = normalize_theme(stored)
		if normalized != stored:
			self.storage.pop(STORAGE_KEY, None)
		return normalized

	def set_stored_theme(self, value: object) -> None:
		theme = normalize_theme(value)
		if theme == DEFAULT_THEME:
			self.storage.pop(STORAGE_KEY, None)
			return
		self.storage[STORAGE_KEY] = theme

	def resolve(self, preference: str) -> str:
		if preference == DEFAULT_THEME:
			return "dark" if self.system_theme() == "dark" else "light"
		return preference

	def current(self) -> str:
		return self.resolve(self.get_stored_theme())

	def select(self, value: object) -> str:
		self.set_stored_theme(value)
		return self.current()

	def on_system_change(self) -> str | None:
		if self.get_stored_theme() != DEFAULT_THEME:
			return None
		return self.resolve(DEFAULT_THEME)


def theme_switcher_script() -> str:
	return THEME_SWITCHER_JS % {
		"storage_key": json.dumps(STORAGE_KEY),
		"themes": json.dumps(list(THEMES)),
		"default_theme": json.dumps(DEFAULT_THEME),
		"dark_query": json.dumps(DARK_MEDIA_QUERY),
	}

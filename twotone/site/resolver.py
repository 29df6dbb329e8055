"""Color-Scheme Resolver.

``resolver_script`` is the blocking inline script placed right after the charset of every
page's ``<head>``. ``ColorSchemeResolver`` is the same state machine in
Python; tests drive it against in-memory storage and an OS scheme signal.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from typing import Literal, Protocol

from ..config import MARKER_CLASS, STORAGE_KEY

Preference = Literal["light", "dark", "system"]
Palette = Literal["light", "dark"]

PREFERENCES: tuple[Preference, ...] = ("light", "dark", "system")

# Cycle order of the toggle control
NEXT_PREFERENCE: dict[str, Preference] = {"light": "dark", "dark": "system", "system": "light"}

# Longest a preference read may take before falling back to the OS signal
READ_BUDGET_MS = 50

SCRIPT_ID = "twotone-color-scheme"

_SCRIPT = r"""(function () {
  var KEY = __KEY__, CLS = __CLS__, BUDGET = __BUDGET__;
  var NEXT = __NEXT__;
  var root = document.documentElement;
  var media = window.matchMedia ? window.matchMedia("(prefers-color-scheme: dark)") : null;

  function normalize(v) {
    return v === "light" || v === "dark" ? v : "system";
  }
  function read() {
    var started = Date.now();
    try {
      var v = normalize(window.localStorage.getItem(KEY));
      return Date.now() - started > BUDGET ? "system" : v;
    } catch (e) {
      return "system";
    }
  }
  function resolve(p) {
    if (p !== "system") return p;
    return media && media.matches ? "dark" : "light";
  }
  function apply() {
    root.classList.toggle(CLS, resolve(pref) === "dark");
  }

  var pref = read();
  apply();

  function set(next) {
    pref = normalize(next);
    try {
      window.localStorage.setItem(KEY, pref);
    } catch (e) {}
    apply();
  }

  if (media) {
    var onChange = function () {
      if (pref === "system") apply();
    };
    if (media.addEventListener) media.addEventListener("change", onChange);
    else if (media.addListener) media.addListener(onChange);
  }
  window.addEventListener("storage", function (e) {
    if (e.key === KEY) {
      pref = normalize(e.newValue);
      apply();
    }
  });
  document.addEventListener("click", function (e) {
    var t = e.target && e.target.closest ? e.target.closest("[data-twotone-toggle]") : null;
    if (t) set(NEXT[pref]);
  });

  window.twotoneColorScheme = {
    get: function () { return pref; },
    palette: function () { return resolve(pref); },
    set: set
  };
})();"""


def resolver_script(
    storage_key: str = STORAGE_KEY,
    marker_class: str = MARKER_CLASS,
    read_budget_ms: int = READ_BUDGET_MS,
) -> str:
    """Return the resolver's JavaScript source."""
    return (
        _SCRIPT.replace("__KEY__", _js_string(storage_key))
        .replace("__CLS__", _js_string(marker_class))
        .replace("__BUDGET__", str(int(read_budget_ms)))
        .replace("__NEXT__", json.dumps(NEXT_PREFERENCE))
    )


def resolver_tag(storage_key: str = STORAGE_KEY, marker_class: str = MARKER_CLASS) -> str:
    """Inline, blocking ``<script>`` element that follows the charset."""
    return f'<script id="{SCRIPT_ID}">{resolver_script(storage_key, marker_class)}</script>'


class PreferenceStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Dict-backed store; ``available=False`` mimics denied storage."""

    def __init__(self, values: dict[str, str] | None = None, available: bool = True):
        self.values = dict(values or {})
        self.available = available

    def get(self, key: str) -> str | None:
        if not self.available:
            raise PermissionError("storage unavailable")
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        if not self.available:
            raise PermissionError("storage unavailable")
        self.values[key] = value


class SchemeSignal:
    """OS color-scheme signal (the ``prefers-color-scheme`` media query)."""

    def __init__(self, scheme: Palette = "light"):
        self.scheme: Palette = scheme
        self._listeners: list[Callable[[Palette], None]] = []

    @property
    def matches_dark(self) -> bool:
        return self.scheme == "dark"

    def add_listener(self, listener: Callable[[Palette], None]) -> None:
        self._listeners.append(listener)

    def change(self, scheme: Palette) -> None:
        self.scheme = scheme
        for listener in list(self._listeners):
            listener(scheme)


class ColorSchemeResolver:
    """State machine: unresolved -> resolved(light) | resolved(dark).

    Mirrors ``_SCRIPT``: ``_normalize``, ``resolve`` and ``toggle`` follow the
    script's ``normalize``, ``resolve`` and ``NEXT`` branch for branch.
    """

    def __init__(
        self,
        store: PreferenceStore,
        signal: SchemeSignal,
        storage_key: str = STORAGE_KEY,
        marker_class: str = MARKER_CLASS,
        read_budget_ms: int = READ_BUDGET_MS,
    ):
        self.store = store
        self.signal = signal
        self.storage_key = storage_key
        self.marker_class = marker_class
        self.read_budget_ms = read_budget_ms
        self.preference: Preference = "system"
        self.state: str = "unresolved"
        self.root_classes: set[str] = set()
        self.transitions: list[tuple[str, Palette]] = []
        self._listening = False

    @property
    def palette(self) -> Palette | None:
        return None if self.state == "unresolved" else self.state  # type: ignore[return-value]

    def load(self) -> Palette:
        """Initial, synchronous resolve-and-apply; then start listening."""
        self.preference = self._read()
        palette = self._apply()
        if not self._listening:
            self.signal.add_listener(self.on_os_change)
            self._listening = True
        return palette

    def on_os_change(self, scheme: Palette) -> None:
        # Explicit preferences override the OS.
        if self.preference == "system":
            self._apply()

    def choose(self, preference: str) -> Palette:
        """Persist an explicit choice and reapply immediately."""
        self.preference = _normalize(preference)
        try:
            self.store.set(self.storage_key, self.preference)
        except Exception:
            # Unavailable storage keeps the choice for this page only.
            pass
        return self._apply()

    def toggle(self) -> Palette:
        return self.choose(NEXT_PREFERENCE[self.preference])

    def resolve(self, preference: Preference) -> Palette:
        if preference != "system":
            return preference
        return "dark" if self.signal.matches_dark else "light"

    def _read(self) -> Preference:
        started = time.monotonic()
        try:
            value = _normalize(self.store.get(self.storage_key))
        except Exception:
            return "system"
        if (time.monotonic() - started) * 1000 > self.read_budget_ms:
            return "system"
        return value

    def _apply(self) -> Palette:
        palette = self.resolve(self.preference)
        if palette == "dark":
            self.root_classes.add(self.marker_class)
        else:
            self.root_classes.discard(self.marker_class)
        if palette != self.state:
            self.transitions.append((self.state, palette))
            self.state = palette
        return palette


def _normalize(value: str | None) -> Preference:
    if value in ("light", "dark"):
        return value  # type: ignore[return-value]
    return "system"


def _js_string(value: str) -> str:
    # "</" would end the inline <script> element early.
    return json.dumps(value).replace("</", "<\\/")

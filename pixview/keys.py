"""Key bindings: default keymap, the keys configuration file and matching."""

from __future__ import annotations

import enum
import logging
import os
import string
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

NO_SYMBOL = 0
SYSTEM_CONFIG = Path("/etc/pixview/keys")

_TOKEN_LIMIT = 31


class Modifier(enum.IntFlag):
    """Keyboard modifier masks as reported in X key events."""

    NONE = 0
    SHIFT = 1
    CONTROL = 4
    MOD1 = 8
    MOD4 = 64


_MODIFIER_LETTERS = {
    "C": Modifier.CONTROL,
    "S": Modifier.SHIFT,
    "1": Modifier.MOD1,
    "4": Modifier.MOD4,
}

_PRINTABLE_NAMES = (
    "space exclam quotedbl numbersign dollar percent ampersand apostrophe "
    "parenleft parenright asterisk plus comma minus period slash"
).split()
_PUNCT_AFTER_DIGITS = "colon semicolon less equal greater question at".split()
_PUNCT_AFTER_UPPER = "bracketleft backslash bracketright asciicircum underscore grave".split()
_PUNCT_AFTER_LOWER = "braceleft bar braceright asciitilde".split()


def _build_keysyms() -> dict[str, int]:
    table: dict[str, int] = {}
    for offset, name in enumerate(_PRINTABLE_NAMES):
        table[name] = 0x20 + offset
    for char in string.digits + string.ascii_uppercase + string.ascii_lowercase:
        table[char] = ord(char)
    for offset, name in enumerate(_PUNCT_AFTER_DIGITS):
        table[name] = 0x3A + offset
    for offset, name in enumerate(_PUNCT_AFTER_UPPER):
        table[name] = 0x5B + offset
    for offset, name in enumerate(_PUNCT_AFTER_LOWER):
        table[name] = 0x7B + offset
    table["quoteright"] = table["apostrophe"]
    table["quoteleft"] = table["grave"]

    table.update(
        {
            "BackSpace": 0xFF08,
            "Tab": 0xFF09,
            "Linefeed": 0xFF0A,
            "Clear": 0xFF0B,
            "Return": 0xFF0D,
            "Pause": 0xFF13,
            "Scroll_Lock": 0xFF14,
            "Escape": 0xFF1B,
            "Home": 0xFF50,
            "Left": 0xFF51,
            "Up": 0xFF52,
            "Right": 0xFF53,
            "Down": 0xFF54,
            "Prior": 0xFF55,
            "Page_Up": 0xFF55,
            "Next": 0xFF56,
            "Page_Down": 0xFF56,
            "End": 0xFF57,
            "Begin": 0xFF58,
            "Print": 0xFF61,
            "Insert": 0xFF63,
            "Menu": 0xFF67,
            "KP_Space": 0xFF80,
            "KP_Tab": 0xFF89,
            "KP_Enter": 0xFF8D,
            "KP_Home": 0xFF95,
            "KP_Left": 0xFF96,
            "KP_Up": 0xFF97,
            "KP_Right": 0xFF98,
            "KP_Down": 0xFF99,
            "KP_Prior": 0xFF9A,
            "KP_Page_Up": 0xFF9A,
            "KP_Next": 0xFF9B,
            "KP_Page_Down": 0xFF9B,
            "KP_End": 0xFF9C,
            "KP_Begin": 0xFF9D,
            "KP_Insert": 0xFF9E,
            "KP_Delete": 0xFF9F,
            "KP_Equal": 0xFFBD,
            "KP_Multiply": 0xFFAA,
            "KP_Add": 0xFFAB,
            "KP_Separator": 0xFFAC,
            "KP_Subtract": 0xFFAD,
            "KP_Decimal": 0xFFAE,
            "KP_Divide": 0xFFAF,
            "Delete": 0xFFFF,
        }
    )
    for digit in range(10):
        table[f"KP_{digit}"] = 0xFFB0 + digit
    for number in range(1, 36):
        table[f"F{number}"] = 0xFFBE + number - 1
    return table


_KEYSYMS = _build_keysyms()


def _is_hex(text: str) -> bool:
    return bool(text) and all(c in string.hexdigits for c in text)


def keysym_from_name(name: str) -> int:
    """Translate an X keysym name into its numeric value, 0 if unknown.

    Besides the symbolic names, ``Uxxxx`` Unicode names and ``0x``
    hexadecimal values are accepted.
    """
    if name in _KEYSYMS:
        return _KEYSYMS[name]
    if len(name) > 1 and name[0] == "U" and _is_hex(name[1:]) and len(name) <= 9:
        value = int(name[1:], 16)
        if value < 0x20 or 0x7E < value < 0xA0 or value > 0x10FFFF:
            return NO_SYMBOL
        if value <= 0xFF:
            return value
        return value | 0x01000000
    if name.lower().startswith("0x") and _is_hex(name[2:]):
        value = int(name[2:], 16)
        if value <= 0x1FFFFFFF:
            return value
    return NO_SYMBOL


def ignores_shift(keysym: int) -> bool:
    """Return True for printable, non-space characters.

    For those the character itself already tells whether shift was held,
    so the shift modifier is dropped when comparing bindings.
    """
    return 0x21 <= keysym <= 0x7E


@dataclass
class KeyBinding:
    """Up to three key combinations that trigger one action."""

    name: str
    keysyms: list[int] = field(default_factory=lambda: [0, 0, 0])
    keystates: list[int] = field(default_factory=lambda: [0, 0, 0])
    state: int = 0
    button: int = 0


_C = int(Modifier.CONTROL)
_A = int(Modifier.MOD1)

# Defaults, in binding order: (action, ((state, keysym name), ...)).
_DEFAULTS: tuple[tuple[str, tuple[tuple[int, str], ...]], ...] = (
    ("menu_close", ((0, "Escape"),)),
    ("menu_parent", ((0, "Left"),)),
    ("menu_down", ((0, "Down"),)),
    ("menu_up", ((0, "Up"),)),
    ("menu_child", ((0, "Right"),)),
    ("menu_select", ((0, "Return"), (0, "space"))),
    ("scroll_left", ((0, "KP_Left"), (_C, "Left"))),
    ("scroll_right", ((0, "KP_Right"), (_C, "Right"))),
    ("scroll_down", ((0, "KP_Down"), (_C, "Down"))),
    ("scroll_up", ((0, "KP_Up"), (_C, "Up"))),
    ("scroll_left_page", ((_A, "Left"),)),
    ("scroll_right_page", ((_A, "Right"),)),
    ("scroll_down_page", ((_A, "Down"),)),
    ("scroll_up_page", ((_A, "Up"),)),
    ("prev_img", ((0, "Left"), (0, "p"), (0, "BackSpace"))),
    ("next_img", ((0, "Right"), (0, "n"), (0, "space"))),
    ("jump_back", ((0, "Page_Up"), (0, "KP_Page_Up"))),
    ("jump_fwd", ((0, "Page_Down"), (0, "KP_Page_Down"))),
    ("prev_dir", ((0, "bracketleft"),)),
    ("next_dir", ((0, "bracketright"),)),
    ("jump_random", ((0, "z"),)),
    ("quit", ((0, "Escape"), (0, "q"))),
    ("close", ((0, "x"),)),
    ("remove", ((0, "Delete"),)),
    ("delete", ((_C, "Delete"),)),
    ("jump_first", ((0, "Home"), (0, "KP_Home"))),
    ("jump_last", ((0, "End"), (0, "KP_End"))),
    ("action_0", ((0, "Return"), (0, "0"), (0, "KP_0"))),
    *(
        (f"action_{n}", ((0, str(n)), (0, f"KP_{n}")))
        for n in range(1, 10)
    ),
    ("zoom_in", ((0, "Up"), (0, "KP_Add"))),
    ("zoom_out", ((0, "Down"), (0, "KP_Subtract"))),
    ("zoom_default", ((0, "KP_Multiply"), (0, "asterisk"))),
    ("zoom_fit", ((0, "KP_Divide"), (0, "slash"))),
    ("zoom_fill", ((0, "exclam"),)),
    ("size_to_image", ((0, "w"),)),
    ("render", ((0, "KP_Begin"), (0, "R"))),
    ("toggle_actions", ((0, "a"),)),
    ("toggle_aliasing", ((0, "A"),)),
    ("toggle_auto_zoom", ((0, "Z"),)),
    ("toggle_filenames", ((0, "d"),)),
    ("toggle_info", ((0, "i"),)),
    ("toggle_pointer", ((0, "o"),)),
    ("toggle_caption", ((0, "c"),)),
    ("toggle_pause", ((0, "h"),)),
    ("toggle_menu", ((0, "m"),)),
    ("toggle_fullscreen", ((0, "f"),)),
    ("reload_image", ((0, "r"),)),
    ("save_image", ((0, "s"),)),
    ("save_filelist", ((0, "L"),)),
    ("orient_1", ((0, "greater"),)),
    ("orient_3", ((0, "less"),)),
    ("flip", ((0, "underscore"),)),
    ("mirror", ((0, "bar"),)),
    ("reload_minus", ((0, "minus"),)),
    ("reload_plus", ((0, "plus"),)),
    ("toggle_keep_vp", ((0, "k"),)),
    ("toggle_fixed_geometry", ((0, "g"),)),
    ("pan", ()),
    ("zoom", ()),
    ("blur", ()),
    ("rotate", ()),
)

MENU_ACTIONS = (
    "menu_close",
    "menu_parent",
    "menu_down",
    "menu_up",
    "menu_child",
    "menu_select",
)

# The order in which a key press in an image window is tested against actions.
DISPATCH_ORDER = (
    "next_img",
    "prev_img",
    "scroll_right",
    "scroll_left",
    "scroll_down",
    "scroll_up",
    "scroll_right_page",
    "scroll_left_page",
    "scroll_down_page",
    "scroll_up_page",
    "jump_back",
    "jump_fwd",
    "next_dir",
    "prev_dir",
    "quit",
    "delete",
    "remove",
    "jump_first",
    "jump_last",
    *(f"action_{n}" for n in range(10)),
    "zoom_in",
    "zoom_out",
    "zoom_default",
    "zoom_fit",
    "zoom_fill",
    "render",
    "toggle_actions",
    "toggle_aliasing",
    "toggle_auto_zoom",
    "toggle_filenames",
    "toggle_info",
    "toggle_pointer",
    "jump_random",
    "toggle_caption",
    "reload_image",
    "toggle_pause",
    "save_image",
    "save_filelist",
    "size_to_image",
    "toggle_menu",
    "close",
    "orient_1",
    "orient_3",
    "flip",
    "mirror",
    "toggle_fullscreen",
    "reload_plus",
    "reload_minus",
    "toggle_keep_vp",
    "toggle_fixed_geometry",
)


def find_config_path(environ: Mapping[str, str] | None = None) -> Path | None:
    """Return the user's keys file location, or None without a home."""
    env = os.environ if environ is None else environ
    confhome = env.get("XDG_CONFIG_HOME")
    if confhome:
        return Path(confhome) / "pixview" / "keys"
    home = env.get("HOME")
    if home:
        return Path(home) / ".config" / "pixview" / "keys"
    return None


class KeyMap:
    """All key bindings, starting from the built-in defaults."""

    def __init__(self) -> None:
        self._bindings: dict[str, KeyBinding] = {}
        for name, combos in _DEFAULTS:
            binding = KeyBinding(name)
            for index, (state, keyname) in enumerate(combos):
                binding.keystates[index] = state
                binding.keysyms[index] = keysym_from_name(keyname)
            self._bindings[name] = binding

    def __iter__(self):
        return iter(self._bindings.values())

    def __len__(self) -> int:
        return len(self._bindings)

    def get(self, action: str) -> KeyBinding | None:
        """Return the binding for an action name, or None."""
        return self._bindings.get(action)

    def parse_binding(self, binding: KeyBinding, index: int, spec: str) -> None:
        """Set slot ``index`` of ``binding`` from a spec such as ``C-S-x``."""
        if not spec:
            binding.keysyms[index] = NO_SYMBOL
            return

        cur = spec
        mod = Modifier.NONE
        while len(cur) > 1 and cur[1] == "-":
            letter = cur[0]
            if letter in _MODIFIER_LETTERS:
                mod |= _MODIFIER_LETTERS[letter]
            else:
                logger.warning('keys: invalid modifier %s in "%s"', letter, spec)
            cur = cur[2:]

        keysym = keysym_from_name(cur)
        binding.keysyms[index] = keysym
        if ignores_shift(keysym):
            mod &= ~Modifier.SHIFT
        binding.keystates[index] = int(mod)

        if keysym == NO_SYMBOL:
            logger.warning("keys: Invalid keysym: %s", cur)

    def load(self, lines: Iterable[str]) -> None:
        """Apply bindings from lines of the keys configuration format."""
        for line in lines:
            if line.startswith("#"):
                continue
            tokens = [token[:_TOKEN_LIMIT] for token in line.split()[:4]]
            if not tokens:
                continue
            action, *keys = tokens
            keys += [""] * (3 - len(keys))
            binding = self.get(action)
            if binding is None:
                logger.warning("keys: Invalid action: %s", action)
                continue
            for index, spec in enumerate(keys):
                self.parse_binding(binding, index, spec)

    def load_file(self, path: str | os.PathLike[str]) -> bool:
        """Apply a keys file; return False if it could not be opened."""
        try:
            with open(path, encoding="utf-8", errors="replace") as handle:
                self.load(handle)
        except OSError:
            return False
        return True

    def matches(self, action: str, state: int, keysym: int, button: int) -> bool:
        """Tell whether a key or button event triggers ``action``."""
        binding = self._bindings[action]
        if keysym != NO_SYMBOL:
            for sym, sym_state in zip(binding.keysyms, binding.keystates):
                if sym == keysym and sym_state == state:
                    return True
                if sym == NO_SYMBOL:
                    return False
            return False
        return binding.state == state and binding.button == button

    def find_action(self, state: int, keysym: int, button: int) -> str | None:
        """Return the first image-window action the event triggers."""
        for action in DISPATCH_ORDER:
            if self.matches(action, state, keysym, button):
                return action
        return None
"""
Symbols — Visual vocabulary for stages, kinds and outcomes

Progressive enhancement: Unicode when supported, ASCII fallback.
Configurable via display.symbols setting.

Also provides safe output utilities:
- safe_print(): Encoding-safe printing for untrusted content
- sanitize_control_chars(): Strips control chars from file-sourced text
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional

from ..core.commands import CommandKind, LifecycleStage


# =============================================================================
# Safe Output Utilities
# =============================================================================
# Help text comes from arbitrary files in stub folders, so it is
# sanitized before display and printed with an encoding fallback.

UNICODE_TO_ASCII = str.maketrans({
    "→": "->",
    "←": "<-",
    "…": "...",
    "–": "-",
    "—": "--",
    "“": "\"",
    "”": "\"",
    "‘": "'",
    "’": "'",
    "•": "*",
    "·": ".",
    "✓": "[+]",
    "✗": "[-]",
    "⚠": "[!]",
    "α": "[a]",
    "β": "[b]",
})


def sanitize_control_chars(text: str) -> str:
    """
    Remove control characters except newline, tab and carriage return.

    Keeps ANSI escapes embedded in help files from manipulating the
    terminal.
    """
    if not text:
        return text
    return ''.join(c for c in text if ord(c) >= 32 or ord(c) in (9, 10, 13))


def safe_print(text: str, end: str = '\n', file=None) -> None:
    """
    Print, degrading to ASCII on terminals that cannot encode the text.

    Known symbols are mapped through UNICODE_TO_ASCII first; anything
    still unencodable becomes '?'.
    """
    stream = file or sys.stdout
    try:
        print(text, end=end, file=stream)
        return
    except UnicodeEncodeError:
        pass

    fallback = text.translate(UNICODE_TO_ASCII)
    encoding = getattr(stream, 'encoding', None) or 'ascii'
    fallback = fallback.encode(encoding, errors='replace').decode(encoding)
    print(fallback, end=end, file=stream)


SUMMARY_LENGTH = 100


def truncate(text: str, length: int = SUMMARY_LENGTH) -> str:
    """
    Shorten text to at most length characters, ending in "...".

    Examples:
        truncate("Deploy the service", 10)   -> "Deploy ..."
        truncate("Deploy", 10)               -> "Deploy"
    """
    text = text or ""
    if len(text) <= length:
        return text
    cut = max(length - 3, 0)
    return (text[:cut] + "...")[:length]


@dataclass(frozen=True)
class SymbolSet:
    """Markers used in listings, help pages and reports."""
    # Lifecycle stages
    alpha: str
    beta: str
    production: str

    # Command kinds
    script: str
    executable: str

    # Outcomes
    check_pass: str
    check_fail: str
    warning: str

    # Listings
    stub: str
    verb: str
    bullet: str
    arrow: str
    ellipsis: str


UNICODE = SymbolSet(
    alpha='α',
    beta='β',
    production='●',
    script='◇',
    executable='▢',
    check_pass='✓',
    check_fail='✗',
    warning='⚠',
    stub='◎',
    verb='△',
    bullet='•',
    arrow='→',
    ellipsis='…',
)

ASCII = SymbolSet(
    alpha='[a]',
    beta='[b]',
    production='[*]',
    script='[s]',
    executable='[x]',
    check_pass='[+]',
    check_fail='[-]',
    warning='[!]',
    stub='[@]',
    verb='[v]',
    bullet='*',
    arrow='->',
    ellipsis='...',
)

_TRUTHY = ('1', 'true', 'yes', 'on')
_NARROW_ENCODINGS = ('ascii', 'latin1', 'iso88591')


def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in _TRUTHY


def _is_utf8_locale() -> bool:
    for var in ('LC_ALL', 'LC_CTYPE', 'LANG'):
        value = os.environ.get(var, '').lower().replace('-', '')
        if value:
            return 'utf8' in value
    return False


def supports_unicode() -> bool:
    """
    Guess whether stdout can show the Unicode symbol set.

    STUBINVOKE_ASCII_ONLY and STUBINVOKE_UNICODE force the answer.
    Otherwise the stream encoding decides, then the locale; unknown
    terminals get ASCII.
    """
    if _env_flag('STUBINVOKE_ASCII_ONLY'):
        return False
    if _env_flag('STUBINVOKE_UNICODE'):
        return True

    encoding = (getattr(sys.stdout, 'encoding', None) or '').lower()
    encoding = encoding.replace('-', '').replace('_', '')
    if encoding.startswith('utf'):
        return True
    if encoding.startswith('cp') or encoding in _NARROW_ENCODINGS:
        return False
    return _is_utf8_locale() or bool(os.environ.get('WT_SESSION'))


def get_symbols(preference: Optional[str] = None) -> SymbolSet:
    """
    Symbol set for a display.symbols value.

    Args:
        preference: "unicode", "ascii", or "auto" (None = auto)
    """
    forced = {'unicode': UNICODE, 'ascii': ASCII}.get((preference or '').lower())
    if forced is not None:
        return forced
    return UNICODE if supports_unicode() else ASCII


def symbol_for_stage(symbols: SymbolSet, stage: LifecycleStage) -> str:
    """Marker for a lifecycle stage."""
    return getattr(symbols, stage.value)


def symbol_for_kind(symbols: SymbolSet, kind: CommandKind) -> str:
    """Marker for a command kind."""
    return getattr(symbols, kind.value)

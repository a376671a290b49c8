"""
Presentation — Symbols and output templates for CLI display
"""

from .symbols import (
    SymbolSet, UNICODE, ASCII, get_symbols, safe_print, sanitize_control_chars,
    truncate, symbol_for_stage, symbol_for_kind,
)
from .template import OutputTemplate, render_rows, VALID_FORMATS

__all__ = [
    'SymbolSet', 'UNICODE', 'ASCII', 'get_symbols', 'safe_print', 'sanitize_control_chars',
    'truncate', 'symbol_for_stage', 'symbol_for_kind',
    'OutputTemplate', 'render_rows', 'VALID_FORMATS',
]

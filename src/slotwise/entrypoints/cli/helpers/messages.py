"""Terminal message helpers for the SLOTWISE CLI.

Status lines go to stderr so stdout stays machine-readable (slot lists,
payout reports). Each line starts with an emoji glyph, or an ASCII fallback
when stderr cannot encode it.
"""

import click

_GLYPHS = {
    "warn": ("⚠️", "[!]"),
    "success": ("✅", "[OK]"),
    "error": ("❌", "[X]"),
}


def _supports_character(character: str) -> bool:
    """True if ``character`` can be encoded on stderr."""
    stream = click.get_text_stream("stderr")  # pragma: no mutate
    encoding = getattr(stream, "encoding", None) or "ascii"
    try:
        character.encode(encoding)
    except UnicodeEncodeError:
        return False
    return True


def glyph(kind: str) -> str:
    """Marker for a message kind (``warn``, ``success`` or ``error``)."""
    emoji, fallback = _GLYPHS[kind]
    return emoji if _supports_character(emoji) else fallback


def warn(msg: str) -> None:
    """Yellow, bold line on stderr, e.g. ``⚠️  Payout lease is held elsewhere.``"""
    click.secho(f"{glyph('warn')}  {msg}", fg="yellow", bold=True, err=True)


def success(msg: str) -> None:
    """Green, bold line on stderr, e.g. ``✅  Upgrade complete!``"""
    click.secho(f"{glyph('success')}  {msg}", fg="green", bold=True, err=True)


def error(msg: str) -> None:
    """Red, bold line on stderr, e.g. ``❌  Cannot connect to database``"""
    click.secho(f"{glyph('error')}  {msg}", fg="red", bold=True, err=True)

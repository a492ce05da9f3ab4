"""
tierbot.errors — Per-Action Error Taxonomy
===========================================

None of these are fatal to the process.  The dispatcher turns each one
into a short rejection reply and the action leaves state unchanged.
Collaborator failures (Discord role / messaging calls) are not modelled
here; they are logged where they happen and never raised to callers.
"""

from __future__ import annotations


class TierbotError(Exception):
    """Base class for rejections reported back to the acting member."""

    def __init__(self, reply: str) -> None:
        super().__init__(reply)
        self.reply = reply


class PermissionDenied(TierbotError):
    """The actor failed the relevant authorization check."""


class MalformedInput(TierbotError):
    """Missing mentions or arguments with no documented default."""


class ConfigurationMissing(TierbotError):
    """A per-community setting (e.g. the command channel) is not configured."""

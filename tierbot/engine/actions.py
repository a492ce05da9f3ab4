"""
tierbot.engine.actions — Action Values & Text Command Parser
=============================================================

Every inbound command, whether typed as ``!givepoints @a 5`` or invoked
as ``/givepoints``, is normalised into one of the :data:`Action` values
below before the dispatcher sees it.  The slash cogs build them directly
from typed parameters; text messages go through :func:`parse_command`.

Mentions are read from the raw message text (``<@id>``, ``<@!id>``,
``<@&id>``) so their order is the order the member typed them in; the
first role mention of ``upgrade`` is always the old role.  Repeated mentions
count once.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar

from tierbot.constants import DEFAULT_GRANT_AMOUNT, USAGE

__all__ = [
    "Action",
    "AddPointGiver",
    "GivePoints",
    "Help",
    "Malformed",
    "RemoveUpgrade",
    "RestorePoints",
    "SetAnnounceChannel",
    "SetCommandChannel",
    "SetUpgrade",
    "ShowLeaderboard",
    "ShowPoints",
    "parse_command",
]

_USER_MENTION = re.compile(r"<@!?(\d+)>")
_ROLE_MENTION = re.compile(r"<@&(\d+)>")


# ---------------------------------------------------------------------------
# Action values
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ShowPoints:
    command: ClassVar[str] = "points"
    user_id: int | None = None


@dataclass(frozen=True, slots=True)
class GivePoints:
    command: ClassVar[str] = "givepoints"
    user_ids: tuple[int, ...]
    amount: int = DEFAULT_GRANT_AMOUNT


@dataclass(frozen=True, slots=True)
class RestorePoints:
    command: ClassVar[str] = "restorepoints"
    user_ids: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class ShowLeaderboard:
    command: ClassVar[str] = "showpoints"
    role_id: int | None = None


@dataclass(frozen=True, slots=True)
class SetUpgrade:
    command: ClassVar[str] = "upgrade"
    old_role_id: int
    new_role_id: int
    required_points: int


@dataclass(frozen=True, slots=True)
class RemoveUpgrade:
    command: ClassVar[str] = "removeupgrade"
    old_role_id: int
    new_role_id: int


@dataclass(frozen=True, slots=True)
class AddPointGiver:
    command: ClassVar[str] = "addpointgiver"
    role_ids: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class SetCommandChannel:
    command: ClassVar[str] = "setcommandchannel"


@dataclass(frozen=True, slots=True)
class SetAnnounceChannel:
    command: ClassVar[str] = "setannouncechannel"


@dataclass(frozen=True, slots=True)
class Help:
    command: ClassVar[str] = "help"


@dataclass(frozen=True, slots=True)
class Malformed:
    """A recognised command whose required mentions/arguments are missing."""

    command: str
    usage: str


Action = (
    ShowPoints
    | GivePoints
    | RestorePoints
    | ShowLeaderboard
    | SetUpgrade
    | RemoveUpgrade
    | AddPointGiver
    | SetCommandChannel
    | SetAnnounceChannel
    | Help
    | Malformed
)


# ---------------------------------------------------------------------------
# Text parsing
# ---------------------------------------------------------------------------
def _trailing_int(tokens: list[str]) -> int | None:
    if len(tokens) < 2:
        return None
    try:
        return int(tokens[-1])
    except ValueError:
        return None


def _malformed(command: str, prefix: str) -> Malformed:
    return Malformed(command=command, usage=USAGE[command].format(prefix=prefix))


def is_command_shaped(content: str, prefix: str) -> bool:
    """True when *content* looks like an attempt at a prefix command."""
    return content.strip().startswith(prefix)


def parse_command(content: str, prefix: str = "!") -> Action | None:
    """Turn a raw message into an :data:`Action`.

    Returns ``None`` for anything that is not one of our commands.
    An unparseable ``givepoints`` amount falls back to 1; other missing
    arguments produce :class:`Malformed` carrying a usage hint.
    """
    content = content.strip()
    if not content.startswith(prefix):
        return None

    tokens = content[len(prefix):].split()
    if not tokens:
        return None
    name = tokens[0].lower()

    users = tuple(dict.fromkeys(int(u) for u in _USER_MENTION.findall(content)))
    roles = tuple(dict.fromkeys(int(r) for r in _ROLE_MENTION.findall(content)))
    number = _trailing_int(tokens)

    if name == "points":
        return ShowPoints(user_id=users[0] if users else None)

    if name == "givepoints":
        if not users:
            return _malformed(name, prefix)
        return GivePoints(
            user_ids=users,
            amount=number if number is not None else DEFAULT_GRANT_AMOUNT,
        )

    if name == "restorepoints":
        if not users:
            return _malformed(name, prefix)
        return RestorePoints(user_ids=users)

    if name == "showpoints":
        return ShowLeaderboard(role_id=roles[0] if roles else None)

    if name == "upgrade":
        if len(roles) < 2 or number is None:
            return _malformed(name, prefix)
        return SetUpgrade(old_role_id=roles[0], new_role_id=roles[1], required_points=number)

    if name == "removeupgrade":
        if len(roles) < 2:
            return _malformed(name, prefix)
        return RemoveUpgrade(old_role_id=roles[0], new_role_id=roles[1])

    if name == "addpointgiver":
        if not roles:
            return _malformed(name, prefix)
        return AddPointGiver(role_ids=roles)

    if name == "setcommandchannel":
        return SetCommandChannel()

    if name == "setannouncechannel":
        return SetAnnounceChannel()

    if name == "help":
        return Help()

    return None

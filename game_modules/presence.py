"""Maps a player summary onto the state shown by the signature image.

The branches of `classify` are ordered: private beats in-game, in-game beats
online, and offline is what is left.
"""

import re

from dto.display_state import Badge, DisplayState, Palette, Presence
from dto.player_summary import PlayerSummary
from game_modules.errors import NotFound, Timeout

PRIVATE_PALETTE = Palette(header=(137, 137, 137), content=(242, 108, 79))
IN_GAME_PALETTE = Palette(header=(177, 251, 80), content=(139, 197, 63))
ONLINE_PALETTE = Palette(header=(111, 189, 255), content=(98, 167, 227))
OFFLINE_PALETTE = Palette(header=(137, 137, 137), content=(137, 137, 137))
ERROR_PALETTE = Palette(header=(238, 68, 68), content=(238, 68, 68))

UNPRINTABLE_REGEX = re.compile(r"[^\x20-\x7E]")


def sanitize_header(text: str) -> str:
    """Drop control characters and anything outside printable ASCII."""
    return UNPRINTABLE_REGEX.sub("", text)


def classify(summary: PlayerSummary) -> DisplayState:
    header = sanitize_header(summary.display_name)

    restricted = summary.restricted
    if restricted is None:
        return DisplayState(
            presence=Presence.PRIVATE,
            palette=PRIVATE_PALETTE,
            badge=Badge.OFFLINE,
            header=header,
            line1="This profile is private.",
            line2="Online status not available.",
        )

    game = restricted.game
    if game is not None:
        if game.extra_info:
            line1 = f"Playing {game.extra_info}"
            # the address of a server nobody can join is not disclosed
            line2 = game.server_ip if game.is_joinable else ""
        else:
            line1, line2 = "In-Game", ""
        return DisplayState(
            presence=Presence.IN_GAME,
            palette=IN_GAME_PALETTE,
            badge=Badge.IN_GAME,
            header=header,
            line1=line1,
            line2=line2,
        )

    if summary.is_online:
        return DisplayState(
            presence=Presence.ONLINE,
            palette=ONLINE_PALETTE,
            badge=Badge.ONLINE,
            header=header,
            line1="online",
        )

    return DisplayState(
        presence=Presence.OFFLINE,
        palette=OFFLINE_PALETTE,
        badge=Badge.OFFLINE,
        header=header,
        line1="offline",
    )


def error_state(error: Exception) -> DisplayState:
    """The generic state shown instead of a profile when resolving or fetching failed."""
    if isinstance(error, Timeout):
        line1, line2 = "Couldn't connect to Steam", "Please try again later"
    elif isinstance(error, NotFound):
        line1, line2 = "Please check Steam ID", ""
    else:
        line1, line2 = "Please try again later", ""
    return DisplayState(
        presence=Presence.ERROR,
        palette=ERROR_PALETTE,
        badge=Badge.ERROR,
        header="Error",
        line1=line1,
        line2=line2,
    )


def link_target(summary: PlayerSummary) -> str:
    """Where clicking the signature leads: a joinable server, else the profile."""
    game = summary.game
    if game is not None and game.connect_url:
        return game.connect_url
    return summary.profile_url

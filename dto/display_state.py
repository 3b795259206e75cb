from dataclasses import dataclass
from enum import Enum

Color = tuple[int, int, int]

class Presence(Enum):
	PRIVATE = "private"
	IN_GAME = "in-game"
	ONLINE = "online"
	OFFLINE = "offline"
	ERROR = "error"

class Badge(Enum):
	"""Box drawn next to the avatar, named after the signature's box images."""
	OFFLINE = "box_offline"
	IN_GAME = "box_ingame"
	ONLINE = "box_online"
	ERROR = "box_error"

@dataclass(frozen=True)
class Palette:
	header: Color
	content: Color

@dataclass(frozen=True)
class DisplayState:
	"""Everything the renderer needs besides the avatar."""
	presence: Presence
	palette: Palette
	badge: Badge
	header: str
	line1: str = ""
	line2: str = ""

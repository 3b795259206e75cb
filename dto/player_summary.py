# https://developer.valvesoftware.com/wiki/Steam_Web_API#GetPlayerSummaries_.28v0002.29
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any
from urllib.parse import urlsplit
import ipaddress

NO_SERVER = "0.0.0.0:0"

class PersonaState(IntEnum):
	OFFLINE = 0
	ONLINE = 1
	BUSY = 2
	AWAY = 3
	SNOOZE = 4
	LOOKING_TO_TRADE = 5
	LOOKING_TO_PLAY = 6

	@property
	def label(self) -> str:
		return self.name.lower().replace("_", " ")

	@classmethod
	def parse(cls, value: Any) -> "PersonaState":
		"""Unknown states are reported as offline."""
		try:
			return cls(int(value))
		except (TypeError, ValueError):
			return cls.OFFLINE

class CommunityVisibility(IntEnum):
	PRIVATE = 1
	PUBLIC = 3

	@property
	def label(self) -> str:
		return self.name.lower()

	@classmethod
	def parse(cls, value: Any) -> "CommunityVisibility":
		"""Anything but public (friends only, unknown values) counts as private."""
		try:
			return cls.PUBLIC if int(value) == cls.PUBLIC else cls.PRIVATE
		except (TypeError, ValueError):
			return cls.PRIVATE

@dataclass(frozen=True)
class GameSession:
	game_id: str = "0"
	server_ip: str = NO_SERVER # host:port
	extra_info: str = ""

	@property
	def is_multiplayer(self) -> bool:
		return self.server_ip != NO_SERVER

	@property
	def is_joinable(self) -> bool:
		"""A multiplayer session on a publicly routable server address."""
		if not self.is_multiplayer:
			return False
		try:
			host = urlsplit(f"//{self.server_ip}").hostname
			return host is not None and ipaddress.ip_address(host).is_global
		except ValueError:
			return False

	@property
	def connect_url(self) -> str:
		if not self.is_joinable:
			return ""
		return f"steam://connect/{self.server_ip}"

@dataclass(frozen=True)
class Location:
	country_code: str | None = None
	state_code: str | None = None
	city_id: int | None = None

@dataclass(frozen=True)
class RestrictedData:
	"""Profile fields Steam only discloses for public profiles."""
	real_name: str = ""
	primary_group_id: str = ""
	time_created: datetime | None = None
	game: GameSession | None = None
	location: Location = field(default_factory=Location)

@dataclass(frozen=True)
class PlayerSummary:
	steam_id: str
	display_name: str
	profile_url: str
	avatar: str
	avatar_medium: str
	avatar_full: str
	persona_state: PersonaState
	visibility: CommunityVisibility
	profile_configured: bool = False
	last_logoff: datetime | None = None
	comment_permission: bool = False
	# present exactly when the profile is public
	restricted: RestrictedData | None = None

	def __post_init__(self):
		if self.is_private and self.restricted is not None:
			raise ValueError("private profiles carry no restricted data")
		if not self.is_private and self.restricted is None:
			raise ValueError("public profiles require restricted data")

	@property
	def is_private(self) -> bool:
		return self.visibility != CommunityVisibility.PUBLIC

	@property
	def is_online(self) -> bool:
		return self.persona_state != PersonaState.OFFLINE

	@property
	def game(self) -> GameSession | None:
		return self.restricted.game if self.restricted is not None else None

	@classmethod
	def from_record(cls, data: dict) -> "PlayerSummary":
		"""Build a summary from one entry of the GetPlayerSummaries "players" list.

		Raises KeyError if a field Steam always sends is missing.
		"""
		visibility = CommunityVisibility.parse(data["communityvisibilitystate"])
		restricted = None
		if visibility == CommunityVisibility.PUBLIC:
			restricted = cls._restricted_from_record(data)
		return cls(
			steam_id=str(data["steamid"]),
			display_name=str(data["personaname"]),
			profile_url=data["profileurl"],
			avatar=data["avatar"],
			avatar_medium=data["avatarmedium"],
			avatar_full=data["avatarfull"],
			persona_state=PersonaState.parse(data["personastate"]),
			visibility=visibility,
			profile_configured=bool(data.get("profilestate")),
			last_logoff=_timestamp(data.get("lastlogoff")),
			comment_permission=bool(data.get("commentpermission")),
			restricted=restricted,
		)

	@staticmethod
	def _restricted_from_record(data: dict) -> RestrictedData:
		game = None
		# a game id without extra info is still a session ("In-Game")
		if data.get("gameextrainfo") or data.get("gameid"):
			game = GameSession(
				game_id=str(data.get("gameid") or "0"),
				server_ip=data.get("gameserverip") or NO_SERVER,
				extra_info=data.get("gameextrainfo") or "",
			)
		city_id = data.get("loccityid")
		return RestrictedData(
			real_name=data.get("realname") or "",
			primary_group_id=str(data.get("primaryclanid") or ""),
			time_created=_timestamp(data.get("timecreated")),
			game=game,
			location=Location(
				country_code=data.get("loccountrycode") or None,
				state_code=data.get("locstatecode") or None,
				city_id=int(city_id) if city_id else None,
			),
		)

	def __str__(self):
		game_name = self.game.extra_info if self.game is not None else None
		return f"{self.display_name} ({self.steam_id}) - {game_name}"

def _timestamp(value: Any) -> datetime | None:
	if not value:
		return None
	return datetime.fromtimestamp(int(value), tz=timezone.utc)

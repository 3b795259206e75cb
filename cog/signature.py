import os
import logging
from io import BytesIO
import aiohttp
import discord
from discord import app_commands
from discord.ext import commands
import util
from cog.render import render_signature
from dto.display_state import DisplayState
from dto.player_summary import PlayerSummary
from game_modules import presence
from game_modules.cache_store import create_cache_store
from game_modules.errors import SteamAPIError, Timeout, BadResponse
from game_modules.steam import SteamWebAPI

class SteamSignature(commands.Cog):
	"""Slash commands showing the Steam status signature of a profile."""

	def __init__(self, bot: commands.Bot, api: SteamWebAPI | None = None, logger: logging.Logger | None = None) -> None:
		self._bot = bot
		self.log = logger or util.setup_logging()
		if api is None:
			cache = create_cache_store(os.getenv("CACHE_BACKEND", "memory"), os.getenv("REDIS_URL"))
			api = SteamWebAPI(os.getenv("STEAM_KEY", ""), cache, logger=self.log)
		self.api = api

	async def lookup(self, identifier: str, refresh: bool = False) -> tuple[DisplayState, PlayerSummary | None]:
		"""Resolve, fetch and classify a profile. Failures become the error state."""
		use_cache = False if refresh else None
		try:
			steam_id = await self.api.resolve_steam_id(identifier, use_cache=use_cache)
			summary = await self.api.fetch_player_summary(steam_id, use_cache=use_cache)
		except SteamAPIError as e:
			self.log_failure(identifier, e)
			return presence.error_state(e), None
		return presence.classify(summary), summary

	def log_failure(self, identifier: str, error: SteamAPIError):
		if isinstance(error, (Timeout, BadResponse)):
			self.log.warning("Lookup of '%s' failed (%s): %s", identifier, error.code, error.message)
		else:
			self.log.info("Lookup of '%s' failed (%s): %s", identifier, error.code, error.message)

	async def fetch_avatar(self, summary: PlayerSummary) -> bytes | None:
		try:
			return await util.fetch_bytes(summary.avatar)
		except (aiohttp.ClientError, ValueError) as e:
			# avatar may be temporarily unavailable
			self.log.warning("Failed to fetch avatar for %s: %s", summary.steam_id, e)
			return None

	@app_commands.command(name='signature', description="Show the Steam status signature of a profile")
	@app_commands.describe(steam_id="64 bit Steam ID or custom profile URL name", refresh="Skip the cached profile and alias lookup and ask Steam again")
	async def signature(self, interaction: discord.Interaction, steam_id: str, refresh: bool = False) -> None:
		self.log.info(f"User '{interaction.user.name}' ran /signature command for '{steam_id}'")
		await interaction.response.defer()
		state, summary = await self.lookup(steam_id, refresh)
		avatar = None
		connectable = False
		if summary is not None:
			avatar = await self.fetch_avatar(summary)
			connectable = summary.game is not None and summary.game.is_joinable
		image = render_signature(state, avatar, connectable)
		filename = f"{summary.steam_id if summary else 'error'}.png"
		await interaction.followup.send(file=discord.File(BytesIO(image), filename=filename))

	@app_commands.command(name='steam_link', description="Get the profile link, or the server to join if possible")
	@app_commands.describe(steam_id="64 bit Steam ID or custom profile URL name")
	async def steam_link(self, interaction: discord.Interaction, steam_id: str) -> None:
		self.log.info(f"User '{interaction.user.name}' ran /steam_link command for '{steam_id}'")
		state, summary = await self.lookup(steam_id)
		if summary is None:
			message = " ".join(line for line in (state.line1, state.line2) if line)
			await interaction.response.send_message(f"{state.header}: {message}", ephemeral=True)
			return
		await interaction.response.send_message(presence.link_target(summary), ephemeral=True)

	async def cog_unload(self) -> None:
		if self.api.cache is not None:
			await self.api.cache.close()

async def setup(bot: commands.Bot) -> None:
    """A hook for the bot to register the Steam Signature cog.

    Args:
        bot: The bot to add this cog to.
    """
    await bot.add_cog(SteamSignature(bot))

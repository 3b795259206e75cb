"""The entry point of the program which configures and runs the bot."""

import os
import asyncio
from dotenv import load_dotenv
import util
import discord
from discord.ext import commands


# Slash commands only, no privileged intents needed.
intents = discord.Intents.default()

# Load variables from '.env' file into the environment.
load_dotenv()

# Get the Discord token from the environment.
discord_token = os.getenv('DISCORD_TOKEN')

if discord_token is None:
	raise ValueError("DISCORD_TOKEN environment variable is not set. Please set it in the .env file.")

if not os.getenv('STEAM_KEY'):
	util.setup_logging().warning("STEAM_KEY is not set, Steam Web API calls will be rejected")

asyncio.run(util.wait_for_connection())

# Configure the bot. The 'command_prefix' parameter is required
# but it's not being used so we set it to something random.
bot = commands.Bot(command_prefix='(╯°□°)╯', intents=intents)


@bot.event
async def setup_hook():
	await bot.load_extension('cog.signature')
	await bot.tree.sync()


# Run the bot.
bot.run(discord_token)

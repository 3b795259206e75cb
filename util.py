"""Contains functions that are useful throughout the program."""

import os
import discord
import aiohttp
import logging
import asyncio
from PIL import Image
from io import BytesIO

LOGGER_NAME = 'steam-signature'

async def wait_for_connection(url: str = "https://api.steampowered.com", max_retries: int = 15, retry_delay: float = 3.0) -> bool:
    """Wait for a connection to be available.

    Args:
        url: The URL to check for connection
        max_retries: Maximum number of retries before giving up
        retry_delay: Delay between retries in seconds

    Returns:
        bool: True if connection is successful, False otherwise
    """
    for attempt in range(max_retries):
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(url) as response:
                    if response.status < 500:
                        return True
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            if attempt < max_retries - 1:
                logging.debug(f"Connection attempt {attempt + 1} failed: {e}")
                await asyncio.sleep(retry_delay)
            else:
                logging.error(f"Failed to connect after {max_retries} attempts: {e}")
                return False
    return False

async def fetch_bytes(url: str) -> bytes:
    """Download a resource, e.g. an avatar image.

    Raises:
        ValueError: The server answered with anything but 200.
        aiohttp.ClientError: The download failed.
    """
    async with aiohttp.ClientSession() as session:
        async with session.get(url) as response:
            if response.status != 200:
                raise ValueError(f"Failed to fetch {url}: HTTP {response.status}")
            return await response.read()

def shorten_text(text: str, chars: int = 40) -> str:
    """Shorten text to at most `chars` characters, cutting at the last space and appending '...'."""
    if len(text) <= chars:
        return text
    text = (text + ' ')[:chars]
    cut = text.rfind(' ')
    return (text[:cut] if cut > 0 else text) + '...'

def setup_logging() -> logging.Logger:
    level = logging.INFO
    if os.getenv('DEBUG') == '1':
        level = logging.DEBUG

    terminal = logging.StreamHandler()
    log_file = logging.FileHandler('output.log', encoding='utf-8')

    setup_handler(terminal)
    setup_handler(log_file)

    logger = logging.getLogger(LOGGER_NAME)

    # Remove all old handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(level)
    logger.addHandler(terminal)
    logger.addHandler(log_file)

    return logger

def setup_handler(handler):
    if isinstance(handler, logging.StreamHandler) and discord.utils.stream_supports_colour(handler.stream):
        formatter = discord.utils._ColourFormatter()
    else:
        dt_fmt = '%Y-%m-%d %H:%M:%S'
        formatter = logging.Formatter('[{asctime}] [{levelname:<8}] {name}: {message}', dt_fmt, style='{')

    handler.setFormatter(formatter)

def get_img_type(image_data: bytes) -> str | None:
    try:
        with Image.open(BytesIO(image_data)) as img:
            return img.format.lower()
    except Exception:
        return None

"""Draws the signature image for a display state."""

from io import BytesIO
import logging
from PIL import Image, ImageDraw, ImageFont
from dto.display_state import Badge, DisplayState
import util

SIZE = (300, 50)
BACKGROUND = (34, 34, 34, 255)
BOX_POSITION = (4, 4)
BOX_SIZE = 42
AVATAR_POSITION = (8, 8)
AVATAR_SIZE = 34
TEXT_X = 48
# top of each text line: header, status line 1, status line 2
TEXT_Y = (5, 20, 31)
CONNECT_SIZE = 12

BADGE_COLORS: dict[Badge, tuple[int, int, int]] = {
	Badge.OFFLINE: (90, 90, 90),
	Badge.IN_GAME: (139, 197, 63),
	Badge.ONLINE: (83, 164, 196),
	Badge.ERROR: (238, 68, 68),
}

def render_signature(state: DisplayState, avatar: bytes | None = None, connectable: bool = False) -> bytes:
	"""Render the signature as PNG bytes.

	Args:
		state: What to show.
		avatar: Raw avatar image, skipped when missing or not an image.
		connectable: Mark the top-right corner to show the server can be joined.
	"""
	image = Image.new("RGBA", SIZE, BACKGROUND)
	draw = ImageDraw.Draw(image)

	x, y = BOX_POSITION
	draw.rectangle((x, y, x + BOX_SIZE - 1, y + BOX_SIZE - 1), fill=BADGE_COLORS[state.badge])

	if avatar and util.get_img_type(avatar) is not None:
		try:
			with Image.open(BytesIO(avatar)) as img:
				image.paste(img.convert("RGBA").resize((AVATAR_SIZE, AVATAR_SIZE)), AVATAR_POSITION)
		except OSError as e:
			# avatar may be truncated or temporarily broken on Steam's CDN
			logging.getLogger(util.LOGGER_NAME).warning("Could not decode avatar, rendering without it: %s", e)

	font = ImageFont.load_default()
	draw.text((TEXT_X, TEXT_Y[0]), util.shorten_text(state.header), fill=state.palette.header, font=font)
	draw.text((TEXT_X, TEXT_Y[1]), util.shorten_text(state.line1), fill=state.palette.content, font=font)
	draw.text((TEXT_X, TEXT_Y[2]), util.shorten_text(state.line2), fill=state.palette.content, font=font)

	if connectable:
		right = SIZE[0] - 1
		draw.polygon([(right - CONNECT_SIZE, 0), (right, 0), (right, CONNECT_SIZE)], fill=BADGE_COLORS[Badge.IN_GAME])

	buf = BytesIO()
	image.save(buf, format="PNG")
	return buf.getvalue()

import asyncio
import io
from collections.abc import Sequence

import httpx
from loguru import logger
from PIL import Image, ImageDraw, ImageFont

from app.core.enums import CardRarity
from app.schemas.card import CardData

# Card layout
CARD_WIDTH = 400
CARD_HEIGHT = 600
IMAGE_X = 30
IMAGE_Y = 80
IMAGE_AREA_WIDTH = 340
IMAGE_AREA_HEIGHT = 280
CORNER_RADIUS = 24

# Deck layout
SPACING = 20
BACKGROUND_COLOR = (30, 30, 40)
DECK_CARD_WIDTH = 200
DECK_CARD_HEIGHT = 300

RARITY_GRADIENTS: dict[CardRarity, tuple[tuple[int, int, int], tuple[int, int, int]]] = {
    CardRarity.COMMON: ((240, 240, 245), (200, 200, 210)),
    CardRarity.UNCOMMON: ((230, 255, 230), (180, 230, 180)),
    CardRarity.RARE: ((230, 230, 255), (180, 180, 230)),
    CardRarity.EPIC: ((245, 225, 255), (200, 160, 230)),
    CardRarity.LEGENDARY: ((255, 250, 200), (230, 200, 120)),
}

RARITY_FRAME_COLORS: dict[CardRarity, tuple[int, int, int]] = {
    CardRarity.COMMON: (130, 130, 140),
    CardRarity.UNCOMMON: (60, 160, 60),
    CardRarity.RARE: (60, 90, 200),
    CardRarity.EPIC: (140, 60, 200),
    CardRarity.LEGENDARY: (210, 160, 30),
}


def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    try:
        return ImageFont.truetype("arial.ttf", size)
    except OSError:
        return ImageFont.load_default()


def _draw_gradient(canvas: Image.Image, rarity: CardRarity) -> None:
    (top_r, top_g, top_b), (bottom_r, bottom_g, bottom_b) = RARITY_GRADIENTS[rarity]
    draw = ImageDraw.Draw(canvas)
    for y in range(canvas.height):
        ratio = y / canvas.height
        color = (
            int(top_r + (bottom_r - top_r) * ratio),
            int(top_g + (bottom_g - top_g) * ratio),
            int(top_b + (bottom_b - top_b) * ratio),
        )
        draw.line([(0, y), (canvas.width, y)], fill=color)


def _draw_centered_text(
    draw: ImageDraw.ImageDraw,
    text: str,
    *,
    center_x: int,
    top: int,
    font: ImageFont.FreeTypeFont | ImageFont.ImageFont,
    fill: tuple[int, int, int],
) -> None:
    bbox = draw.textbbox((0, 0), text, font=font)
    text_width = bbox[2] - bbox[0]
    draw.text((center_x - text_width // 2, top), text, fill=fill, font=font)


def _paste_artwork(canvas: Image.Image, image_bytes: bytes | None) -> None:
    draw = ImageDraw.Draw(canvas)
    box = [IMAGE_X, IMAGE_Y, IMAGE_X + IMAGE_AREA_WIDTH, IMAGE_Y + IMAGE_AREA_HEIGHT]

    if image_bytes is None:
        draw.rectangle(box, fill=(60, 60, 70))
        return

    try:
        artwork = Image.open(io.BytesIO(image_bytes)).convert("RGB")
    except OSError as e:
        logger.warning(f"Failed to open card artwork: {e}")
        draw.rectangle(box, fill=(60, 60, 70))
        return

    # Crop to fill the art box
    scale = max(IMAGE_AREA_WIDTH / artwork.width, IMAGE_AREA_HEIGHT / artwork.height)
    artwork = artwork.resize(
        (max(1, int(artwork.width * scale)), max(1, int(artwork.height * scale))),
        Image.Resampling.LANCZOS,
    )
    left = (artwork.width - IMAGE_AREA_WIDTH) // 2
    top = (artwork.height - IMAGE_AREA_HEIGHT) // 2
    artwork = artwork.crop((left, top, left + IMAGE_AREA_WIDTH, top + IMAGE_AREA_HEIGHT))
    canvas.paste(artwork, (IMAGE_X, IMAGE_Y))


def _generate_card_image_sync(card: CardData, image_bytes: bytes | None) -> bytes:
    """
    Synchronous function to generate a card image.
    Draws the rarity background and frame, the artwork, the title, stats and rarity badge.
    """
    canvas = Image.new("RGB", (CARD_WIDTH, CARD_HEIGHT))
    _draw_gradient(canvas, card.rarity)
    draw = ImageDraw.Draw(canvas)
    frame_color = RARITY_FRAME_COLORS[card.rarity]

    # Frame
    draw.rounded_rectangle(
        [4, 4, CARD_WIDTH - 5, CARD_HEIGHT - 5], radius=CORNER_RADIUS, outline=frame_color, width=8
    )

    # Title
    _draw_centered_text(
        draw, card.name, center_x=CARD_WIDTH // 2, top=28, font=_load_font(30), fill=(20, 20, 30)
    )

    # Artwork
    _paste_artwork(canvas, image_bytes)
    draw.rectangle(
        [IMAGE_X, IMAGE_Y, IMAGE_X + IMAGE_AREA_WIDTH, IMAGE_Y + IMAGE_AREA_HEIGHT],
        outline=frame_color,
        width=3,
    )

    # Stats
    stats_top = IMAGE_Y + IMAGE_AREA_HEIGHT + 30
    stat_font = _load_font(34)
    draw.text((IMAGE_X + 10, stats_top), f"ATK {card.attack}", fill=(190, 40, 40), font=stat_font)
    defense_text = f"DEF {card.defense}"
    bbox = draw.textbbox((0, 0), defense_text, font=stat_font)
    draw.text(
        (IMAGE_X + IMAGE_AREA_WIDTH - 10 - (bbox[2] - bbox[0]), stats_top),
        defense_text,
        fill=(40, 80, 190),
        font=stat_font,
    )

    # Description
    if card.description:
        _draw_centered_text(
            draw,
            card.description[:60],
            center_x=CARD_WIDTH // 2,
            top=stats_top + 60,
            font=_load_font(16),
            fill=(50, 50, 60),
        )

    # Rarity badge
    badge_font = _load_font(20)
    badge_text = card.rarity.name
    bbox = draw.textbbox((0, 0), badge_text, font=badge_font)
    badge_width = bbox[2] - bbox[0] + 30
    badge_left = (CARD_WIDTH - badge_width) // 2
    badge_top = CARD_HEIGHT - 60
    draw.rounded_rectangle(
        [badge_left, badge_top, badge_left + badge_width, badge_top + 34],
        radius=17,
        fill=frame_color,
    )
    _draw_centered_text(
        draw,
        badge_text,
        center_x=CARD_WIDTH // 2,
        top=badge_top + 6,
        font=badge_font,
        fill=(255, 255, 255),
    )

    # Convert to bytes
    output = io.BytesIO()
    canvas.save(output, format="PNG")
    return output.getvalue()


async def generate_card_image(card: CardData, image_bytes: bytes | None = None) -> bytes:
    """
    Generate a trading card image for a card.

    Args:
        card: The card to draw
        image_bytes: The uploaded picture the card was made from, if available

    Returns:
        PNG image as bytes
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _generate_card_image_sync, card, image_bytes)


def _download_artwork(card: CardData) -> bytes | None:
    if not card.image_url:
        return None

    try:
        response = httpx.get(card.image_url, timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Failed to download artwork for card {card.id}: {e}")
        return None
    return response.content


def _generate_deck_image_sync(cards: Sequence[CardData]) -> bytes:
    """
    Synchronous function to generate a battle deck image.
    Places the cards side by side, each a scaled down card render with its stored artwork.
    """
    canvas_width = (DECK_CARD_WIDTH * len(cards)) + (SPACING * (len(cards) + 1))
    canvas_height = DECK_CARD_HEIGHT + (SPACING * 2)
    canvas = Image.new("RGB", (canvas_width, canvas_height), BACKGROUND_COLOR)

    for index, card in enumerate(cards):
        rendered = _generate_card_image_sync(card, _download_artwork(card))
        card_image = Image.open(io.BytesIO(rendered))
        card_image.thumbnail((DECK_CARD_WIDTH, DECK_CARD_HEIGHT), Image.Resampling.LANCZOS)

        x_pos = SPACING + index * (DECK_CARD_WIDTH + SPACING)
        x_pos += (DECK_CARD_WIDTH - card_image.width) // 2
        y_pos = SPACING + (DECK_CARD_HEIGHT - card_image.height) // 2
        canvas.paste(card_image, (x_pos, y_pos))

    output = io.BytesIO()
    canvas.save(output, format="PNG")
    return output.getvalue()


async def generate_deck_image(cards: Sequence[CardData]) -> bytes:
    """
    Generate an image of a battle deck with the cards laid out in a row.

    Args:
        cards: The deck's cards (three for a battle deck)

    Returns:
        PNG image as bytes
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _generate_deck_image_sync, cards)

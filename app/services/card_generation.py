import json
import random
from typing import Any

import openai
from loguru import logger
from openai import AsyncOpenAI

from app.core.enums import CardRarity
from app.game.rarity import roll_rarity
from app.schemas.card import CARD_STAT_MAX, CARD_STAT_MIN, CardCreate

DEFAULT_STAT = 5
DEFAULT_NAME = "Unknown Card"
DEFAULT_DESCRIPTION = "A mysterious entity of unknown origin."
MAX_NAME_LENGTH = 25

CARD_PROMPT = """Analyze this image and create a trading card from it.
Return ONLY a JSON object with these exact fields:
{"name": "A creative name (max 25 chars)", "attack": 9, "defense": 2, "rarity": "UNCOMMON", "description": "Two short sentences."}

RARITY: pick COMMON, UNCOMMON, RARE, EPIC or LEGENDARY based on social value, humor, meme
potential and uniqueness. Most images are COMMON or UNCOMMON, LEGENDARY is once in a lifetime.

STATS (1-10, use the full range, avoid defaulting to 4-6):
- ATTACK reflects energetic, aggressive elements (sleeping baby 1, lightning 10).
- DEFENSE reflects sturdy, protective elements (soap bubble 1, fortress 10).
- Prefer contrasts: high attack with low defense or the other way around.
- Attack or defense of 8+ should be RARE or higher.

DESCRIPTION: sentence one is short mystical flavor text, sentence two a funny hyperbolic
punchline about what is in the image ("Legend says...", "Rumor has it..."). Under 80
characters in total."""  # noqa: E501

FALLBACK_CARD_NAMES = (
    "Mystic Warrior",
    "Shadow Knight",
    "Fire Dragon",
    "Ice Phoenix",
    "Thunder Beast",
    "Crystal Guardian",
    "Storm Elemental",
    "Earth Golem",
    "Wind Spirit",
    "Dark Mage",
    "Light Paladin",
    "Forest Ranger",
    "Ocean Lord",
    "Mountain King",
    "Sky Dancer",
)


class CardGenerationError(Exception):
    """Raised when stats could not be generated for an uploaded image."""


class FallbackCardGenerator:
    """Local stand-in for the vision model, used when no API key is configured."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def generate(self) -> CardCreate:
        logger.info("Creating card with the fallback generator")
        return CardCreate(
            name=self.rng.choice(FALLBACK_CARD_NAMES),
            attack=self.rng.randint(CARD_STAT_MIN, CARD_STAT_MAX),
            defense=self.rng.randint(CARD_STAT_MIN, CARD_STAT_MAX),
            rarity=roll_rarity(rng=self.rng),
        )


def _strip_code_fence(content: str) -> str:
    content = content.strip()
    if content.startswith("```"):
        content = content.removeprefix("```json").removeprefix("```")
        content = content.removesuffix("```")
    return content.strip()


def _clamp_stat(value: Any) -> int:
    try:
        stat = int(value)
    except (TypeError, ValueError):
        return DEFAULT_STAT
    return max(CARD_STAT_MIN, min(CARD_STAT_MAX, stat))


def _parse_rarity_hint(value: Any) -> CardRarity:
    try:
        return CardRarity[str(value).strip().upper()]
    except KeyError:
        return CardRarity.COMMON


def parse_card_response(content: str, rng: random.Random | None = None) -> CardCreate:
    """Turn the model's JSON reply into card stats.

    Out of range stats are clamped to 1-10 and the suggested rarity only nudges the
    weighted rarity roll.

    Raises:
        CardGenerationError: If the reply isn't a JSON object.
    """
    try:
        data = json.loads(_strip_code_fence(content))
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON from the card generator: {e}"
        raise CardGenerationError(msg) from e
    if not isinstance(data, dict):
        msg = "The card generator did not return a JSON object"
        raise CardGenerationError(msg)

    hint = _parse_rarity_hint(data.get("rarity"))
    rarity = roll_rarity(hint, rng)
    logger.info(f"Card generator suggested {hint.name}, final rarity {rarity.name}")

    name = str(data.get("name") or DEFAULT_NAME).strip()[:MAX_NAME_LENGTH]
    return CardCreate(
        name=name or DEFAULT_NAME,
        attack=_clamp_stat(data.get("attack")),
        defense=_clamp_stat(data.get("defense")),
        rarity=rarity,
        description=str(data.get("description") or DEFAULT_DESCRIPTION),
    )


class CardGenerationService:
    """Assigns a name, stats and rarity to an uploaded image."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str = "gpt-4o-mini",
        fallback: FallbackCardGenerator | None = None,
    ) -> None:
        self.client = AsyncOpenAI(api_key=api_key) if api_key else None
        self.model = model
        self.fallback = fallback or FallbackCardGenerator()

    @property
    def uses_fallback(self) -> bool:
        return self.client is None

    async def generate(self, image_url: str) -> CardCreate:
        if self.client is None:
            return self.fallback.generate()

        logger.info(f"Requesting card stats for {image_url}")
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": CARD_PROMPT},
                            {"type": "image_url", "image_url": {"url": image_url}},
                        ],
                    }
                ],
                response_format={"type": "json_object"},
                max_tokens=300,
            )
        except openai.RateLimitError as e:
            msg = "OpenAI API quota exceeded, please try again later."
            raise CardGenerationError(msg) from e
        except openai.AuthenticationError as e:
            msg = "Invalid OpenAI API key."
            raise CardGenerationError(msg) from e
        except openai.OpenAIError as e:
            msg = f"Failed to communicate with OpenAI: {e}"
            raise CardGenerationError(msg) from e

        if not response.choices or not response.choices[0].message.content:
            msg = "Empty response from the card generator"
            raise CardGenerationError(msg)

        return parse_card_response(response.choices[0].message.content)

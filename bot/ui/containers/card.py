from collections.abc import Sequence

import discord

from app.core.enums import CardRarity
from app.models.card import Card
from bot import ui

CARDS_PER_PAGE = 8

CARD_RARITY_COLORS = {
    CardRarity.COMMON: discord.Color.light_gray(),
    CardRarity.UNCOMMON: discord.Color.green(),
    CardRarity.RARE: discord.Color.blue(),
    CardRarity.EPIC: discord.Color.purple(),
    CardRarity.LEGENDARY: discord.Color.gold(),
}

RARITY_EMOJIS = {
    CardRarity.COMMON: "⚪",
    CardRarity.UNCOMMON: "🟢",
    CardRarity.RARE: "🔵",
    CardRarity.EPIC: "🟣",
    CardRarity.LEGENDARY: "🟡",
}


def format_card_line(card: Card) -> str:
    return (
        f"`[ID: {card.id}]` **{card.name}**\n"
        f"-# ATK {card.attack} | DEF {card.defense} | {RARITY_EMOJIS[card.rarity]} {card.rarity}"
    )


class CardContainer(ui.Container):
    def __init__(self, card: Card) -> None:
        content = (
            f"### Card Details - ID #{card.id}\n"
            f"⚔️ **Attack:** {card.attack}/10\n"
            f"🛡️ **Defense:** {card.defense}/10\n"
            f"{RARITY_EMOJIS[card.rarity]} **Rarity:** {card.rarity}\n"
            f"📅 **Created:** {discord.utils.format_dt(card.created_at, 'R')}\n"
        )
        if card.description:
            content += f"### Description\n{card.description}\n"

        super().__init__(
            ui.TextDisplay(content=f"# {card.name}"),
            accent_color=CARD_RARITY_COLORS[card.rarity],
        )
        if card.image_url:
            self.add_item(ui.MediaGallery(discord.MediaGalleryItem(media=card.image_url)))
        self.add_item(ui.TextDisplay(content=content))


class CardListContainer(ui.Container):
    def __init__(self, cards: Sequence[Card], *, total: int) -> None:
        lines = "\n".join(format_card_line(card) for card in cards)
        super().__init__(
            ui.TextDisplay(content=f"# Your Cards ({total} total)"),
            ui.TextDisplay(content=lines),
            ui.Separator(),
            ui.TextDisplay(
                content="-# Use `/card <ID>` to view a card. "
                "You need at least 3 cards to `/challenge` someone or `/fight`."
            ),
        )


def build_card_list_pages(cards: Sequence[Card]) -> list[ui.Container]:
    return [
        CardListContainer(cards[start : start + CARDS_PER_PAGE], total=len(cards))
        for start in range(0, len(cards), CARDS_PER_PAGE)
    ]

import io

import discord
from discord import app_commands
from discord.ext import commands
from loguru import logger

from app.core.config import settings
from app.models.card import Card
from app.services.card import CardService
from app.services.card_generation import CardGenerationError
from app.utils.card_image import generate_card_image
from bot import ui
from bot.main import CardGameBot
from bot.types import Interaction
from bot.ui.containers.card import CardContainer, build_card_list_pages
from bot.ui.paginator import PaginatorView
from bot.utils.db import get_session

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp")

HELP_TEXT = (
    "# 🎴 Card Battle Bot\n"
    "### 📋 Commands\n"
    "`/cards` - View your card collection and card IDs\n"
    "`/card <id>` - View details of one of your cards\n"
    "`/clear_cards` - Delete your whole collection\n"
    "`/challenge @user` - Challenge another player to a battle\n"
    "`/fight [personality]` - Battle a computer opponent\n"
    "`/play <card_id> <attack|defense>` - Make a move in a battle\n"
    "`/battle_status` - Check the battle in this channel\n"
    "`/forfeit` - Give up the battle in this channel\n"
    "`/stats` - Show your battle record\n"
    "### 🎨 Creating Cards\n"
    "Upload an image (PNG, JPG, JPEG, GIF or WEBP) to any channel I can see and I'll turn it "
    "into a card with a name, attack and defense from 1 to 10, a rarity and a description.\n"
    "### ⚔️ Battles\n"
    "Each battle uses 3 random cards from your collection. Every round both players secretly "
    "play one card in attack or defense position. Win 2 rounds, or lead after 3, to win!"
)


def _card_summary(card: Card) -> str:
    return (
        f"**{card.name}**\n⚔️ ATK: {card.attack} | 🛡️ DEF: {card.defense}\n⭐ {card.rarity}"
    )


class CardCog(commands.Cog):
    def __init__(self, bot: CardGameBot) -> None:
        self.bot = bot

    @app_commands.command(name="cards", description="View your card collection")
    async def cards(self, i: Interaction) -> None:
        async with get_session() as session:
            service = CardService(session)
            cards = await service.get_player_cards(str(i.user.id))

        if not cards:
            await i.response.send_message(
                "You don't have any cards yet! Upload some images to create cards.",
                ephemeral=True,
            )
            return

        paginator = PaginatorView(build_card_list_pages(cards), author_id=i.user.id)
        await paginator.start(i)

    @app_commands.command(name="card", description="View the details of one of your cards")
    @app_commands.describe(card_id="The card ID shown in /cards")
    async def card(self, i: Interaction, card_id: int) -> None:
        async with get_session() as session:
            service = CardService(session)
            card = await service.get_player_card(owner_id=str(i.user.id), card_id=card_id)
            cards = [] if card is not None else await service.get_player_cards(str(i.user.id))

        if card is None:
            available = "\n".join(f"• ID {c.id}: {c.name}" for c in cards)
            available = available or "• No cards yet! Upload images to create cards."
            await i.response.send_message(
                f"❌ Card #{card_id} not found or you don't own it.\n\n"
                f"💡 **Your card IDs:**\n{available}",
                ephemeral=True,
            )
            return

        view = ui.LayoutView()
        view.add_item(CardContainer(card))
        await i.response.send_message(view=view)

    @app_commands.command(name="clear_cards", description="Delete your whole card collection")
    async def clear_cards(self, i: Interaction) -> None:
        async with get_session() as session:
            service = CardService(session)
            count = await service.clear_player_cards(str(i.user.id))

        logger.info(f"Cleared {count} cards owned by {i.user.id}")
        await i.response.send_message(
            f"🗑️ Removed {count} cards from your collection.", ephemeral=True
        )

    @app_commands.command(name="help", description="Learn how to play")
    async def help_command(self, i: Interaction) -> None:
        view = ui.LayoutView()
        view.add_item(ui.Container(ui.TextDisplay(HELP_TEXT)))
        await i.response.send_message(view=view, ephemeral=True)

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot or not message.attachments:
            return

        attachment = next(
            (a for a in message.attachments if a.filename.lower().endswith(IMAGE_EXTENSIONS)), None
        )
        if attachment is None:
            logger.debug(f"No image attachment in message {message.id}")
            await message.channel.send(
                "❌ No valid image found! Upload PNG, JPG, JPEG, GIF, or WEBP"
            )
            return

        logger.info(f"Creating card from {attachment.filename} uploaded by {message.author.id}")
        progress = await message.channel.send("🔄 Creating your card...")

        try:
            await progress.edit(content="🤖 Analyzing image...")
            card_data = await self.bot.card_generation.generate(attachment.url)
        except CardGenerationError as e:
            logger.warning(f"Card generation failed for message {message.id}: {e}")
            await progress.edit(content=f"❌ Error: {e}")
            return

        async with get_session() as session:
            service = CardService(session)
            card = await service.create_card(
                card_data, owner_id=str(message.author.id), image_url=attachment.url
            )
        logger.info(f"Created card {card.id} ({card.name}) for {message.author.id}")

        if not settings.visual_cards:
            await progress.edit(
                content=f"✨ **Card Created!** ✨\n{_card_summary(card)}\n\n"
                "Use `/cards` to see your collection!"
            )
            return

        await progress.edit(content="🎨 Generating visual card...")
        try:
            image = await generate_card_image(card.to_data(), await attachment.read())
        except (discord.HTTPException, OSError, ValueError):
            logger.exception(f"Failed to render card {card.id}")
            await progress.edit(
                content=f"✨ **Card Created!** ✨\n{_card_summary(card)}\n\n"
                "⚠️ Visual generation failed, but your card stats are saved!\n"
                "Use `/cards` to see your collection!"
            )
            return

        await progress.edit(
            content=f"✨ **Visual Card Created!** ✨\n{_card_summary(card)}\n\n"
            "Use `/cards` to see your collection!"
        )
        await message.channel.send(
            "🖼️ **Your Visual Trading Card:**",
            file=discord.File(io.BytesIO(image), filename=f"card_{card.id}.png"),
        )


async def setup(bot: CardGameBot) -> None:
    await bot.add_cog(CardCog(bot))

import io

import discord
from discord import app_commands
from discord.ext import commands
from loguru import logger

from app.core.config import settings
from app.core.enums import BattlePosition, Personality
from app.game.registry import ActiveBattle
from app.schemas.battle import BattleComplete, MoveAccepted, MoveError, MoveOutcome, RoundComplete
from app.services.battle import ERROR_NO_BATTLE
from app.services.battle_record import BattleRecordService
from app.services.card import CardService
from app.utils.card_image import generate_deck_image
from bot import ui
from bot.main import CardGameBot
from bot.types import Interaction
from bot.ui.containers.battle import (
    BattleCompleteContainer,
    BattleStartContainer,
    BattleStatusContainer,
    ChallengeView,
    RoundResultContainer,
    format_deck,
    format_participant,
)
from bot.utils.db import get_session

NO_BATTLE_MESSAGE = f"{ERROR_NO_BATTLE}! Use `/challenge @user` or `/fight` to start a battle."


class BattleCog(commands.Cog):
    def __init__(self, bot: CardGameBot) -> None:
        self.bot = bot
        self.service = bot.battle_service

    async def _send_to_channel(
        self, channel_id: str, *, content: str | None = None, view: ui.LayoutView | None = None
    ) -> None:
        channel = self.bot.get_channel(int(channel_id))
        if not isinstance(channel, discord.abc.Messageable):
            logger.warning(f"Can't announce battle updates in channel {channel_id}")
            return

        if view is not None:
            await channel.send(view=view)
        else:
            await channel.send(content)

    async def _save_record(self, battle: ActiveBattle, outcome: BattleComplete) -> None:
        personality = battle.opponent.personality if battle.opponent is not None else None
        async with get_session() as session:
            service = BattleRecordService(session)
            record = await service.save_result(
                outcome.battle_result,
                channel_id=battle.channel_id,
                opponent_personality=personality,
            )
        logger.info(f"Saved battle record {record.id} for battle {record.session_id}")

    async def announce_outcome(self, battle: ActiveBattle, outcome: MoveOutcome) -> None:
        """Post a move's public consequences to the battle's channel."""
        view = ui.LayoutView()

        match outcome:
            case MoveAccepted(move=move):
                participant = format_participant(battle, move.participant_id)
                await self._send_to_channel(
                    battle.channel_id, content=f"🔒 {participant} has locked in a move!"
                )
                return
            case RoundComplete(round_result=round_result, next_round_number=next_round):
                view.add_item(RoundResultContainer(battle, round_result, next_round))
            case BattleComplete():
                await self._save_record(battle, outcome)
                view.add_item(BattleCompleteContainer(battle, outcome.battle_result))
            case MoveError():
                return

        await self._send_to_channel(battle.channel_id, view=view)

    async def report_opponent_error(self, battle: ActiveBattle, _error: Exception) -> None:
        name = battle.opponent.name if battle.opponent is not None else "Your opponent"
        await self._send_to_channel(
            battle.channel_id,
            content=f"⚠️ {name} couldn't make a move. Use `/battle_status` to try again.",
        )

    @app_commands.command(name="challenge", description="Challenge another player to a battle")
    @app_commands.describe(opponent="The player you want to battle")
    async def challenge(self, i: Interaction, opponent: discord.User | discord.Member) -> None:
        if opponent.id == i.user.id:
            await i.response.send_message(
                "You can't challenge yourself! Find another player to battle.", ephemeral=True
            )
            return
        if opponent.bot:
            await i.response.send_message(
                "You can't challenge a bot! Use `/fight` to battle a computer opponent.",
                ephemeral=True,
            )
            return
        if str(i.channel_id) in self.bot.registry:
            await i.response.send_message(
                "There's already an active battle in this channel! Wait for it to finish.",
                ephemeral=True,
            )
            return

        # Both players need a full deck before the challenge goes out
        async with get_session() as session:
            card_service = CardService(session)
            await card_service.pick_battle_deck(str(i.user.id))
            await card_service.pick_battle_deck(str(opponent.id))

        assert i.channel_id is not None
        view = ChallengeView(
            challenger_id=i.user.id, opponent_id=opponent.id, channel_id=i.channel_id
        )
        await i.response.send_message(view=view)
        view.message = await i.original_response()
        await view.message.reply(f"<@{opponent.id}> you've been challenged by <@{i.user.id}>!")

    @app_commands.command(name="fight", description="Battle a computer opponent")
    @app_commands.describe(personality="How your opponent plays, random if left empty")
    async def fight(self, i: Interaction, personality: Personality | None = None) -> None:
        async with get_session() as session:
            card_service = CardService(session)
            cards = await card_service.pick_battle_deck(str(i.user.id))

        battle = self.service.start_opponent_battle(
            channel_id=str(i.channel_id),
            player_id=str(i.user.id),
            player_cards=cards,
            personality=personality,
        )

        view = ui.LayoutView()
        view.add_item(BattleStartContainer(battle))
        await i.response.send_message(view=view)

    @app_commands.command(name="play", description="Play a card in the current battle")
    @app_commands.describe(
        card_id="The ID of one of your battle cards", position="Attack or defense position"
    )
    async def play(self, i: Interaction, card_id: int, position: BattlePosition) -> None:
        battle, outcome = await self.service.submit_move(
            channel_id=str(i.channel_id),
            participant_id=str(i.user.id),
            card_id=card_id,
            position=position,
            on_opponent_outcome=self.announce_outcome,
            on_opponent_error=self.report_opponent_error,
        )

        if isinstance(outcome, MoveError):
            if battle is None:
                await i.response.send_message(NO_BATTLE_MESSAGE, ephemeral=True)
                return

            message = f"❌ **Invalid move:** {outcome.message}."
            if battle.session.is_participant(str(i.user.id)):
                remaining = battle.session.remaining_cards(str(i.user.id))
                message += f"\n\n**Your available battle cards:**\n{format_deck(remaining)}"
            await i.response.send_message(message, ephemeral=True)
            return

        assert battle is not None
        await i.response.send_message(
            f"✅ **Move submitted!** You played card #{card_id} in **{position}** position.",
            ephemeral=True,
        )
        await self.announce_outcome(battle, outcome)

    @app_commands.command(name="battle_status", description="Check the battle in this channel")
    async def battle_status(self, i: Interaction) -> None:
        channel_id = str(i.channel_id)
        battle = self.bot.registry.get(channel_id)
        if battle is None:
            await i.response.send_message(NO_BATTLE_MESSAGE, ephemeral=True)
            return

        await i.response.defer(ephemeral=True)

        viewer_id = str(i.user.id)
        is_participant = battle.session.is_participant(viewer_id)
        container = BattleStatusContainer(battle, viewer_id)
        if is_participant and self.service.retry_opponent_move(
            channel_id, self.announce_outcome, self.report_opponent_error
        ):
            container.add_item(ui.TextDisplay("-# 🔄 Your opponent was nudged to make a move."))

        view = ui.LayoutView()
        view.add_item(container)

        remaining = battle.session.remaining_cards(viewer_id) if is_participant else []
        if not settings.visual_cards or not remaining:
            await i.followup.send(view=view, ephemeral=True)
            return

        image = await generate_deck_image(remaining)
        container.add_item(ui.MediaGallery(discord.MediaGalleryItem("attachment://deck.png")))
        await i.followup.send(
            view=view,
            file=discord.File(io.BytesIO(image), filename="deck.png"),
            ephemeral=True,
        )

    @app_commands.command(name="forfeit", description="Give up the battle in this channel")
    async def forfeit(self, i: Interaction) -> None:
        channel_id = str(i.channel_id)
        battle = self.bot.registry.get(channel_id)
        if battle is None:
            await i.response.send_message(NO_BATTLE_MESSAGE, ephemeral=True)
            return
        if not battle.session.is_participant(str(i.user.id)):
            await i.response.send_message("You're not part of this battle!", ephemeral=True)
            return

        self.service.abandon(channel_id)
        winner = format_participant(battle, battle.session.opponent_of(str(i.user.id)))
        await i.response.send_message(
            f"🏳️ <@{i.user.id}> forfeited the battle. {winner} stands victorious!"
        )

    @app_commands.command(name="stats", description="Show your battle record")
    @app_commands.describe(player="Whose record to show, yours if left empty")
    async def stats(
        self, i: Interaction, player: discord.User | discord.Member | None = None
    ) -> None:
        target = player or i.user
        async with get_session() as session:
            service = BattleRecordService(session)
            stats = await service.get_player_stats(str(target.id))

        if stats.total == 0:
            await i.response.send_message(
                f"<@{target.id}> hasn't finished any battles yet.", ephemeral=True
            )
            return

        await i.response.send_message(
            f"## 📈 Battle Record for {target.display_name}\n"
            f"🏆 Wins: **{stats.wins}**\n"
            f"💀 Losses: **{stats.losses}**\n"
            f"🤝 Ties: **{stats.ties}**\n"
            f"Win rate: **{stats.win_rate:.0%}** over {stats.total} battles",
            ephemeral=True,
        )


async def setup(bot: CardGameBot) -> None:
    await bot.add_cog(BattleCog(bot))

from collections.abc import Sequence

import discord
from loguru import logger

from app.core.enums import Personality
from app.game.registry import ActiveBattle
from app.game.session import DECK_SIZE, MAX_ROUNDS
from app.schemas.battle import BattleResult, RoundResult
from app.schemas.card import CardData
from app.services.card import CardService
from bot import ui
from bot.types import Interaction
from bot.utils.db import get_session

RULES = (
    "### 📋 Battle Rules\n"
    "• Win 2 rounds, or lead after 3 rounds, to win the battle\n"
    "• **Attack vs Attack:** higher attack wins\n"
    "• **Attack vs Defense:** attack wins if Attack > Defense\n"
    "• **Defense vs Attack:** defense wins if Defense ≥ Attack\n"
    "• **Defense vs Defense:** tie, no points awarded"
)

PERSONALITY_EMOJIS = {
    Personality.AGGRESSIVE: "🔥",
    Personality.DEFENSIVE: "🛡️",
    Personality.BALANCED: "⚖️",
    Personality.SMART: "🧠",
    Personality.CHAOTIC: "🌀",
}


def format_participant(battle: ActiveBattle, participant_id: str) -> str:
    if battle.opponent is not None and participant_id == battle.opponent.id:
        return f"**{battle.opponent.name}**"
    return f"<@{participant_id}>"


def format_deck(cards: Sequence[CardData]) -> str:
    return "\n".join(
        f"• `[ID: {card.id}]` {card.name} (ATK {card.attack}, DEF {card.defense})"
        for card in cards
    )


def format_score(battle: ActiveBattle) -> str:
    session = battle.session
    player_a, player_b = session.participants
    return (
        f"{format_participant(battle, player_a)} **{session.score(player_a)}** - "
        f"**{session.score(player_b)}** {format_participant(battle, player_b)}"
    )


class ChallengeAccept(ui.Button["ChallengeView"]):
    def __init__(self) -> None:
        super().__init__(label="Accept Challenge", style=discord.ButtonStyle.green, emoji="⚔️")

    async def callback(self, i: Interaction) -> None:
        view = self.view
        if i.user.id != view.opponent_id:
            await i.response.send_message(
                "Only the challenged player can accept this challenge!", ephemeral=True
            )
            return

        async with get_session() as session:
            card_service = CardService(session)
            challenger_cards = await card_service.pick_battle_deck(str(view.challenger_id))
            opponent_cards = await card_service.pick_battle_deck(str(view.opponent_id))

        battle = i.client.battle_service.start_battle(
            channel_id=str(view.channel_id),
            player_a_id=str(view.challenger_id),
            player_a_cards=challenger_cards,
            player_b_id=str(view.opponent_id),
            player_b_cards=opponent_cards,
        )
        view.close(f"✅ <@{view.opponent_id}> accepted the challenge!")
        await i.response.edit_message(view=view)

        start_view = ui.LayoutView()
        start_view.add_item(BattleStartContainer(battle))
        await i.followup.send(view=start_view)


class ChallengeDecline(ui.Button["ChallengeView"]):
    def __init__(self) -> None:
        super().__init__(label="Decline", style=discord.ButtonStyle.secondary)

    async def callback(self, i: Interaction) -> None:
        view = self.view
        verb = "withdrew" if i.user.id == view.challenger_id else "declined"
        view.close(f"❌ <@{i.user.id}> {verb} the challenge.")
        await i.response.edit_message(view=view)


class ChallengeView(ui.LayoutView):
    def __init__(self, *, challenger_id: int, opponent_id: int, channel_id: int) -> None:
        super().__init__(
            timeout=300.0,
            user_ids={challenger_id, opponent_id},
            deny_message="This challenge isn't for you!",
        )
        self.challenger_id = challenger_id
        self.opponent_id = opponent_id
        self.channel_id = channel_id

        self.status = ui.TextDisplay(content="-# This challenge expires in 5 minutes.")
        self.add_item(
            ui.Container(
                ui.TextDisplay(
                    "# ⚔️ Battle Challenge\n"
                    f"<@{challenger_id}> challenges <@{opponent_id}> to a card battle!\n\n"
                    f"Each player battles with {DECK_SIZE} random cards from their collection."
                ),
                ui.TextDisplay(RULES),
                self.status,
                ui.ActionRow(ChallengeAccept(), ChallengeDecline()),
                accent_color=discord.Color.orange(),
            )
        )

    def close(self, status: str) -> None:
        self.status.content = status
        self.disable_actions()
        self.stop()

    async def on_timeout(self) -> None:
        logger.debug(f"Challenge from {self.challenger_id} to {self.opponent_id} expired")
        self.status.content = "⌛ This challenge has expired."
        await super().on_timeout()


class BattleStartContainer(ui.Container):
    def __init__(self, battle: ActiveBattle) -> None:
        session = battle.session
        player_a, player_b = session.participants

        header = (
            "# ⚔️ Battle Started! ⚔️\n"
            f"{format_participant(battle, player_a)} vs {format_participant(battle, player_b)}"
        )
        if battle.opponent is not None:
            emoji = PERSONALITY_EMOJIS[battle.opponent.personality]
            header += f"\n{emoji} Opponent personality: **{battle.opponent.personality}**"

        decks = (
            f"### {format_participant(battle, player_a)}'s Battle Cards\n"
            f"{format_deck(session.deck(player_a))}\n"
            f"### {format_participant(battle, player_b)}'s Battle Cards\n"
            f"{format_deck(session.deck(player_b))}"
        )

        super().__init__(
            ui.TextDisplay(header),
            ui.TextDisplay(decks),
            ui.Separator(),
            ui.TextDisplay(RULES),
            ui.TextDisplay(
                "### 🎯 How to Play\n"
                "Both players pick a card each round with `/play <card_id> <attack|defense>`. "
                "Moves stay secret until both are in. Use `/battle_status` to check the battle."
            ),
            accent_color=discord.Color.red(),
        )


class RoundResultContainer(ui.Container):
    def __init__(self, battle: ActiveBattle, round_result: RoundResult, next_round: int) -> None:
        if round_result.winner_id is None:
            winner = "🤝 Nobody scores this round."
        else:
            winner = f"🏆 {format_participant(battle, round_result.winner_id)} scores a point!"

        super().__init__(
            ui.TextDisplay(f"# Round {round_result.round_number} of {MAX_ROUNDS}"),
            ui.TextDisplay(round_result.description),
            ui.TextDisplay(f"{winner}\n**Score:** {format_score(battle)}"),
            ui.Separator(),
            ui.TextDisplay(f"-# Round {next_round} begins. Play your next card with `/play`."),
            accent_color=discord.Color.blurple(),
        )


class BattleCompleteContainer(ui.Container):
    def __init__(self, battle: ActiveBattle, result: BattleResult) -> None:
        final_round = result.rounds[-1]
        if result.winner_id is None:
            headline = "# 🤝 It's a Draw!"
        else:
            headline = f"# 🏆 {format_participant(battle, result.winner_id)} Wins!"

        rounds = "\n".join(
            f"Round {r.round_number}: "
            + ("tie" if r.winner_id is None else format_participant(battle, r.winner_id))
            for r in result.rounds
        )

        super().__init__(
            ui.TextDisplay(f"# Round {final_round.round_number} of {MAX_ROUNDS}"),
            ui.TextDisplay(final_round.description),
            ui.Separator(),
            ui.TextDisplay(headline),
            ui.TextDisplay(
                f"**Final score:** {format_score(battle)}\n"
                f"**Reason:** {result.end_reason}\n{rounds}"
            ),
            accent_color=discord.Color.gold(),
        )


class BattleStatusContainer(ui.Container):
    def __init__(self, battle: ActiveBattle, viewer_id: str) -> None:
        session = battle.session
        player_a, player_b = session.participants

        waiting = [
            format_participant(battle, pid)
            for pid in (player_a, player_b)
            if not session.has_pending_move(pid)
        ]
        content = (
            f"**Round:** {session.current_round} of {MAX_ROUNDS}\n"
            f"**Score:** {format_score(battle)}\n"
            f"**Waiting for:** {', '.join(waiting) or 'nobody'}"
        )

        super().__init__(
            ui.TextDisplay("# 📊 Battle Status"),
            ui.TextDisplay(content),
            accent_color=discord.Color.blurple(),
        )

        if session.is_participant(viewer_id):
            remaining = session.remaining_cards(viewer_id)
            self.add_item(
                ui.TextDisplay(
                    f"### Your Remaining Cards\n{format_deck(remaining) or 'No cards left.'}"
                )
            )

import discord
from discord import ui

from bot.types import Interaction
from bot.utils.error_handler import error_handler

__all__ = (
    "ActionRow",
    "Button",
    "Container",
    "Item",
    "LayoutView",
    "MediaGallery",
    "Separator",
    "TextDisplay",
)

type Item = Button | Container | TextDisplay | MediaGallery | Separator


class Button[V: LayoutView](ui.Button):
    view: V


class Container[V: LayoutView](ui.Container):
    view: V


class TextDisplay(ui.TextDisplay):
    pass


class MediaGallery(ui.MediaGallery):
    pass


class Separator(ui.Separator):
    pass


class ActionRow(ui.ActionRow):
    @property
    def disabled(self) -> bool:
        return all(item.disabled for item in self.children if isinstance(item, ui.Button))

    @disabled.setter
    def disabled(self, value: bool) -> None:
        for item in self.children:
            if isinstance(item, ui.Button):
                item.disabled = value


class LayoutView(ui.LayoutView):
    """Layout view that can be limited to a set of users.

    Interactions from anyone outside ``user_ids`` get ``deny_message`` as an ephemeral reply.
    """

    message: discord.Message | None = None

    def __init__(
        self,
        *,
        timeout: float | None = 180.0,
        user_ids: set[int] | None = None,
        deny_message: str = "This isn't for you!",
    ) -> None:
        super().__init__(timeout=timeout)
        self.user_ids = user_ids
        self.deny_message = deny_message

    async def interaction_check(self, i: Interaction) -> bool:
        if self.user_ids is not None and i.user.id not in self.user_ids:
            await i.response.send_message(self.deny_message, ephemeral=True)
            return False
        return True

    def disable_actions(self) -> None:
        for item in self.walk_children():
            if isinstance(item, ActionRow):
                item.disabled = True

    async def on_timeout(self) -> None:
        self.disable_actions()

        if self.message is not None:
            await self.message.edit(view=self)

    async def on_error(self, i: Interaction, error: Exception, _item: ui.Item) -> None:
        return await error_handler(i, error)

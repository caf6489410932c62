from collections.abc import Sequence
from enum import StrEnum

from discord import ButtonStyle

from bot import ui
from bot.types import Interaction

__all__ = ("PaginatorView",)


class PageJump(StrEnum):
    FIRST = "⏮️"
    PREVIOUS = "◀️"
    NEXT = "▶️"
    LAST = "⏭️"


class PageButton(ui.Button["PaginatorView"]):
    def __init__(self, jump: PageJump, *, disabled: bool) -> None:
        super().__init__(style=ButtonStyle.primary, emoji=jump.value, disabled=disabled)
        self.jump = jump

    async def callback(self, i: Interaction) -> None:
        view = self.view
        last_page = len(view.containers) - 1

        match self.jump:
            case PageJump.FIRST:
                view.current_page = 0
            case PageJump.PREVIOUS:
                view.current_page = max(0, view.current_page - 1)
            case PageJump.NEXT:
                view.current_page = min(last_page, view.current_page + 1)
            case PageJump.LAST:
                view.current_page = last_page

        await view.update_container(i)


class PageInfoButton(ui.Button["PaginatorView"]):
    def __init__(self, *, page: int, total_pages: int) -> None:
        super().__init__(
            style=ButtonStyle.secondary, label=f"{page + 1} / {total_pages}", disabled=True
        )


class PaginationControls(ui.ActionRow):
    def __init__(self, view: "PaginatorView") -> None:
        on_first = view.current_page == 0
        on_last = view.current_page == len(view.containers) - 1
        super().__init__(
            PageButton(PageJump.FIRST, disabled=on_first),
            PageButton(PageJump.PREVIOUS, disabled=on_first),
            PageInfoButton(page=view.current_page, total_pages=len(view.containers)),
            PageButton(PageJump.NEXT, disabled=on_last),
            PageButton(PageJump.LAST, disabled=on_last),
        )


class PaginatorView(ui.LayoutView):
    def __init__(self, containers: Sequence[ui.Container], *, author_id: int) -> None:
        super().__init__(
            timeout=300.0, user_ids={author_id}, deny_message="This isn't your collection!"
        )

        self.containers = containers
        self.current_page = 0
        self._render()

    def _render(self) -> None:
        self.clear_items()
        self.add_item(self.containers[self.current_page])
        if len(self.containers) > 1:
            self.add_item(PaginationControls(self))

    async def update_container(self, i: Interaction) -> None:
        self._render()
        await i.response.edit_message(view=self)

    async def start(self, i: Interaction, *, ephemeral: bool = False) -> None:
        if i.response.is_done():
            self.message = await i.followup.send(view=self, ephemeral=ephemeral, wait=True)
        else:
            await i.response.send_message(view=self, ephemeral=ephemeral)
            self.message = await i.original_response()

from discord import Interaction, app_commands
from fastapi import HTTPException
from loguru import logger

from app.services.card_generation import CardGenerationError

GENERIC_ERROR_MESSAGE = "An error occurred while processing your command. Please try again later."


async def error_handler(i: Interaction, error: Exception) -> None:
    e = error.original if isinstance(error, app_commands.CommandInvokeError) else error

    if isinstance(e, HTTPException):
        message = str(e.detail)
    elif isinstance(e, CardGenerationError):
        message = f"❌ {e}"
    elif isinstance(e, app_commands.CheckFailure):
        message = str(e) or "You can't use this command here."
    else:
        logger.opt(exception=e).error(f"Unexpected error in interaction {i.id}")
        message = GENERIC_ERROR_MESSAGE

    if not i.response.is_done():
        await i.response.send_message(message, ephemeral=True)
    else:
        await i.followup.send(message, ephemeral=True)

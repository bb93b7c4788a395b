from aiogram import Bot

from src.config import settings
from src.telegram.bot import dp


async def start_polling() -> None:
    bot = Bot(token=settings.telegram_bot_token)
    try:
        await dp.start_polling(bot, drop_pending_updates=True)
    finally:
        await bot.session.close()

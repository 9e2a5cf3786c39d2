import asyncio
import logging
from logging.handlers import RotatingFileHandler

import discord
from discord import app_commands

from bot.commands.listings import ListingCommands
from config import settings
from core.session import BrowsingSession, QueryStateCache
from db.favorites import FavoriteStore
from db.store import store

log_dir = settings.log_dir
log_dir.mkdir(parents=True, exist_ok=True)

log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

logging.basicConfig(level=log_level, format=log_format)

file_handler = RotatingFileHandler(
    log_dir / "listing-browser.log",
    maxBytes=10 * 1024 * 1024,
    backupCount=5,
    encoding="utf-8",
)
file_handler.setFormatter(logging.Formatter(log_format))
file_handler.setLevel(log_level)
logging.getLogger().addHandler(file_handler)

log = logging.getLogger(__name__)


class ListingBrowserBot(discord.Client):
    def __init__(self):
        intents = discord.Intents.default()
        super().__init__(intents=intents)
        self.tree = app_commands.CommandTree(self)
        self.favorites = FavoriteStore(store)
        self.session = BrowsingSession(self.favorites)
        self.query_states = QueryStateCache()

    async def setup_hook(self) -> None:
        await store.connect()
        log.info("Database connected")

        await self.favorites.load()

        if await self.session.load(settings.dataset_source):
            log.info(f"Dataset ready: {len(self.session.dataset)} listings")

        self.tree.add_command(ListingCommands(self))

        await self.tree.sync()
        log.info("Commands synced")

    async def on_ready(self) -> None:
        log.info(f"Logged in as {self.user}")

    async def close(self) -> None:
        await self.favorites.flush()
        await store.close()
        await super().close()


async def main() -> None:
    if not settings.discord_bot_token:
        raise RuntimeError("DISCORD_BOT_TOKEN is not set")

    bot = ListingBrowserBot()
    async with bot:
        await bot.start(settings.discord_bot_token)


if __name__ == "__main__":
    asyncio.run(main())

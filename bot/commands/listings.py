from typing import TYPE_CHECKING

import discord
from discord import app_commands

from bot.views import DiscordSink
from core.filter import QueryState, SortMode

if TYPE_CHECKING:
    from bot.main import ListingBrowserBot

SORT_CHOICES = [
    app_commands.Choice(name="Default order", value=SortMode.DEFAULT.value),
    app_commands.Choice(name="Price: low to high", value=SortMode.PRICE_ASC.value),
    app_commands.Choice(name="Price: high to low", value=SortMode.PRICE_DESC.value),
    app_commands.Choice(name="Rating: high to low", value=SortMode.RATING_DESC.value),
]


@app_commands.guild_install()
@app_commands.allowed_contexts(guilds=True, dms=True, private_channels=True)
class ListingCommands(app_commands.Group):
    def __init__(self, bot: "ListingBrowserBot"):
        super().__init__(name="listings", description="Browse rental listings")
        self.bot = bot

    @app_commands.command(name="show", description="Search and sort listings")
    @app_commands.describe(
        search="Text to find in name, host, neighborhood or description",
        sort="Sort order",
        favorites_only="Only show favorited listings",
    )
    @app_commands.choices(sort=SORT_CHOICES)
    async def show(
        self,
        interaction: discord.Interaction,
        search: str = "",
        sort: str = SortMode.DEFAULT.value,
        favorites_only: bool = False,
    ) -> None:
        try:
            await interaction.response.defer(ephemeral=True)
        except discord.NotFound:
            return

        state = QueryState(text=search, sort=SortMode(sort), favorites_only=favorites_only)
        self.bot.query_states.remember(interaction.user.id, state)

        sink = DiscordSink(interaction, self.bot.session, state)
        await self.bot.session.refresh(state, sink)

    @app_commands.command(name="favorite", description="Toggle a listing as favorite")
    @app_commands.describe(listing_id="Listing ID (shown in the result footer)")
    async def favorite(self, interaction: discord.Interaction, listing_id: str) -> None:
        try:
            await interaction.response.defer(ephemeral=True)
        except discord.NotFound:
            return

        session = self.bot.session
        listing_id = listing_id.strip()
        if not any(item.id == listing_id for item in session.dataset):
            await interaction.followup.send(f"Listing `{listing_id}` not found")
            return

        state = self.bot.query_states.get(interaction.user.id)
        sink = DiscordSink(interaction, session, state)
        await session.toggle_favorite(listing_id, state, sink)

    @app_commands.command(name="status", description="Show dataset and favorites status")
    async def status(self, interaction: discord.Interaction) -> None:
        try:
            await interaction.response.defer(ephemeral=True)
        except discord.NotFound:
            return

        session = self.bot.session
        embed = discord.Embed(
            title="Listing Browser",
            description=session.status,
            color=discord.Color.red() if session.error else discord.Color.green(),
        )
        embed.add_field(name="Listings", value=str(len(session.dataset)), inline=True)
        embed.add_field(name="Favorites", value=str(len(session.favorites.favorites)), inline=True)
        embed.add_field(name="Display Cap", value=str(session.cap), inline=True)

        try:
            await interaction.followup.send(embed=embed)
        except discord.NotFound:
            pass

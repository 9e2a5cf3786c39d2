import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import discord

from core.filter import QueryState
from core.projection import DisplayRecord
from core.sink import PresentationSink

if TYPE_CHECKING:
    from core.session import BrowsingSession

log = logging.getLogger(__name__)

EMBEDS_PER_MESSAGE = 10
MAX_EMBED_CHARS_PER_MESSAGE = 6000
VIEW_TIMEOUT_SECONDS = 600
MAX_LABEL_LEN = 80


def _http_url(url: str | None) -> str | None:
    if url and url.startswith(("http://", "https://")):
        return url
    return None


def format_amenities(record: DisplayRecord) -> str:
    if not record.amenities:
        return "None listed"
    text = ", ".join(record.amenities)
    if record.more_amenities > 0:
        text += f" +{record.more_amenities} more"
    return text[:1024]


def build_embed(record: DisplayRecord) -> discord.Embed:
    embed = discord.Embed(
        title=record.name[:256],
        url=_http_url(record.listing_url),
        description=record.description[:4096] or None,
        color=discord.Color.red() if record.is_favorite else discord.Color.blurple(),
    )
    price = f"{record.price_label} / night" if record.price_label else "—"
    embed.add_field(name="Price", value=price, inline=True)
    if record.rating_label:
        embed.add_field(name="Rating", value=f"⭐ {record.rating_label}", inline=True)
    if record.is_superhost:
        embed.add_field(name="Superhost", value="Yes", inline=True)
    if record.neighborhood:
        embed.add_field(name="Neighborhood", value=f"📍 {record.neighborhood}"[:1024], inline=False)
    embed.add_field(name="Amenities", value=format_amenities(record), inline=False)

    embed.set_author(name=f"Host: {record.host_name}"[:256], icon_url=_http_url(record.host_thumbnail_url))
    picture = _http_url(record.picture_url)
    if picture:
        embed.set_thumbnail(url=picture)
    embed.set_footer(text=f"ID {record.listing_id}")
    return embed


def paginate(
    records: Sequence[DisplayRecord],
) -> list[tuple[int, list[DisplayRecord], list[discord.Embed]]]:
    """Split records into messages within Discord's embed count and size limits.

    Returns ``(offset, records, embeds)`` per message.
    """
    pages = []
    offset = 0
    page: list[DisplayRecord] = []
    embeds: list[discord.Embed] = []
    size = 0
    for index, record in enumerate(records):
        embed = build_embed(record)
        embed_size = len(embed)
        if embeds and (
            len(embeds) >= EMBEDS_PER_MESSAGE or size + embed_size > MAX_EMBED_CHARS_PER_MESSAGE
        ):
            pages.append((offset, page, embeds))
            offset, page, embeds, size = index, [], [], 0
        page.append(record)
        embeds.append(embed)
        size += embed_size
    if embeds:
        pages.append((offset, page, embeds))
    return pages


class FavoriteButton(discord.ui.Button):
    def __init__(self, record: DisplayRecord, index: int):
        label = f"{'♥' if record.is_favorite else '♡'} {record.name}"[:MAX_LABEL_LEN]
        super().__init__(
            style=discord.ButtonStyle.danger if record.is_favorite else discord.ButtonStyle.secondary,
            label=label,
            custom_id=f"fav:{index}:{record.listing_id}"[:100],
        )
        self.listing_id = record.listing_id

    async def callback(self, interaction: discord.Interaction) -> None:
        view = self.view
        if not isinstance(view, ListingPageView):
            return
        try:
            await interaction.response.defer()
        except discord.NotFound:
            return
        sink = DiscordSink(interaction, view.session, view.state)
        await view.session.toggle_favorite(self.listing_id, view.state, sink)


class ListingPageView(discord.ui.View):
    """Favorite toggle and open-listing buttons for one page of results."""

    def __init__(
        self,
        records: Sequence[DisplayRecord],
        session: "BrowsingSession",
        state: QueryState,
        offset: int = 0,
    ):
        super().__init__(timeout=VIEW_TIMEOUT_SECONDS)
        self.session = session
        self.state = state
        for index, record in enumerate(records, start=offset):
            self.add_item(FavoriteButton(record, index))
            url = _http_url(record.listing_url)
            if url:
                self.add_item(
                    discord.ui.Button(
                        style=discord.ButtonStyle.link,
                        label=f"Open: {record.name}"[:MAX_LABEL_LEN],
                        url=url,
                    )
                )


class DiscordSink(PresentationSink):
    def __init__(self, interaction: discord.Interaction, session: "BrowsingSession", state: QueryState):
        self.interaction = interaction
        self.session = session
        self.state = state

    async def _send(self, **kwargs) -> bool:
        try:
            await self.interaction.followup.send(ephemeral=True, **kwargs)
            return True
        except discord.NotFound:
            log.debug("Interaction expired before results were sent")
            return False
        except discord.HTTPException as e:
            log.error(f"Failed to send listings: {e}")
            return False

    async def show_status(self, message: str) -> None:
        await self._send(content=message)

    async def present(self, records: Sequence[DisplayRecord], status: str) -> None:
        if not records:
            await self._send(content=status)
            return

        for offset, page, embeds in paginate(records):
            kwargs = {"content": status} if offset == 0 else {}
            view = ListingPageView(page, self.session, self.state, offset=offset)
            sent = await self._send(embeds=embeds, view=view, **kwargs)
            if not sent:
                return

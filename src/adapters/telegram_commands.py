"""Operator chat commands served by the Telethon bot client.

Handlers only parse arguments and format replies; the work is done by
core.operators.OperatorService.
"""

from __future__ import annotations

import logging
from typing import Optional

from telethon import Button, events

from adapters.notification_formatting import (
    MENU_ADD_FILTER,
    MENU_ADD_PAIR,
    MENU_GET_ID,
    MENU_LIST_FILTERS,
    MENU_LIST_PAIRS,
    MENU_ROWS,
    MENU_STATS,
    MENU_TOGGLE_ALL,
    format_created,
    format_filters,
    format_forwarding,
    format_pairing,
    format_stats,
    format_topics,
    parse_toggle_payload,
    toggle_button_label,
    toggle_payload,
)
from core.errors import RelayError
from core.models import RelayPairing
from core.operators import OperatorService

LOGGER = logging.getLogger(__name__)

USAGE_ADDPAIR = "⚠️ Usage: /addpair @source @target [topicId]"
USAGE_ADDFILTER = "⚠️ Usage: /addfilter word"
USAGE_REMOVEFILTER = "⚠️ Usage: /removefilter word"
USAGE_LISTTOPICS = "⚠️ Usage: /listtopics @yourgroup"
USAGE_GETID = "⚠️ Usage: /getid @channel"
ADMINS_ONLY = "⚠️ Admins only"

MENU_TEXTS = {label for row in MENU_ROWS for label in row}


def command_args(text: str) -> list[str]:
    """Split a command message into its arguments, dropping the command."""

    return text.split()[1:]


def parse_addpair_args(args: list[str]) -> tuple[str, str, Optional[int]]:
    if len(args) < 2:
        raise ValueError(USAGE_ADDPAIR)
    topic_id: Optional[int] = None
    if len(args) > 2:
        try:
            topic_id = int(args[2])
        except ValueError as exc:
            raise ValueError(USAGE_ADDPAIR) from exc
    return args[0], args[1], topic_id


def main_keyboard() -> list[list[Button]]:
    return [[Button.text(label, resize=True) for label in row] for row in MENU_ROWS]


def pairing_buttons(pairing: RelayPairing) -> list[list[Button]]:
    return [[Button.inline(toggle_button_label(pairing), toggle_payload(pairing))]]


def _command(name: str) -> events.NewMessage:
    return events.NewMessage(pattern=rf"^/{name}(?:@\w+)?(?:\s|$)")


def register_commands(bot, operators: OperatorService) -> None:
    """Attach every operator command handler to the bot client."""

    async def _require_admin(event) -> bool:
        if operators.is_admin(event.sender_id):
            return True
        await event.reply(ADMINS_ONLY)
        return False

    async def _send_pairings(event) -> None:
        pairings = operators.pairings()
        if not pairings:
            await event.respond("📭 No pairings")
            return
        for pairing in pairings:
            await event.respond(format_pairing(pairing), buttons=pairing_buttons(pairing))

    async def _toggle_all(event) -> None:
        if not await _require_admin(event):
            return
        enabled = operators.toggle_forwarding()
        await event.respond(format_forwarding(enabled), buttons=main_keyboard())

    @bot.on(_command("start"))
    async def on_start(event) -> None:
        await event.respond("👋 Welcome!", buttons=main_keyboard())

    @bot.on(_command("menu"))
    async def on_menu(event) -> None:
        await event.respond("Main menu:", buttons=main_keyboard())

    @bot.on(_command("addpair"))
    async def on_addpair(event) -> None:
        if not await _require_admin(event):
            return
        try:
            source_ref, target_ref, topic_id = parse_addpair_args(command_args(event.raw_text))
        except ValueError as exc:
            await event.reply(str(exc))
            return
        try:
            pairing = await operators.add_pairing(source_ref, target_ref, topic_id)
        except RelayError as exc:
            await event.reply(f"❌ Could not create pairing: {exc}")
            return
        await event.respond(format_created(pairing), buttons=main_keyboard())

    @bot.on(_command("listpairs"))
    async def on_listpairs(event) -> None:
        await _send_pairings(event)

    @bot.on(_command("toggleall"))
    async def on_toggleall(event) -> None:
        await _toggle_all(event)

    @bot.on(_command("addfilter"))
    async def on_addfilter(event) -> None:
        if not await _require_admin(event):
            return
        args = command_args(event.raw_text)
        if not args:
            await event.reply(USAGE_ADDFILTER)
            return
        try:
            word = operators.add_filter(args[0])
        except RelayError as exc:
            await event.reply(f"⚠️ {exc}")
            return
        await event.respond(f"✅ Added: {word}", buttons=main_keyboard())

    @bot.on(_command("removefilter"))
    async def on_removefilter(event) -> None:
        if not await _require_admin(event):
            return
        args = command_args(event.raw_text)
        if not args:
            await event.reply(USAGE_REMOVEFILTER)
            return
        try:
            word = operators.remove_filter(args[0])
        except RelayError as exc:
            await event.reply(f"⚠️ {exc}")
            return
        await event.respond(f"🗑️ Removed: {word}", buttons=main_keyboard())

    @bot.on(_command("listfilters"))
    async def on_listfilters(event) -> None:
        await event.respond(format_filters(operators.list_filters()), buttons=main_keyboard())

    @bot.on(_command("stats"))
    async def on_stats(event) -> None:
        await event.respond(format_stats(operators.stats_summary()), buttons=main_keyboard())

    @bot.on(_command("listtopics"))
    async def on_listtopics(event) -> None:
        args = command_args(event.raw_text)
        if not args:
            await event.reply(USAGE_LISTTOPICS)
            return
        try:
            chat_id, topics = await operators.list_topics(args[0])
        except RelayError as exc:
            await event.reply(f"❌ Could not fetch topics: {exc}")
            return
        await event.respond(format_topics(chat_id, topics))

    @bot.on(_command("getid"))
    async def on_getid(event) -> None:
        args = command_args(event.raw_text)
        if not args:
            await event.reply(USAGE_GETID)
            return
        try:
            chat_id = await operators.resolve(args[0])
        except RelayError:
            await event.reply("❌ Lookup failed. Check the username.")
            return
        await event.respond(f"🆔 ID: `{chat_id}`", parse_mode="md")

    @bot.on(events.CallbackQuery(pattern=rb"^toggle_"))
    async def on_toggle(event) -> None:
        if not operators.is_admin(event.sender_id):
            await event.answer(ADMINS_ONLY)
            return
        try:
            pairing = operators.toggle_pairing(parse_toggle_payload(event.data))
        except (ValueError, RelayError):
            await event.answer("❌ Pairing not found")
            return
        await event.edit(format_pairing(pairing), buttons=pairing_buttons(pairing))
        await event.answer("✅ Enabled" if pairing.enabled else "⛔ Disabled")

    @bot.on(events.NewMessage(func=lambda e: (e.raw_text or "") in MENU_TEXTS))
    async def on_menu_entry(event) -> None:
        text = event.raw_text
        if text == MENU_ADD_PAIR:
            if await _require_admin(event):
                await event.respond(USAGE_ADDPAIR)
        elif text == MENU_LIST_PAIRS:
            await _send_pairings(event)
        elif text == MENU_ADD_FILTER:
            await event.respond(USAGE_ADDFILTER)
        elif text == MENU_LIST_FILTERS:
            await event.respond(format_filters(operators.list_filters()), buttons=main_keyboard())
        elif text == MENU_TOGGLE_ALL:
            await _toggle_all(event)
        elif text == MENU_STATS:
            await event.respond(format_stats(operators.stats_summary()), buttons=main_keyboard())
        elif text == MENU_GET_ID:
            await event.respond(USAGE_GETID)

    LOGGER.info("Operator commands registered")

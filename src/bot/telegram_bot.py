"""
Mejoras Tracker — Telegram Bot.

Telegram is the only user interface. Every interaction (managing mejoras,
checking off today's tasks, stats) flows through this bot, and the bot's
job queue drives the periodic expiry tick.

Security-first: unauthorized users are silently ignored.
"""

from __future__ import annotations

import logging
import sys
from datetime import date
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Coroutine

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove, Update
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    filters,
)
from telegram.helpers import escape_markdown

from src.config import settings
from src.core.limits import format_limit, time_str_to_minutes
from src.data.models import NO_LIMIT, LimitWindow, TaskStatus, Window
from src.ports.repository_port import StorageError

if TYPE_CHECKING:
    from src.core.tracker import TrackerService
    from src.data.models import Instance, Template

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Security: silent-ignore decorator
# ---------------------------------------------------------------------------


def authorized_only(
    func: Callable[..., Coroutine[Any, Any, Any]],
) -> Callable[..., Coroutine[Any, Any, Any]]:
    """Decorator that silently ignores messages from unauthorized users.

    Does NOT send any response to strangers — the bot must not reveal
    its existence to unauthorized users.
    """

    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Any:
        user = update.effective_user
        if user is None or user.id not in settings.ALLOWED_USER_IDS:
            uid = user.id if user else "unknown"
            logger.warning("Unauthorized access attempt from user_id=%s", uid)
            return None  # Silent ignore
        return await func(update, context)

    return wrapper


def _tracker(context: ContextTypes.DEFAULT_TYPE) -> TrackerService:
    return context.bot_data["tracker"]


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------

_NO_LIMIT_WORDS = {"none", "no", "-", "sin limite", "sin límite", "unlimited"}

_DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

_DAY_ALIASES = {
    "sun": 0, "dom": 0,
    "mon": 1, "lun": 1,
    "tue": 2, "mar": 2,
    "wed": 3, "mie": 3, "mié": 3,
    "thu": 4, "jue": 4,
    "fri": 5, "vie": 5,
    "sat": 6, "sab": 6, "sáb": 6,
}

_DAY_GROUPS = {
    "weekdays": frozenset({1, 2, 3, 4, 5}),
    "weekends": frozenset({0, 6}),
}

_EVERY_DAY_WORDS = {"all", "every day", "everyday", "daily", "todos"}

_NEVER_WORDS = {"never", "nunca", "no", "-"}


def _parse_gain(text: str) -> float | None:
    """Parse a gain like '0.5', '+1', '-2%' or '1,5'. Returns None if invalid."""
    cleaned = text.strip().rstrip("%").replace(",", ".").strip()
    try:
        return float(cleaned)
    except ValueError:
        return None


def _parse_limit_input(text: str) -> LimitWindow | None:
    """Parse 'none' or 'HH:MM-HH:MM' typed by the user. Returns None if invalid."""
    text = text.strip().lower()
    if text in _NO_LIMIT_WORDS:
        return NO_LIMIT
    if "-" not in text:
        return None
    start_str, end_str = (p.strip() for p in text.split("-", 1))
    start = time_str_to_minutes(start_str)
    end = time_str_to_minutes(end_str)
    if start is None or end is None or end <= start:
        return None
    return Window(start=start, end=end)


def _parse_days(text: str) -> frozenset[int] | None:
    """Parse a weekday selection.

    Returns None for every day, otherwise the set of weekday indices
    (0 = Sunday). Accepts names ('mon,wed,fri', 'lun mie vie'), digits
    0-6, 'weekdays' and 'weekends'. Raises ValueError if unreadable.
    """
    text = text.strip().lower()
    if text in _EVERY_DAY_WORDS:
        return None
    if text in _DAY_GROUPS:
        return _DAY_GROUPS[text]

    days: set[int] = set()
    for token in text.replace(",", " ").split():
        if token.isdigit() and 0 <= int(token) <= 6:
            days.add(int(token))
        elif token[:3] in _DAY_ALIASES:
            days.add(_DAY_ALIASES[token[:3]])
        else:
            raise ValueError(f"Unknown day: {token!r}")
    if not days:
        raise ValueError("No days given")
    if len(days) == 7:
        return None
    return frozenset(days)


def _parse_end_date(text: str) -> str | None:
    """Parse 'never' or a YYYY-MM-DD date. Raises ValueError if unreadable."""
    text = text.strip().lower()
    if text in _NEVER_WORDS:
        return None
    return date.fromisoformat(text).isoformat()


def _md(text: str) -> str:
    """Escape user text for legacy Markdown messages."""
    return escape_markdown(text, version=1)


def _format_days(recurrence: frozenset[int] | None) -> str:
    if recurrence is None:
        return "every day"
    if not recurrence:
        return "no days"
    return ", ".join(_DAY_NAMES[d] for d in sorted(recurrence))


def _format_template(tpl: Template) -> str:
    line = (
        f"`{tpl.id}` — {_md(tpl.title)} ({tpl.gain:+g}%)\n"
        f"    {format_limit(tpl.limits)} · {_format_days(tpl.recurrence)}"
    )
    if tpl.end_date:
        line += f" · until {tpl.end_date}"
    return line


_STATUS_ICONS = {
    TaskStatus.PENDING: "⏳",
    TaskStatus.COMPLETED: "✅",
    TaskStatus.FAILED: "❌",
}


def _format_task(inst: Instance) -> str:
    limit = format_limit(inst.limits)
    return (
        f"{_STATUS_ICONS[inst.status]} `{inst.id}` {_md(inst.title)} "
        f"({inst.gain:+g}%) — {limit}"
    )


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start — welcome message."""
    await update.message.reply_text(
        "Welcome to *Mejoras Tracker*!\n\n"
        "Define the habits you want to improve and check them off every day:\n"
        "• Use /addmejora to create a recurring mejora\n"
        "• Use /today to see today's tasks and mark them done\n"
        "• Use /stats to see your accumulated gain\n\n"
        "Type /help for the full command list.",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help — list available commands."""
    await update.message.reply_text(
        "*Available commands:*\n"
        "/today — Today's tasks\n"
        "/done <id> — Mark a task as completed\n"
        "/stats — Total and today's gain\n"
        "/mejoras — List all mejoras\n"
        "/addmejora — Add a recurring mejora\n"
        "/editmejora <id> <field> <value> — Edit title, gain, limit, days or end\n"
        "/deletemejora — Delete a mejora (its history is kept)\n"
        "/help — Show this message",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_today(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /today — show today's tasks with buttons for pending ones."""
    tracker = _tracker(context)

    try:
        today = tracker.today()
        tasks = tracker.daily_tasks(today)
        stats = tracker.stats(today)
    except StorageError as exc:
        logger.error("/today storage error: %s", exc)
        await update.message.reply_text("Couldn't load today's tasks. Please try again later.")
        return

    if not tasks:
        await update.message.reply_text("No tasks for today. Add one with /addmejora.")
        return

    pending = [t for t in tasks if t.status is TaskStatus.PENDING]
    finished = [t for t in tasks if t.status is not TaskStatus.PENDING]

    lines = [f"*Tasks for {today}:*\n"]
    lines.extend(_format_task(t) for t in pending + finished)
    lines.append(f"\nToday: {stats.today_gain:+.2f}% · Total: {stats.cumulative_gain:+.2f}%")

    keyboard = [
        [InlineKeyboardButton(f"✅ {t.title}", callback_data=f"done:{t.id}")]
        for t in pending
    ]
    await update.message.reply_text(
        "\n".join(lines),
        parse_mode="Markdown",
        reply_markup=InlineKeyboardMarkup(keyboard) if keyboard else None,
    )


def _completion_message(task_id: int, inst: Instance | None) -> str:
    if inst is None:
        return f"Task {task_id} not found. Use /today to see valid IDs."
    if inst.status is TaskStatus.FAILED:
        return f"❌ '*{_md(inst.title)}*' already failed and can't be completed."
    return f"✅ '*{_md(inst.title)}*' completed! {inst.gain:+g}%"


@authorized_only
async def cmd_done(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /done <id> — mark a task as completed."""
    args = context.args
    if not args:
        await update.message.reply_text("Usage: /done <task_id>\nUse /today to see IDs.")
        return

    try:
        task_id = int(args[0])
    except ValueError:
        await update.message.reply_text("Invalid task ID. Use /today to see valid IDs.")
        return

    try:
        inst = _tracker(context).complete_task(task_id)
    except StorageError as exc:
        logger.error("/done storage error: %s", exc)
        await update.message.reply_text(f"Couldn't complete task {task_id}. Please try again.")
        return

    await update.message.reply_text(_completion_message(task_id, inst), parse_mode="Markdown")


async def _handle_done_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Handle the inline button tap to complete a task."""
    query = update.callback_query
    await query.answer()

    # Verify the user is authorized
    user = query.from_user
    if user is None or user.id not in settings.ALLOWED_USER_IDS:
        return

    task_id = int(query.data.split(":")[1])

    try:
        inst = _tracker(context).complete_task(task_id)
    except StorageError as exc:
        logger.error("done callback storage error: %s", exc)
        await query.edit_message_text("Something went wrong. Please try again.")
        return

    await query.edit_message_text(_completion_message(task_id, inst), parse_mode="Markdown")


@authorized_only
async def cmd_stats(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /stats — accumulated and today's gain."""
    try:
        stats = _tracker(context).stats()
    except StorageError as exc:
        logger.error("/stats storage error: %s", exc)
        await update.message.reply_text("Couldn't load stats. Please try again.")
        return

    await update.message.reply_text(
        f"*Total gain:* {stats.cumulative_gain:+.2f}%\n"
        f"*Today:* {stats.today_gain:+.2f}%",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_mejoras(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /mejoras — list all mejoras."""
    try:
        templates = _tracker(context).list_templates()
    except StorageError as exc:
        logger.error("/mejoras storage error: %s", exc)
        await update.message.reply_text("Couldn't load mejoras. Please try again.")
        return

    if not templates:
        await update.message.reply_text("No mejoras yet. Add one with /addmejora.")
        return

    lines = ["*Mejoras:*\n"]
    lines.extend(_format_template(t) for t in templates)
    await update.message.reply_text("\n".join(lines), parse_mode="Markdown")


# ---------------------------------------------------------------------------
# /addmejora conversation
# ---------------------------------------------------------------------------

(
    MEJORA_TITLE,
    MEJORA_GAIN,
    MEJORA_LIMIT,
    MEJORA_DAYS,
    MEJORA_END,
    MEJORA_CONFIRM,
) = range(6)


@authorized_only
async def cmd_addmejora(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handle /addmejora — start mejora creation conversation."""
    await update.message.reply_text("What's the mejora? (e.g., 'Leer Libro')")
    return MEJORA_TITLE


async def addmejora_title(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive title, ask for gain."""
    title = update.message.text.strip()
    if not title:
        await update.message.reply_text("Please enter a title.")
        return MEJORA_TITLE
    context.user_data["mejora_title"] = title
    keyboard = ReplyKeyboardMarkup(
        [["0.5", "1", "2"]],
        one_time_keyboard=True,
        resize_keyboard=True,
    )
    await update.message.reply_text(
        "How much gain (%) does completing it give?",
        reply_markup=keyboard,
    )
    return MEJORA_GAIN


async def addmejora_gain(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive gain, ask for the time limit."""
    gain = _parse_gain(update.message.text)
    if gain is None:
        await update.message.reply_text("Please enter a number (e.g., 0.5).")
        return MEJORA_GAIN
    context.user_data["mejora_gain"] = gain
    keyboard = ReplyKeyboardMarkup(
        [["None"], ["08:00-09:00", "20:00-21:00"]],
        one_time_keyboard=True,
        resize_keyboard=True,
    )
    await update.message.reply_text(
        "Time window? Type 'none' or a range like '08:00-09:00'.\n"
        "Pending tasks fail once the window closes.",
        reply_markup=keyboard,
    )
    return MEJORA_LIMIT


async def addmejora_limit(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive time limit, ask for weekdays."""
    limits = _parse_limit_input(update.message.text)
    if limits is None:
        await update.message.reply_text(
            "I couldn't understand that. Type 'none' or a range like '08:00-09:00'."
        )
        return MEJORA_LIMIT
    context.user_data["mejora_limits"] = limits
    keyboard = ReplyKeyboardMarkup(
        [["All", "Weekdays", "Weekends"]],
        one_time_keyboard=True,
        resize_keyboard=True,
    )
    await update.message.reply_text(
        "Which days? Pick an option or list them (e.g., 'mon,wed,fri').",
        reply_markup=keyboard,
    )
    return MEJORA_DAYS


async def addmejora_days(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive weekdays, ask for end date."""
    try:
        recurrence = _parse_days(update.message.text)
    except ValueError:
        await update.message.reply_text(
            "I couldn't understand that. Try 'all', 'weekdays' or 'mon,wed,fri'."
        )
        return MEJORA_DAYS
    context.user_data["mejora_recurrence"] = recurrence
    keyboard = ReplyKeyboardMarkup(
        [["Never"]],
        one_time_keyboard=True,
        resize_keyboard=True,
    )
    await update.message.reply_text(
        "Until when? Type 'never' or a date (YYYY-MM-DD).",
        reply_markup=keyboard,
    )
    return MEJORA_END


async def addmejora_end(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive end date, show summary and ask for confirmation."""
    try:
        end_date = _parse_end_date(update.message.text)
    except ValueError:
        await update.message.reply_text("Please type 'never' or a date like 2026-12-31.")
        return MEJORA_END
    context.user_data["mejora_end_date"] = end_date

    lines = [
        f"*New mejora '{_md(context.user_data['mejora_title'])}':*\n",
        f"  Gain: {context.user_data['mejora_gain']:+g}%",
        f"  Limit: {format_limit(context.user_data['mejora_limits'])}",
        f"  Days: {_format_days(context.user_data['mejora_recurrence'])}",
        f"  Ends: {end_date or 'never'}",
        "\nConfirm?",
    ]
    keyboard = ReplyKeyboardMarkup(
        [["Yes", "No"]],
        one_time_keyboard=True,
        resize_keyboard=True,
    )
    await update.message.reply_text(
        "\n".join(lines), parse_mode="Markdown", reply_markup=keyboard,
    )
    return MEJORA_CONFIRM


async def addmejora_confirm(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handle user confirmation — save the mejora and sync today's tasks."""
    answer = update.message.text.strip().lower()
    if answer not in ("yes", "y", "si", "sí"):
        await update.message.reply_text(
            "Mejora creation cancelled.", reply_markup=ReplyKeyboardRemove(),
        )
        _clear_mejora_data(context)
        return ConversationHandler.END

    try:
        tpl = _tracker(context).add_template(
            title=context.user_data["mejora_title"],
            gain=context.user_data["mejora_gain"],
            limits=context.user_data["mejora_limits"],
            recurrence=context.user_data["mejora_recurrence"],
            end_date=context.user_data["mejora_end_date"],
        )
    except (StorageError, ValueError) as exc:
        logger.error("Failed to add mejora: %s", exc)
        await update.message.reply_text(
            "Sorry, couldn't save the mejora. Please try again.",
            reply_markup=ReplyKeyboardRemove(),
        )
        _clear_mejora_data(context)
        return ConversationHandler.END

    await update.message.reply_text(
        f"✅ Mejora *{_md(tpl.title)}* saved! See it in /today.",
        parse_mode="Markdown",
        reply_markup=ReplyKeyboardRemove(),
    )
    _clear_mejora_data(context)
    return ConversationHandler.END


async def addmejora_cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Cancel mejora creation."""
    _clear_mejora_data(context)
    await update.message.reply_text(
        "Mejora creation cancelled.", reply_markup=ReplyKeyboardRemove(),
    )
    return ConversationHandler.END


def _clear_mejora_data(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Remove all mejora-related keys from user_data."""
    keys = [
        "mejora_title", "mejora_gain", "mejora_limits",
        "mejora_recurrence", "mejora_end_date",
    ]
    for k in keys:
        context.user_data.pop(k, None)


# ---------------------------------------------------------------------------
# Editing and deleting mejoras
# ---------------------------------------------------------------------------


def _parse_edit(field: str, value: str) -> dict[str, Any]:
    """Turn '/editmejora' field/value into tracker changes. Raises ValueError."""
    field = field.lower()
    if field == "title":
        if not value.strip():
            raise ValueError("Title must not be empty")
        return {"title": value.strip()}
    if field == "gain":
        gain = _parse_gain(value)
        if gain is None:
            raise ValueError(f"Invalid gain: {value!r}")
        return {"gain": gain}
    if field == "limit":
        limits = _parse_limit_input(value)
        if limits is None:
            raise ValueError(f"Invalid limit: {value!r}")
        return {"limits": limits}
    if field == "days":
        return {"recurrence": _parse_days(value)}
    if field == "end":
        return {"end_date": _parse_end_date(value)}
    raise ValueError(f"Unknown field: {field!r}")


@authorized_only
async def cmd_editmejora(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /editmejora <id> <field> <value> — change one field of a mejora."""
    args = context.args
    if not args or len(args) < 3:
        await update.message.reply_text(
            "Usage: /editmejora <id> <field> <value>\n"
            "Fields: title, gain, limit, days, end"
        )
        return

    try:
        template_id = int(args[0])
        changes = _parse_edit(args[1], " ".join(args[2:]))
    except ValueError as exc:
        await update.message.reply_text(f"Couldn't edit: {exc}")
        return

    try:
        tpl = _tracker(context).update_template(template_id, **changes)
    except (StorageError, ValueError) as exc:
        logger.error("/editmejora error: %s", exc)
        await update.message.reply_text("Couldn't save the change. Please try again.")
        return

    if tpl is None:
        await update.message.reply_text(
            f"Mejora {template_id} not found. Use /mejoras to see IDs."
        )
        return

    await update.message.reply_text(
        f"✅ Updated:\n{_format_template(tpl)}", parse_mode="Markdown",
    )


@authorized_only
async def cmd_deletemejora(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /deletemejora — show mejoras as buttons to pick from."""
    try:
        templates = _tracker(context).list_templates()
    except StorageError as exc:
        logger.error("/deletemejora storage error: %s", exc)
        await update.message.reply_text("Couldn't load mejoras. Please try again.")
        return

    if not templates:
        await update.message.reply_text("No mejoras to delete.")
        return

    keyboard = [
        [InlineKeyboardButton(t.title, callback_data=f"delmejora:{t.id}")]
        for t in templates
    ]
    await update.message.reply_text(
        "Which mejora do you want to delete? Past tasks are kept.",
        reply_markup=InlineKeyboardMarkup(keyboard),
    )


async def _handle_deletemejora_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Handle the inline button tap to delete a mejora."""
    query = update.callback_query
    await query.answer()

    # Verify the user is authorized
    user = query.from_user
    if user is None or user.id not in settings.ALLOWED_USER_IDS:
        return

    template_id = int(query.data.split(":")[1])

    try:
        tracker = _tracker(context)
        tpl = tracker.get_template(template_id)
        if tpl is None or not tracker.delete_template(template_id):
            await query.edit_message_text("Mejora not found or already deleted.")
            return
    except StorageError as exc:
        logger.error("deletemejora callback error: %s", exc)
        await query.edit_message_text("Something went wrong. Please try again.")
        return

    await query.edit_message_text(
        f"✅ Mejora *{_md(tpl.title)}* deleted. Its past tasks are kept.",
        parse_mode="Markdown",
    )


# ---------------------------------------------------------------------------
# App builder
# ---------------------------------------------------------------------------


def build_app(tracker: TrackerService | None = None) -> Application:
    """Build and configure the Telegram Application with all handlers.

    Args:
        tracker: Tracker service. Defaults to one backed by the SQLite store.
    """
    app = ApplicationBuilder().token(settings.TELEGRAM_BOT_TOKEN).build()

    if tracker is None:
        from src.adapters.storage_factory import create_tracker
        tracker = create_tracker()

    app.bot_data["tracker"] = tracker

    # Commands
    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CommandHandler("today", cmd_today))
    app.add_handler(CommandHandler("done", cmd_done))
    app.add_handler(CommandHandler("stats", cmd_stats))
    app.add_handler(CommandHandler("mejoras", cmd_mejoras))
    app.add_handler(CommandHandler("editmejora", cmd_editmejora))
    app.add_handler(CommandHandler("deletemejora", cmd_deletemejora))
    app.add_handler(CallbackQueryHandler(_handle_done_callback, pattern=r"^done:\d+$"))
    app.add_handler(CallbackQueryHandler(_handle_deletemejora_callback, pattern=r"^delmejora:\d+$"))

    # /addmejora conversation handler
    _text = filters.TEXT & ~filters.COMMAND
    addmejora_conv = ConversationHandler(
        entry_points=[CommandHandler("addmejora", cmd_addmejora)],
        states={
            MEJORA_TITLE: [MessageHandler(_text, addmejora_title)],
            MEJORA_GAIN: [MessageHandler(_text, addmejora_gain)],
            MEJORA_LIMIT: [MessageHandler(_text, addmejora_limit)],
            MEJORA_DAYS: [MessageHandler(_text, addmejora_days)],
            MEJORA_END: [MessageHandler(_text, addmejora_end)],
            MEJORA_CONFIRM: [MessageHandler(_text, addmejora_confirm)],
        },
        fallbacks=[CommandHandler("cancel", addmejora_cancel)],
    )
    app.add_handler(addmejora_conv)

    _setup_tick_job(app, tracker)

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


async def run_tick(tracker: TrackerService) -> int:
    """One expiry pass. Storage errors are logged and left for the next tick."""
    try:
        return tracker.tick()
    except StorageError as exc:
        logger.error("Tick failed: %s", exc)
        return 0


def _setup_tick_job(app: Application, tracker: TrackerService) -> None:
    """Run the expiry tick at startup and then on a fixed interval."""

    async def _tick_job_callback(context: ContextTypes.DEFAULT_TYPE) -> None:
        await run_tick(tracker)

    app.job_queue.run_repeating(
        _tick_job_callback,
        interval=settings.TICK_INTERVAL_SECONDS,
        first=0,
        name="limit_check",
    )

    logger.info(
        "Limit check scheduled every %ds (%s)",
        settings.TICK_INTERVAL_SECONDS,
        settings.TIMEZONE,
    )


def main() -> None:
    """Entry point: verify storage, build the app and start polling."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting Mejoras Tracker bot...")

    from src.adapters.storage_factory import create_tracker

    try:
        tracker = create_tracker()
        tracker.verify_storage()
    except StorageError as exc:
        logger.error("Storage unavailable, not starting: %s", exc)
        sys.exit(1)

    app = build_app(tracker)
    app.run_polling()


if __name__ == "__main__":
    main()

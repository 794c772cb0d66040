"""
History handler module
Handles saved calculations: listing, clearing, CSV and Google Sheets export
"""

import os
from telebot import TeleBot
from telebot.types import Message, InlineKeyboardMarkup, InlineKeyboardButton, CallbackQuery
import logging

from commission_bot.config import HISTORY_PREVIEW
from commission_bot.fsm import fsm
from commission_bot.records import TIMESTAMP_FORMAT
from commission_bot.services import export
from commission_bot import sheets

logger = logging.getLogger(__name__)

# Bot instance
bot: TeleBot = None

def init_bot(bot_instance: TeleBot):
    """Initialize bot instance"""
    global bot
    bot = bot_instance
    register_handlers()

def register_handlers():
    """Register all handlers for this module"""
    bot.message_handler(commands=['history'])(handle_history)
    bot.callback_query_handler(func=lambda call: call.data == 'menu_history')(show_history_callback)
    bot.callback_query_handler(func=lambda call: call.data == 'history_export_csv')(export_csv)
    bot.callback_query_handler(func=lambda call: call.data == 'history_export_sheets')(export_sheets)
    bot.callback_query_handler(func=lambda call: call.data == 'history_clear')(ask_clear)
    bot.callback_query_handler(func=lambda call: call.data == 'history_clear_confirm')(clear_history)
    bot.callback_query_handler(func=lambda call: call.data == 'history_back')(show_history_callback)

def history_text(user_id: int, chat_id: int) -> str:
    """Render saved calculations, newest first"""
    records = fsm.get_history(user_id, chat_id)

    if not records:
        return "📚 <b>History</b>\n\nNo saved calculations"

    text = f"📚 <b>History ({len(records)})</b>\n\n"

    for i, record in enumerate(records[:HISTORY_PREVIEW], 1):
        text += f"{i}. {record.employee_name} ({record.employee_id})\n"
        text += f"   💰 Sales: {record.sales:,.2f}\n"
        text += f"   💵 Commission: {record.commission.total:,.2f}\n"
        text += f"   🕒 {record.timestamp.strftime(TIMESTAMP_FORMAT)}\n\n"

    hidden = len(records) - HISTORY_PREVIEW
    if hidden > 0:
        text += f"…and {hidden} more, export to see all"

    return text

def history_keyboard(has_records: bool) -> InlineKeyboardMarkup:
    """Build history actions keyboard"""
    keyboard = InlineKeyboardMarkup(row_width=1)
    if not has_records:
        keyboard.add(InlineKeyboardButton("🧮 New calculation", callback_data="calc_start"))
        return keyboard

    keyboard.add(InlineKeyboardButton("📄 Export CSV", callback_data="history_export_csv"))
    if sheets.sheets_enabled():
        keyboard.add(InlineKeyboardButton("📊 Append new to Google Sheets", callback_data="history_export_sheets"))
    keyboard.add(InlineKeyboardButton("🗑 Clear all", callback_data="history_clear"))
    return keyboard

def handle_history(message: Message):
    """Handle /history command"""
    records = fsm.get_history(message.from_user.id, message.chat.id)
    bot.send_message(
        message.chat.id,
        history_text(message.from_user.id, message.chat.id),
        reply_markup=history_keyboard(bool(records))
    )

def show_history_callback(call: CallbackQuery):
    """Show history in place of the current message"""
    bot.answer_callback_query(call.id)
    records = fsm.get_history(call.from_user.id, call.message.chat.id)
    bot.edit_message_text(
        history_text(call.from_user.id, call.message.chat.id),
        call.message.chat.id,
        call.message.message_id,
        reply_markup=history_keyboard(bool(records))
    )

def export_csv(call: CallbackQuery):
    """Export session history to CSV"""
    bot.answer_callback_query(call.id)
    records = fsm.get_history(call.from_user.id, call.message.chat.id)

    if not records:
        bot.send_message(call.message.chat.id, "📄 No saved calculations to export")
        return

    temp_path = None
    try:
        temp_path = export.write_history_csv(records)

        with open(temp_path, 'rb') as csvfile:
            bot.send_document(
                call.message.chat.id,
                csvfile,
                caption=f"📄 Commission history ({len(records)})",
                visible_file_name="commission_history.csv"
            )

    except Exception as e:
        logger.error(f"Error exporting CSV: {e}")
        bot.send_message(call.message.chat.id, "❌ Error exporting data")

    finally:
        if temp_path:
            os.unlink(temp_path)

def export_sheets(call: CallbackQuery):
    """Append records not exported yet to the Google Sheets worksheet"""
    if not sheets.sheets_enabled():
        bot.answer_callback_query(call.id, "❌ Google Sheets export is not configured")
        return

    bot.answer_callback_query(call.id)
    user_id, chat_id = call.from_user.id, call.message.chat.id

    if not fsm.get_history(user_id, chat_id):
        bot.send_message(chat_id, "📊 No saved calculations to export")
        return

    records = fsm.get_unexported(user_id, chat_id)
    if not records:
        bot.send_message(chat_id, "📊 All saved calculations are already in Google Sheets")
        return

    try:
        # Oldest first, so the sheet reads chronologically
        exported = sheets.append_records(list(reversed(records)))
        fsm.mark_exported(user_id, chat_id, records)
        bot.send_message(chat_id, f"✅ Exported {exported} records to Google Sheets")
    except Exception as e:
        logger.error(f"Error exporting to Google Sheets: {e}")
        bot.send_message(chat_id, "❌ Error exporting to Google Sheets")

def ask_clear(call: CallbackQuery):
    """Ask to confirm clearing the history"""
    bot.answer_callback_query(call.id)

    keyboard = InlineKeyboardMarkup(row_width=2)
    keyboard.add(
        InlineKeyboardButton("✅ Clear", callback_data="history_clear_confirm"),
        InlineKeyboardButton("⬅️ Back", callback_data="history_back")
    )

    bot.edit_message_text(
        "🗑 Remove all saved calculations?",
        call.message.chat.id,
        call.message.message_id,
        reply_markup=keyboard
    )

def clear_history(call: CallbackQuery):
    """Remove all saved calculations"""
    removed = fsm.clear_history(call.from_user.id, call.message.chat.id)
    bot.answer_callback_query(call.id, f"🗑 Removed {removed} records")
    bot.edit_message_text(
        history_text(call.from_user.id, call.message.chat.id),
        call.message.chat.id,
        call.message.message_id,
        reply_markup=history_keyboard(False)
    )

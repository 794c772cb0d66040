"""
Start handler module
Handles /start and /help commands and shows the main menu
"""

from telebot import TeleBot
from telebot.types import Message, InlineKeyboardMarkup, InlineKeyboardButton
import logging

from commission_bot.fsm import fsm
from commission_bot.services.commission import PRODUCTS

logger = logging.getLogger(__name__)

# Get bot instance from main module
bot: TeleBot = None

def init_bot(bot_instance: TeleBot):
    """Initialize bot instance"""
    global bot
    bot = bot_instance
    register_handlers()

def register_handlers():
    """Register all handlers for this module"""
    bot.message_handler(commands=['start'])(handle_start)
    bot.message_handler(commands=['help'])(handle_help)

def main_menu() -> InlineKeyboardMarkup:
    """Build main menu keyboard"""
    keyboard = InlineKeyboardMarkup(row_width=1)
    keyboard.add(
        InlineKeyboardButton("🧮 New calculation", callback_data="calc_start"),
        InlineKeyboardButton("📚 History", callback_data="menu_history")
    )
    return keyboard

def handle_start(message: Message):
    """Handle /start command"""
    user_id = message.from_user.id
    history = fsm.get_history(user_id, message.chat.id)

    text = "👋 <b>Sales commission calculator</b>\n\n"
    if history:
        text += f"Saved calculations in this session: {len(history)}\n\n"
    text += "Choose an action:"

    logger.info(f"User {user_id} opened main menu")
    bot.send_message(message.chat.id, text, reply_markup=main_menu())

def handle_help(message: Message):
    """Handle /help command"""
    prices = "\n".join(
        f"— {name.capitalize()}: {price:.2f} per unit, up to {limit} units"
        for name, price, limit in PRODUCTS
    )

    text = f"""ℹ️ <b>How it works</b>

Enter the employee ID, first and last name, then the number of units sold.

{prices}

Commission:
— 10% of the first 1000 of sales
— 15% of the next 800
— 20% of everything above 1800

/calculate — new calculation
/history — saved calculations
/cancel — cancel current calculation"""

    bot.reply_to(message, text)

"""
Calculator handler module
Handles the calculation form: employee identity, unit counts, result actions
"""

import os
from typing import Any, Dict, Optional
from telebot import TeleBot
from telebot.types import Message, InlineKeyboardMarkup, InlineKeyboardButton, CallbackQuery
import logging

from commission_bot.fsm import fsm, States
from commission_bot.records import CalculationRecord, create_record
from commission_bot.services import commission, export
from commission_bot.utils.validators import (
    validate_employee_id,
    validate_name_field,
    validate_unit_count,
    normalize_employee_id,
)

logger = logging.getLogger(__name__)

# Bot instance
bot: TeleBot = None

# Unit steps: state -> (product, next state)
UNIT_STEPS = {
    States.LOCKS: ('locks', States.STOCKS),
    States.STOCKS: ('stocks', States.BARRELS),
    States.BARRELS: ('barrels', None),
}

UNIT_ICONS = {
    'locks': '🔒',
    'stocks': '🪵',
    'barrels': '🛢',
}

FIRST_NAME_LABEL = "first name"
LAST_NAME_LABEL = "last name"

def init_bot(bot_instance: TeleBot):
    """Initialize bot instance"""
    global bot
    bot = bot_instance
    register_handlers()

def register_handlers():
    """Register all handlers for this module"""
    bot.message_handler(commands=['calculate'])(handle_calculate)
    bot.message_handler(commands=['cancel'])(handle_cancel)
    bot.callback_query_handler(func=lambda call: call.data == 'calc_start')(start_calculation)
    bot.callback_query_handler(func=lambda call: call.data.startswith('result_'))(handle_result_action)

    # Form answers only, commands fall through to their own handlers
    bot.message_handler(func=lambda message: _is_fsm_text_state(message), content_types=['text'])(handle_text_message)

def _is_fsm_text_state(message) -> bool:
    """Check whether the user is filling in the form"""
    if message.text and message.text.startswith('/'):
        return False
    user_state = fsm.get_state(message.from_user.id, message.chat.id)
    return user_state in States.TEXT_STATES

def question(state: str) -> str:
    """Prompt text for a form state"""
    if state == States.EMPLOYEE_ID:
        return "🆔 Enter employee ID (3-10 letters or digits):"
    if state == States.FIRST_NAME:
        return f"👤 Enter {FIRST_NAME_LABEL}:"
    if state == States.LAST_NAME:
        return f"👤 Enter {LAST_NAME_LABEL}:"

    product, _ = UNIT_STEPS[state]
    limit = commission.max_units(product)
    return f"{UNIT_ICONS[product]} Enter {product} sold ({commission.MIN_UNITS}-{limit}):"

def handle_calculate(message: Message):
    """Handle /calculate command"""
    begin_form(message.from_user.id, message.chat.id)

def start_calculation(call: CallbackQuery):
    """Start calculation from the main menu"""
    bot.answer_callback_query(call.id)
    begin_form(call.from_user.id, call.message.chat.id)

def begin_form(user_id: int, chat_id: int):
    """Reset the form and ask for the employee ID"""
    fsm.clear_state(user_id, chat_id)
    fsm.set_state(user_id, chat_id, States.EMPLOYEE_ID)
    bot.send_message(chat_id, question(States.EMPLOYEE_ID))

def handle_cancel(message: Message):
    """Handle /cancel command - cancel current calculation"""
    user_state = fsm.get_state(message.from_user.id, message.chat.id)

    if user_state:
        fsm.clear_state(message.from_user.id, message.chat.id)
        bot.reply_to(message, "❌ Calculation canceled")
        logger.info(f"User {message.from_user.id} canceled state: {user_state}")
    else:
        bot.reply_to(message, "No active calculation to cancel")

def handle_text_message(message: Message):
    """Dispatch a form answer by the current state"""
    user_state = fsm.get_state(message.from_user.id, message.chat.id)

    if user_state == States.EMPLOYEE_ID:
        process_employee_id(message)
    elif user_state == States.FIRST_NAME:
        process_name(message, FIRST_NAME_LABEL, 'first_name', States.LAST_NAME)
    elif user_state == States.LAST_NAME:
        process_name(message, LAST_NAME_LABEL, 'last_name', States.LOCKS)
    elif user_state in UNIT_STEPS:
        process_unit_count(message, user_state)

def _reject(message: Message, error: str, state: str):
    logger.warning(f"Rejected {state} from user {message.from_user.id}: {error}")
    bot.reply_to(message, f"❌ {error.capitalize()}. {question(state)}")

def _advance(message: Message, state: str):
    fsm.set_state(message.from_user.id, message.chat.id, state)
    bot.reply_to(message, question(state))

def process_employee_id(message: Message):
    """Process employee ID"""
    employee_id = normalize_employee_id(message.text or "")
    result = validate_employee_id(employee_id)

    if not result.is_valid:
        _reject(message, result.error, States.EMPLOYEE_ID)
        return

    fsm.set_data(message.from_user.id, message.chat.id, 'employee_id', employee_id)
    _advance(message, States.FIRST_NAME)

def process_name(message: Message, label: str, key: str, next_state: str):
    """Process first or last name"""
    text = message.text or ""
    result = validate_name_field(text, label)

    if not result.is_valid:
        _reject(message, result.error, fsm.get_state(message.from_user.id, message.chat.id))
        return

    fsm.set_data(message.from_user.id, message.chat.id, key, text.strip())
    _advance(message, next_state)

def process_unit_count(message: Message, state: str):
    """Process locks, stocks or barrels count"""
    product, next_state = UNIT_STEPS[state]
    text = message.text or ""
    result = validate_unit_count(text, commission.MIN_UNITS, commission.max_units(product))

    if not result.is_valid:
        _reject(message, result.error, state)
        return

    fsm.set_data(message.from_user.id, message.chat.id, product, int(float(text)))

    if next_state:
        _advance(message, next_state)
    else:
        show_result(message.chat.id, message.from_user.id)

def is_form_valid(data: Dict[str, Any]) -> bool:
    """Re-check every stored field before a result is saved or exported"""
    checks = [
        validate_employee_id(data.get('employee_id') or ""),
        validate_name_field(data.get('first_name') or "", FIRST_NAME_LABEL),
        validate_name_field(data.get('last_name') or "", LAST_NAME_LABEL),
    ]
    for product, _, limit in commission.PRODUCTS:
        value = data.get(product)
        checks.append(validate_unit_count("" if value is None else str(value), commission.MIN_UNITS, limit))

    return all(check.is_valid for check in checks)

def _build_record(data: Dict[str, Any]) -> Optional[CalculationRecord]:
    if not is_form_valid(data) or 'sales' not in data:
        return None

    return create_record(
        employee_id=data['employee_id'],
        first_name=data['first_name'],
        last_name=data['last_name'],
        locks=data['locks'],
        stocks=data['stocks'],
        barrels=data['barrels'],
        sales=data['sales'],
        commission=data['commission'],
    )

def show_result(chat_id: int, user_id: int):
    """Calculate and show sales and commission"""
    data = fsm.get_data(user_id, chat_id)

    sales = commission.compute_sales_amount(data['locks'], data['stocks'], data['barrels'])
    breakdown = commission.compute_commission(sales)
    fsm.update_data(user_id, chat_id, sales=sales, commission=breakdown)
    logger.info(f"Calculated for user {user_id}: sales={sales}, commission={breakdown.total}")

    text = f"""📋 <b>Result</b>

🆔 {data['employee_id']} — {data['first_name']} {data['last_name']}
🔒 Locks: {data['locks']}
🪵 Stocks: {data['stocks']}
🛢 Barrels: {data['barrels']}

💰 Total sales: {sales:,.2f}
💵 Commission: {breakdown.total:,.2f}
   T1: {breakdown.tier1:,.2f} | T2: {breakdown.tier2:,.2f} | T3: {breakdown.tier3:,.2f}"""

    keyboard = InlineKeyboardMarkup(row_width=2)
    keyboard.add(
        InlineKeyboardButton("💾 Save & New", callback_data="result_save"),
        InlineKeyboardButton("📄 Export report", callback_data="result_export"),
        InlineKeyboardButton("🗑 Discard", callback_data="result_discard")
    )

    fsm.set_state(user_id, chat_id, States.RESULT)
    bot.send_message(chat_id, text, reply_markup=keyboard)

def handle_result_action(call: CallbackQuery):
    """Handle result buttons"""
    user_state = fsm.get_state(call.from_user.id, call.message.chat.id)

    if user_state != States.RESULT:
        bot.answer_callback_query(call.id, "❌ No active calculation")
        return

    if call.data == 'result_save':
        save_and_new(call)
    elif call.data == 'result_export':
        export_report(call)
    else:
        discard_result(call)

def save_and_new(call: CallbackQuery):
    """Save result to history and start a new one for the same employee"""
    bot.answer_callback_query(call.id)
    user_id, chat_id = call.from_user.id, call.message.chat.id

    record = _build_record(fsm.get_data(user_id, chat_id))
    if record is None:
        logger.warning(f"Refused to save incomplete form for user {user_id}")
        fsm.clear_state(user_id, chat_id)
        bot.send_message(chat_id, "❌ Form data is incomplete, start again with /calculate")
        return

    fsm.add_record(user_id, chat_id, record)
    count = len(fsm.get_history(user_id, chat_id))

    bot.edit_message_text(
        f"✅ Saved! Commission: {record.commission.total:,.2f} (records: {count})",
        chat_id,
        call.message.message_id
    )

    # Keep employee identity, ask for new counts
    fsm.pop_data(user_id, chat_id, 'locks', 'stocks', 'barrels', 'sales', 'commission')
    fsm.set_state(user_id, chat_id, States.LOCKS)
    bot.send_message(chat_id, question(States.LOCKS))

def export_report(call: CallbackQuery):
    """Send current result as a CSV report"""
    bot.answer_callback_query(call.id)
    user_id, chat_id = call.from_user.id, call.message.chat.id

    record = _build_record(fsm.get_data(user_id, chat_id))
    if record is None:
        bot.send_message(chat_id, "❌ Form data is incomplete, start again with /calculate")
        return

    temp_path = None
    try:
        temp_path = export.write_report_csv(record)

        with open(temp_path, 'rb') as csvfile:
            bot.send_document(
                chat_id,
                csvfile,
                caption=f"📄 Report for {record.employee_id}",
                visible_file_name="report.csv"
            )

    except Exception as e:
        logger.error(f"Error exporting report: {e}")
        bot.send_message(chat_id, "❌ Error exporting report")

    finally:
        if temp_path:
            os.unlink(temp_path)

def discard_result(call: CallbackQuery):
    """Drop current result without saving"""
    bot.answer_callback_query(call.id)
    fsm.clear_state(call.from_user.id, call.message.chat.id)
    bot.edit_message_text("🗑 Calculation discarded", call.message.chat.id, call.message.message_id)

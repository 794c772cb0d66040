"""
Unit tests for history handler
Tests listing, clearing and exporting saved calculations
"""

import datetime
import os
import unittest
from unittest.mock import Mock, patch
from telebot.types import Message, User, Chat, CallbackQuery

from commission_bot.fsm import SimpleFSM
from commission_bot.handlers import history
from commission_bot.records import create_record
from commission_bot.services.commission import compute_commission, compute_sales_amount

USER_ID = 12345
CHAT_ID = 12345


def make_record(employee_id, locks=10, minute=0):
    sales = compute_sales_amount(locks, 10, 10)
    return create_record(
        employee_id, "Somchai", "Jaidee", locks, 10, 10, sales, compute_commission(sales),
        now=datetime.datetime(2024, 5, 1, 10, minute, 0)
    )


class TestHistoryHandler(unittest.TestCase):
    """Test cases for history handler functionality"""

    def setUp(self):
        self.fsm = SimpleFSM()
        self.mock_bot = Mock()
        self.mock_sheets = Mock()
        self.mock_sheets.sheets_enabled.return_value = True

        for target, value in (('fsm', self.fsm), ('bot', self.mock_bot), ('sheets', self.mock_sheets)):
            patcher = patch(f'commission_bot.handlers.history.{target}', value)
            patcher.start()
            self.addCleanup(patcher.stop)

        self.mock_user = Mock(spec=User)
        self.mock_user.id = USER_ID
        self.mock_chat = Mock(spec=Chat)
        self.mock_chat.id = CHAT_ID

        self.mock_call = Mock(spec=CallbackQuery)
        self.mock_call.id = "cb1"
        self.mock_call.from_user = self.mock_user
        self.mock_call.message = Mock()
        self.mock_call.message.chat = self.mock_chat
        self.mock_call.message.message_id = 7

    def save(self, *records):
        for record in records:
            self.fsm.add_record(USER_ID, CHAT_ID, record)

    def callbacks(self, keyboard):
        return [button.callback_data for row in keyboard.keyboard for button in row]

    def test_empty_history(self):
        self.assertIn("No saved calculations", history.history_text(USER_ID, CHAT_ID))
        self.assertEqual(self.callbacks(history.history_keyboard(False)), ["calc_start"])

    def test_history_lists_newest_first(self):
        self.save(make_record("EMP001", minute=1), make_record("EMP002", locks=20, minute=2))

        text = history.history_text(USER_ID, CHAT_ID)

        self.assertIn("History (2)", text)
        self.assertLess(text.index("EMP002"), text.index("EMP001"))
        self.assertIn("Sales: 1,450.00", text)
        self.assertIn("2024-05-01 10:02:00", text)

    @patch('commission_bot.handlers.history.HISTORY_PREVIEW', 2)
    def test_history_preview_limit(self):
        self.save(*(make_record(f"EMP00{i}", minute=i) for i in range(3)))

        text = history.history_text(USER_ID, CHAT_ID)

        self.assertNotIn("EMP000", text)
        self.assertIn("…and 1 more", text)

    def test_keyboard_with_sheets(self):
        self.assertEqual(
            self.callbacks(history.history_keyboard(True)),
            ["history_export_csv", "history_export_sheets", "history_clear"]
        )

    def test_keyboard_without_sheets(self):
        self.mock_sheets.sheets_enabled.return_value = False

        self.assertEqual(
            self.callbacks(history.history_keyboard(True)),
            ["history_export_csv", "history_clear"]
        )

    def test_history_command(self):
        mock_message = Mock(spec=Message)
        mock_message.from_user = self.mock_user
        mock_message.chat = self.mock_chat

        history.handle_history(mock_message)

        args, kwargs = self.mock_bot.send_message.call_args
        self.assertEqual(args[0], CHAT_ID)
        self.assertIn("No saved calculations", args[1])

    def test_export_csv_sends_and_removes_file(self):
        self.save(make_record("EMP001"))
        sent_paths = []
        self.mock_bot.send_document.side_effect = lambda chat_id, document, **kwargs: sent_paths.append(document.name)

        history.export_csv(self.mock_call)

        self.assertEqual(len(sent_paths), 1)
        self.assertFalse(os.path.exists(sent_paths[0]))
        self.assertEqual(
            self.mock_bot.send_document.call_args[1]['caption'], "📄 Commission history (1)"
        )

    def test_export_csv_without_records(self):
        history.export_csv(self.mock_call)

        self.mock_bot.send_document.assert_not_called()
        self.mock_bot.send_message.assert_called_once_with(CHAT_ID, "📄 No saved calculations to export")

    def test_export_sheets_oldest_first(self):
        first, second = make_record("EMP001", minute=1), make_record("EMP002", minute=2)
        self.save(first, second)
        self.mock_sheets.append_records.return_value = 2

        history.export_sheets(self.mock_call)

        self.mock_sheets.append_records.assert_called_once_with([first, second])
        self.mock_bot.send_message.assert_called_once_with(CHAT_ID, "✅ Exported 2 records to Google Sheets")

    def test_export_sheets_twice_does_not_duplicate(self):
        first = make_record("EMP001", minute=1)
        self.save(first)
        self.mock_sheets.append_records.return_value = 1

        history.export_sheets(self.mock_call)
        history.export_sheets(self.mock_call)

        self.mock_sheets.append_records.assert_called_once_with([first])
        self.mock_bot.send_message.assert_called_with(
            CHAT_ID, "📊 All saved calculations are already in Google Sheets"
        )

    def test_export_sheets_appends_only_new_records(self):
        first, second = make_record("EMP001", minute=1), make_record("EMP002", minute=2)
        self.save(first)
        history.export_sheets(self.mock_call)

        self.save(second)
        history.export_sheets(self.mock_call)

        self.assertEqual(
            self.mock_sheets.append_records.call_args_list[-1][0][0], [second]
        )

    def test_failed_sheets_export_is_retried_in_full(self):
        first = make_record("EMP001", minute=1)
        self.save(first)
        self.mock_sheets.append_records.side_effect = [RuntimeError("quota"), 1]

        history.export_sheets(self.mock_call)
        history.export_sheets(self.mock_call)

        self.assertEqual(self.mock_sheets.append_records.call_count, 2)
        self.assertEqual(self.mock_sheets.append_records.call_args[0][0], [first])

    def test_export_sheets_not_configured(self):
        self.mock_sheets.sheets_enabled.return_value = False
        self.save(make_record("EMP001"))

        history.export_sheets(self.mock_call)

        self.mock_sheets.append_records.assert_not_called()
        self.mock_bot.answer_callback_query.assert_called_once_with(
            "cb1", "❌ Google Sheets export is not configured"
        )

    def test_export_sheets_failure(self):
        self.save(make_record("EMP001"))
        self.mock_sheets.append_records.side_effect = RuntimeError("quota")

        history.export_sheets(self.mock_call)

        self.mock_bot.send_message.assert_called_once_with(CHAT_ID, "❌ Error exporting to Google Sheets")
        self.assertEqual(len(self.fsm.get_history(USER_ID, CHAT_ID)), 1)

    def test_clear_history(self):
        self.save(make_record("EMP001"), make_record("EMP002"))

        history.clear_history(self.mock_call)

        self.assertEqual(self.fsm.get_history(USER_ID, CHAT_ID), [])
        self.mock_bot.answer_callback_query.assert_called_once_with("cb1", "🗑 Removed 2 records")
        self.assertIn("No saved calculations", self.mock_bot.edit_message_text.call_args[0][0])

    def test_ask_clear_does_not_clear(self):
        self.save(make_record("EMP001"))

        history.ask_clear(self.mock_call)

        self.assertEqual(len(self.fsm.get_history(USER_ID, CHAT_ID)), 1)
        keyboard = self.mock_bot.edit_message_text.call_args[1]['reply_markup']
        self.assertEqual(self.callbacks(keyboard), ["history_clear_confirm", "history_back"])


if __name__ == '__main__':
    unittest.main()

"""
Own state management system (FSM)
Keeps the calculation form and the saved history of every chat session
"""

import logging
from typing import Dict, Any, List, Optional, Set
from dataclasses import dataclass, field

from commission_bot.records import CalculationRecord

logger = logging.getLogger(__name__)

@dataclass
class UserState:
    """Session state of a user in a chat"""
    state: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    # Newest first
    history: List[CalculationRecord] = field(default_factory=list)
    # Ids of records already appended to Google Sheets
    exported_ids: Set[str] = field(default_factory=set)

class SimpleFSM:
    """Simple state management system"""

    def __init__(self):
        # Storage: {user_id: {chat_id: UserState}}
        self._states: Dict[int, Dict[int, UserState]] = {}

    def _get_user_state(self, user_id: int, chat_id: int) -> UserState:
        """Get the user's state object"""
        if user_id not in self._states:
            self._states[user_id] = {}

        if chat_id not in self._states[user_id]:
            self._states[user_id][chat_id] = UserState()

        return self._states[user_id][chat_id]

    def set_state(self, user_id: int, chat_id: int, state: str):
        """Set the user's state"""
        user_state = self._get_user_state(user_id, chat_id)
        user_state.state = state
        logger.info(f"Set state for user {user_id} in chat {chat_id}: {state}")

    def get_state(self, user_id: int, chat_id: int) -> Optional[str]:
        """Get the user's current state"""
        user_state = self._get_user_state(user_id, chat_id)
        return user_state.state

    def clear_state(self, user_id: int, chat_id: int):
        """Clear the form state, the history is kept"""
        user_state = self._get_user_state(user_id, chat_id)
        user_state.state = None
        user_state.data.clear()
        logger.info(f"Cleared state for user {user_id} in chat {chat_id}")

    def set_data(self, user_id: int, chat_id: int, key: str, value: Any):
        """Set a form value"""
        user_state = self._get_user_state(user_id, chat_id)
        user_state.data[key] = value
        logger.debug(f"Set data for user {user_id} in chat {chat_id}: {key}={value}")

    def get_data(self, user_id: int, chat_id: int, key: str = None) -> Any:
        """Get form data, or a single value when key is given"""
        user_state = self._get_user_state(user_id, chat_id)
        if key is None:
            return user_state.data.copy()
        return user_state.data.get(key)

    def update_data(self, user_id: int, chat_id: int, **kwargs):
        """Update several form values"""
        user_state = self._get_user_state(user_id, chat_id)
        user_state.data.update(kwargs)
        logger.debug(f"Updated data for user {user_id} in chat {chat_id}: {kwargs}")

    def pop_data(self, user_id: int, chat_id: int, *keys: str):
        """Drop form values"""
        user_state = self._get_user_state(user_id, chat_id)
        for key in keys:
            user_state.data.pop(key, None)

    def add_record(self, user_id: int, chat_id: int, record: CalculationRecord):
        """Prepend a saved calculation to the session history"""
        user_state = self._get_user_state(user_id, chat_id)
        user_state.history.insert(0, record)
        logger.info(f"Saved record {record.id} for user {user_id} in chat {chat_id}")

    def get_history(self, user_id: int, chat_id: int) -> List[CalculationRecord]:
        """Get a copy of the session history, newest first"""
        user_state = self._get_user_state(user_id, chat_id)
        return list(user_state.history)

    def clear_history(self, user_id: int, chat_id: int) -> int:
        """Remove every saved record and return how many were removed"""
        user_state = self._get_user_state(user_id, chat_id)
        removed = len(user_state.history)
        user_state.history.clear()
        user_state.exported_ids.clear()
        logger.info(f"Cleared {removed} records for user {user_id} in chat {chat_id}")
        return removed

    def get_unexported(self, user_id: int, chat_id: int) -> List[CalculationRecord]:
        """Get history records not yet exported to Google Sheets, newest first"""
        user_state = self._get_user_state(user_id, chat_id)
        return [record for record in user_state.history if record.id not in user_state.exported_ids]

    def mark_exported(self, user_id: int, chat_id: int, records: List[CalculationRecord]):
        """Remember records appended to Google Sheets"""
        user_state = self._get_user_state(user_id, chat_id)
        user_state.exported_ids.update(record.id for record in records)

# Global FSM instance
fsm = SimpleFSM()

# State constants
class States:
    """State constants for the calculation form"""

    EMPLOYEE_ID = "employee_id"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    LOCKS = "locks"
    STOCKS = "stocks"
    BARRELS = "barrels"
    RESULT = "result"

    # Text input states in the order they are asked
    TEXT_STATES = [EMPLOYEE_ID, FIRST_NAME, LAST_NAME, LOCKS, STOCKS, BARRELS]

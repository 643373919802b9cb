# paylink/utils/keyboards.py
from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from ..constants import CANCEL_PROOF_CALLBACK, CONFIRM_CALLBACK_PREFIX

class Keyboards:
    @staticmethod
    def confirm_payment(link_id: int) -> InlineKeyboardMarkup:
        """Confirm button under a pending payment"""
        keyboard = [
            [InlineKeyboardButton("✅ Confirm payment", callback_data=f"{CONFIRM_CALLBACK_PREFIX}{link_id}")]
        ]
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def cancel() -> InlineKeyboardMarkup:
        keyboard = [[InlineKeyboardButton("🔙 Cancel", callback_data=CANCEL_PROOF_CALLBACK)]]
        return InlineKeyboardMarkup(keyboard)

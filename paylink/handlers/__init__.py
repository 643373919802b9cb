"""Telegram handlers"""
from .admin_handlers import AdminHandler
from .base_handler import BaseHandler
from .user_handlers import UserHandler

__all__ = [
    'AdminHandler',
    'BaseHandler',
    'UserHandler',
]

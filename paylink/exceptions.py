# paylink/exceptions.py
from typing import Optional


class PaylinkError(Exception):
    """Base class for expected domain failures"""


class NotFoundError(PaylinkError):
    """Referenced product or payment link does not exist"""

    def __init__(self, entity: str, key):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found")


class InvalidStateError(PaylinkError):
    """Operation is not allowed in the entity's current status"""

    def __init__(self, message: str, status: Optional[str] = None):
        self.status = status
        super().__init__(message)


class CodeAllocationError(PaylinkError):
    """No free unique code could be drawn within the configured attempts"""

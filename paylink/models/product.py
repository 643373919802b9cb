# paylink/models/product.py
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from .base import TimeStampedModel

class Product(TimeStampedModel):
    """Digital product offered through payment links"""
    name: str
    description: Optional[str] = None
    price: Decimal
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    is_active: bool = True

    @property
    def has_file(self) -> bool:
        return bool(self.file_url) and bool(self.file_name)


class ProductCreate(BaseModel):
    """Input for creating a product"""
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0)
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    is_active: bool = True


class ProductUpdate(BaseModel):
    """Partial product update.

    Only fields that were explicitly passed are applied; passing ``None`` for
    ``description``, ``file_url`` or ``file_name`` clears the stored value.
    """
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0)
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator('name', 'price', 'is_active')
    @classmethod
    def not_nullable(cls, value):
        if value is None:
            raise ValueError("field cannot be cleared")
        return value

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)

"""
Input validation schemas using Pydantic for request bodies.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from grocer.utilities.constants import (
    DEFAULT_PACKS_OWNED, DEFAULT_QUANTITY_PER_PACK, DEFAULT_REFILL_THRESHOLD
)


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class RegisterInput(BaseModel):
    """Schema for account registration."""
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
    password: str = Field(..., min_length=6)
    role: str = Field("consumer", pattern=r'^(consumer|shopkeeper)$')
    phone: str = ""

    @field_validator('name', 'email', 'phone')
    @classmethod
    def strip_whitespace(cls, v):
        return _strip(v)


class LoginInput(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class AddressInput(BaseModel):
    """Schema for a consumer delivery address."""
    flat: str = ""
    building: str = ""
    street: str = ""
    area: str = ""
    landmark: str = ""
    city: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., min_length=1, max_length=12)
    coordinates: Optional[List[float]] = None
    formatted_address: str = ""

    @field_validator('flat', 'building', 'street', 'area', 'landmark', 'city', 'pincode', 'formatted_address')
    @classmethod
    def strip_whitespace(cls, v):
        return _strip(v)

    @field_validator('city', 'pincode')
    @classmethod
    def required_not_blank(cls, v):
        if not v:
            raise ValueError('Field cannot be blank')
        return v

    @field_validator('coordinates')
    @classmethod
    def validate_coordinates(cls, v):
        """Coordinates are [longitude, latitude]."""
        if v is None or len(v) == 0:
            return None
        if len(v) != 2:
            raise ValueError('Coordinates must be a [longitude, latitude] pair')
        lng, lat = v
        if not (-180 <= lng <= 180 and -90 <= lat <= 90):
            raise ValueError('Coordinates out of range')
        return v


class PackCountInput(BaseModel):
    """Consumer's on-hand pack count; negative counts are clamped to zero."""
    current_packs: int

    @field_validator('current_packs')
    @classmethod
    def clamp(cls, v):
        return max(0, v)


class RefillStatusInput(BaseModel):
    status: str = Field(..., pattern=r'^(CONFIRMED|OUT_FOR_DELIVERY|DELIVERED)$')


class OrderStatusInput(BaseModel):
    status: str = Field(..., pattern=r'^(CONFIRMED|SHIPPED|DELIVERED|CANCELLED)$')


class CartItemInput(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1, le=1000)


class CartQuantityInput(BaseModel):
    """New quantity for a cart line; zero or less removes the line."""
    quantity: int


class TrackProductInput(BaseModel):
    """Schema for starting to track a shop product in the pantry."""
    product_id: str = Field(..., min_length=1)
    brand_name: str = ""
    quantity_per_pack: float = Field(DEFAULT_QUANTITY_PER_PACK, gt=0)
    packs_owned: int = Field(DEFAULT_PACKS_OWNED, ge=0)
    refill_threshold: int = Field(DEFAULT_REFILL_THRESHOLD, ge=0)

    @field_validator('brand_name')
    @classmethod
    def strip_whitespace(cls, v):
        return _strip(v)


class ProductInput(BaseModel):
    """Schema for a shop catalogue product."""
    name: str = Field(..., min_length=1, max_length=200)
    category: str = Field("others", max_length=100)
    price: float = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    unit: str = Field("", max_length=20)
    image: Optional[str] = None

    @field_validator('name', 'category', 'unit')
    @classmethod
    def strip_whitespace(cls, v):
        return _strip(v)


class StockInput(BaseModel):
    stock: int = Field(..., ge=0)


class ShopRegistrationInput(BaseModel):
    """Schema for a new shop awaiting registration payment."""
    name: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1)
    phone: str = ""
    delivery_radius: int = Field(5, gt=0, le=100)
    home_delivery: bool = False

    @field_validator('name', 'address', 'phone')
    @classmethod
    def strip_whitespace(cls, v):
        return _strip(v)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v:
            raise ValueError('Shop name is required')
        return v

    @field_validator('address')
    @classmethod
    def validate_address(cls, v):
        if not v:
            raise ValueError('Shop address is required for location services')
        return v


class PaymentVerificationInput(BaseModel):
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)


class PushTokenInput(BaseModel):
    token: str = Field(..., min_length=1)

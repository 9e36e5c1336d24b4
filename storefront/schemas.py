from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from decimal import Decimal
from datetime import datetime
from storefront.db.models import Role, OrderStatus, PaymentMethod


# --- users / auth ---
class RegisterPayload(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)

class LoginPayload(BaseModel):
    email: EmailStr
    password: str

class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)
    role: Optional[Role] = None

class UserRead(BaseModel):
    id: int
    username: str
    email: str
    role: Role
    created_at: datetime
    updated_at: datetime
    class Config: from_attributes = True

class TokenRead(BaseModel):
    token: str
    token_type: str = 'bearer'
    user: UserRead


# --- categories ---
class CategoryCreate(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    description: str = Field(default='', max_length=500)
    slug: str = Field(min_length=3, max_length=100, pattern=r'^[A-Za-z0-9]+$')

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    slug: Optional[str] = Field(default=None, min_length=3, max_length=100, pattern=r'^[A-Za-z0-9]+$')

class CategoryRead(BaseModel):
    id: int
    name: str
    description: str
    slug: str
    created_at: datetime
    updated_at: datetime
    class Config: from_attributes = True


# --- products ---
class ProductCreate(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    description: str = Field(default='', max_length=1000)
    price: Decimal = Field(gt=0, decimal_places=2)
    sku: str = Field(min_length=3, max_length=50)
    stock: int = Field(ge=0)
    category_id: int = Field(gt=0)
    images: List[str] = []

class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    sku: Optional[str] = Field(default=None, min_length=3, max_length=50)
    stock: Optional[int] = Field(default=None, ge=0)
    category_id: Optional[int] = Field(default=None, gt=0)
    images: Optional[List[str]] = None

class StockAdjust(BaseModel):
    quantity: int  # signed delta

class StockRead(BaseModel):
    product_id: int
    stock: int

class ProductRead(BaseModel):
    id: int
    name: str
    description: str
    price: Decimal
    sku: str
    stock: int
    category_id: int
    category: Optional[CategoryRead] = None
    images: List[str] = []
    created_at: datetime
    updated_at: datetime
    class Config: from_attributes = True


# --- orders ---
class OrderItemCreate(BaseModel):
    product_id: int = Field(gt=0)
    quantity: int = Field(gt=0)
    # accepted for compatibility; the order is always priced from the catalog
    price: Optional[Decimal] = Field(default=None, ge=0)

class AddOrderItem(BaseModel):
    product_id: int = Field(gt=0)
    quantity: int = Field(gt=0)
    price: Optional[Decimal] = Field(default=None, gt=0)

class ShippingInfoIn(BaseModel):
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    country: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)

class OrderCreate(BaseModel):
    items: List[OrderItemCreate]
    payment_method: PaymentMethod
    shipping_info: Optional[ShippingInfoIn] = None

class OrderUpdate(BaseModel):
    status: Optional[OrderStatus] = None
    payment_method: Optional[PaymentMethod] = None
    shipping_info: Optional[ShippingInfoIn] = None

class OrderStatusUpdate(BaseModel):
    status: OrderStatus

class ShippingInfoRead(BaseModel):
    id: int
    order_id: int
    address: str
    city: str
    state: str
    country: str
    postal_code: str
    phone_number: str
    created_at: datetime
    updated_at: datetime
    class Config: from_attributes = True

class OrderItemRead(BaseModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    price: Decimal
    product: Optional[ProductRead] = None
    created_at: datetime
    updated_at: datetime
    class Config: from_attributes = True

class OrderRead(BaseModel):
    id: int
    user_id: int
    user: Optional[UserRead] = None
    status: OrderStatus
    total_amount: Decimal
    payment_method: PaymentMethod
    items: List[OrderItemRead] = []
    shipping_info: Optional[ShippingInfoRead] = None
    created_at: datetime
    updated_at: datetime
    class Config: from_attributes = True

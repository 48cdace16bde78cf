from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Any, Dict
from datetime import datetime

ORDER_STATUSES = ("pending", "processing", "shipped", "completed", "delivered", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "completed", "failed", "refunded")
PROFILE_STATUSES = ("active", "inactive", "banned")

# Auth
class SignupRequest(BaseModel):
    email: str
    password: str
    full_name: Optional[str] = None
    phone: Optional[str] = None

class LoginRequest(BaseModel):
    email: str
    password: str

class AdminUserCreate(BaseModel):
    email: str
    password: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: str = "user"
    status: str = "active"

# Products
class ProductIn(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1)
    brand: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    image: Optional[str] = None
    discount: Optional[float] = Field(None, ge=0)
    featured: Optional[bool] = None
    condition: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    is_sale: Optional[bool] = None
    is_trending: Optional[bool] = None
    is_best_seller: Optional[bool] = None
    status: Optional[str] = None
    specifications: Optional[Dict[str, Any]] = None

class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    brand: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)
    image: Optional[str] = None
    discount: Optional[float] = Field(None, ge=0)
    featured: Optional[bool] = None
    condition: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    is_sale: Optional[bool] = None
    is_trending: Optional[bool] = None
    is_best_seller: Optional[bool] = None
    status: Optional[str] = None
    specifications: Optional[Dict[str, Any]] = None

# Orders
class OrderItemIn(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)
    price: float = Field(..., ge=0)
    name: Optional[str] = None
    image: Optional[str] = None

class OrderCreate(BaseModel):
    # totals come from the cart and are stored as sent
    user_id: Optional[str] = None
    total_amount: Optional[float] = None
    shipping_fee: float = 0
    payment_method: str = "cod"
    customer_name: Optional[str] = None
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = None
    shipping_address: Optional[str] = None
    notes: Optional[str] = None
    order_items: List[OrderItemIn] = []

class OrderStatusUpdate(BaseModel):
    status: Optional[str] = None
    payment_status: Optional[str] = None

# Profiles
class ProfileCreate(BaseModel):
    id: str
    email: EmailStr
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: str = "user"
    status: str = "active"

class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    last_login: Optional[datetime] = None

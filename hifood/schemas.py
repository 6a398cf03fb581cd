from pydantic import BaseModel, field_validator
from pydantic.config import ConfigDict
from typing import Any, List, Optional, Union


# Request bodies keep required fields optional so missing values surface as
# 400 from the domain layer rather than 422 from validation.

class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[Union[str, int]] = None
    password: Optional[str] = None

    @field_validator("phone")
    def phone_as_text(cls, v):
        # storefront forms may post the phone number as a JSON number
        return None if v is None else str(v)


class LoginRequest(BaseModel):
    email: Optional[str] = None
    phone: Optional[Union[str, int]] = None
    password: Optional[str] = None

    @field_validator("phone")
    def phone_as_text(cls, v):
        return None if v is None else str(v)


class GoogleLoginRequest(BaseModel):
    idToken: Optional[str] = None


class FacebookLoginRequest(BaseModel):
    accessToken: Optional[str] = None


class ProductFields(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Any] = None
    status: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None


class OrderItem(BaseModel):
    productId: Optional[str] = None
    quantity: Optional[Any] = 1

    # cart lines may carry name/price snapshots from the storefront
    model_config = ConfigDict(extra="allow")


class OrderCreate(BaseModel):
    items: Optional[List[OrderItem]] = None
    total: Optional[Any] = None
    customerName: Optional[str] = None
    note: Optional[str] = None
    address: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: Optional[str] = None


class CalcTotalRequest(BaseModel):
    items: Optional[List[OrderItem]] = None


class UserRead(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class UserProfile(UserRead):
    phone: Optional[str] = ""
    role: str = "user"
    createdAt: Optional[int] = None


class TotalRead(BaseModel):
    subtotal: int
    shipping: int
    total: int


class DashboardRead(BaseModel):
    totalRevenue: int
    orderCount: int
    productCount: int
    userCount: int

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


# Request model for creating a new customer (identifier is store-assigned)
class CustomerCreate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None


# Request model for a full replace of an existing customer
class CustomerUpdate(CustomerCreate):
    customer_id: int


class CustomerOut(CustomerUpdate):
    model_config = ConfigDict(from_attributes=True)


# Request model for creating a new product
class ProductCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    category: Optional[str] = None
    image_url: Optional[str] = None


class ProductUpdate(ProductCreate):
    product_id: int


class ProductOut(ProductUpdate):
    model_config = ConfigDict(from_attributes=True)


# Request model for user registration
class UserCreate(BaseModel):
    username: str
    email: str
    password: str


# Public view of a user; never carries the hash or salt
class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    created_at: Optional[datetime] = None


# Request model for user login; username may also be the account email
class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: str


class MessageResponse(BaseModel):
    message: str

# ecomerce/schemas.py
from datetime import date, datetime
from typing import Annotated, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, EmailStr, Field

Links = Dict[str, str]


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("no puede estar vacío")
    return value.strip()


# required text fields: present and not only whitespace
RequiredStr = Annotated[str, AfterValidator(_not_blank)]


# 👤 User
class UserBase(BaseModel):
    first_name: RequiredStr = Field(alias="nombre", max_length=100)
    last_name: RequiredStr = Field(alias="apellido", max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, alias="telefono", max_length=50)
    address: Optional[str] = Field(default=None, alias="direccion", max_length=255)
    registered_on: Optional[date] = Field(default=None, alias="fechaRegistro")
    birth_date: Optional[date] = Field(default=None, alias="fechaNacimiento")
    gender: Optional[str] = Field(default=None, alias="genero", max_length=30)

    class Config:
        populate_by_name = True


class UserCreate(UserBase):
    password: RequiredStr


class UserOut(UserBase):
    id: int
    registered_on: date = Field(alias="fechaRegistro")
    links: Links = Field(default_factory=dict, alias="_links")


# 🛍️ Product
class ProductBase(BaseModel):
    name: RequiredStr = Field(alias="nombreProducto", max_length=255)
    description: RequiredStr = Field(alias="descripcion")
    price: float = Field(alias="precio", ge=0)

    class Config:
        populate_by_name = True


class ProductCreate(ProductBase):
    # initial stock; adjust later through PUT /{id}/stock
    stock: int = Field(default=0, ge=0)


class ProductOut(ProductBase):
    id: int
    stock: int
    links: Links = Field(default_factory=dict, alias="_links")


# 🛒 Cart
class CartItemRequest(BaseModel):
    # quantity is checked by the cart workflow so a non-positive value is
    # reported the same way from every entry point
    product_id: int = Field(alias="productoId")
    quantity: int = Field(alias="cantidad")

    class Config:
        populate_by_name = True


class CartItemOut(BaseModel):
    id: int
    product_id: int = Field(alias="productoId")
    quantity: int = Field(alias="cantidad")
    product: Optional[ProductOut] = Field(default=None, alias="producto")
    links: Links = Field(default_factory=dict, alias="_links")

    class Config:
        populate_by_name = True


class CartOut(BaseModel):
    id: int
    user_id: int = Field(alias="usuarioId")
    items: List[CartItemOut]
    created_at: datetime = Field(alias="fechaCreacion")
    updated_at: Optional[datetime] = Field(default=None, alias="fechaActualizacion")
    links: Links = Field(default_factory=dict, alias="_links")

    class Config:
        populate_by_name = True


# 📊 Collections
class UserCollection(BaseModel):
    items: List[UserOut]
    links: Links = Field(default_factory=dict, alias="_links")

    class Config:
        populate_by_name = True


class ProductCollection(BaseModel):
    items: List[ProductOut]
    links: Links = Field(default_factory=dict, alias="_links")

    class Config:
        populate_by_name = True

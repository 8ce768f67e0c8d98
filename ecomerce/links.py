# ecomerce/links.py
"""Map ORM rows to response schemas and attach navigation links (``_links``)."""
from typing import Iterable

from fastapi import Request

from .models import Cart, CartItem, Product, User
from .schemas import (
    CartItemOut, CartOut, ProductCollection, ProductOut, UserCollection, UserOut,
)


def _url(request: Request, name: str, **params) -> str:
    return str(request.url_for(name, **params))


def user_out(request: Request, user: User) -> UserOut:
    return UserOut(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        phone=user.phone,
        address=user.address,
        registered_on=user.registered_on,
        birth_date=user.birth_date,
        gender=user.gender,
        links={
            "self": _url(request, "get_user", user_id=user.id),
            "usuarios": _url(request, "list_users"),
            "carrito": _url(request, "get_cart", user_id=user.id),
        },
    )


def user_collection(request: Request, users: Iterable[User]) -> UserCollection:
    return UserCollection(
        items=[user_out(request, u) for u in users],
        links={"self": _url(request, "list_users")},
    )


def product_out(request: Request, product: Product, with_links: bool = True) -> ProductOut:
    links = {}
    if with_links:
        links = {
            "self": _url(request, "get_product", product_id=product.id),
            "inventario": _url(request, "list_products"),
            "ajustarStock": _url(request, "adjust_product_stock", product_id=product.id),
        }
    return ProductOut(
        id=product.id,
        name=product.name,
        description=product.description,
        price=float(product.price),
        stock=product.stock,
        links=links,
    )


def product_collection(request: Request, products: Iterable[Product]) -> ProductCollection:
    return ProductCollection(
        items=[product_out(request, p) for p in products],
        links={"self": _url(request, "list_products")},
    )


def cart_item_out(request: Request, user_id: int, item: CartItem) -> CartItemOut:
    return CartItemOut(
        id=item.id,
        product_id=item.product_id,
        quantity=item.quantity,
        product=product_out(request, item.product, with_links=False) if item.product else None,
        links={
            "carrito": _url(request, "get_cart", user_id=user_id),
            "actualizarCantidad": _url(request, "update_cart_item", user_id=user_id, product_id=item.product_id),
            "eliminarItem": _url(request, "remove_cart_item", user_id=user_id, product_id=item.product_id),
        },
    )


def cart_out(request: Request, cart: Cart) -> CartOut:
    return CartOut(
        id=cart.id,
        user_id=cart.user_id,
        items=[cart_item_out(request, cart.user_id, it) for it in cart.items],
        created_at=cart.created_at,
        updated_at=cart.updated_at,
        links={
            "self": _url(request, "get_cart", user_id=cart.user_id),
            "agregarItem": _url(request, "add_cart_item", user_id=cart.user_id),
            "vaciarCarrito": _url(request, "clear_cart", user_id=cart.user_id),
        },
    )

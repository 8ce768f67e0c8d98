from fastapi import status


class ShopError(Exception):
    """Base for expected, non-fatal failures of a shop operation."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Solicitud inválida"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class NotFoundError(ShopError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Recurso no encontrado"


class UserNotFound(NotFoundError):
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"Usuario no encontrado con ID: {user_id}")


class ProductNotFound(NotFoundError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Producto no encontrado con ID: {product_id}")


class CartNotFound(NotFoundError):
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"El usuario {user_id} no tiene carrito")


class CartItemNotFound(NotFoundError):
    def __init__(self, user_id: int, product_id: int):
        self.user_id = user_id
        self.product_id = product_id
        super().__init__(f"El producto {product_id} no está en el carrito del usuario {user_id}")


class InvalidRequestError(ShopError):
    pass


class InsufficientStockError(InvalidRequestError):
    def __init__(self, product_id: int, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Stock insuficiente para el producto {product_id}: "
            f"solicitado {requested}, disponible {available}"
        )

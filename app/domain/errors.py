# app/domain/errors.py


class InventoryError(Exception):
    """Bazowy blad silnika rezerwacji."""


class NotFoundError(InventoryError):
    pass


class InsufficientStockError(InventoryError):
    def __init__(self, available: int):
        self.available = available
        super().__init__(f"Only {available} items available in stock")


class ConflictError(InventoryError):
    """Przegrany wyscig optimistic locking (0 rows affected)."""

    def __init__(self, message: str = "Concurrent modification, please try again"):
        super().__init__(message)


class StoreUnavailableError(InventoryError):
    pass


class InvalidStatusError(InventoryError):
    pass


class PartialRestoreFailure(InventoryError):
    """
    Zwrot stanu nie trafil do produktu (produkt usuniety).
    Nie jest rzucany do wolajacego - tylko logowany jako dryf magazynu.
    """

    def __init__(self, product_id: str, quantity: int, source: str):
        self.product_id = product_id
        self.quantity = quantity
        self.source = source
        super().__init__(
            f"Could not restore {quantity} units to missing item {product_id} ({source})"
        )

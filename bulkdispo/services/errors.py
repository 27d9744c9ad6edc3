"""
Erreurs du moteur de réservation / Booking engine errors.
Levées avant toute écriture, sauf StoreError / Raised before any write, except StoreError.
"""


class BookingError(Exception):
    """Erreur de base / Base error."""


class BookingValidationError(BookingError):
    """Entrée invalide, corrigible par l'appelant / Invalid input, recoverable by the caller."""


class DuplicateBookingError(BookingValidationError):
    def __init__(self, tour_id: int, order_id: int):
        super().__init__(
            f"Order {order_id} is already booked on tour {tour_id}; resize the existing booking instead"
        )
        self.tour_id = tour_id
        self.order_id = order_id


class StopNotFoundError(BookingValidationError):
    def __init__(self, tour_id: int, order_id: int):
        super().__init__(f"Order {order_id} has no booking on tour {tour_id}")
        self.tour_id = tour_id
        self.order_id = order_id


class InvalidTonnageError(BookingValidationError):
    def __init__(self, tonnage, rule: str = "must be greater than zero"):
        super().__init__(f"Tonnage {rule} (got {tonnage})")
        self.tonnage = tonnage


class RebookAmountError(BookingValidationError):
    """Déplacement supérieur à la réservation source / Moving more than the source booking carries."""

    def __init__(self, order_id: int, requested, available):
        super().__init__(
            f"Cannot move {requested} t of order {order_id}: only {available} t booked on the source tour"
        )
        self.requested = requested
        self.available = available


class InvalidPositionError(BookingValidationError):
    def __init__(self, position: int, stop_count: int):
        super().__init__(f"Position {position} is outside 1..{stop_count}")


class NotFoundError(BookingValidationError):
    """Entité absente du store / Entity missing from the store."""


class TourNotFoundError(NotFoundError):
    def __init__(self, tour_id: int):
        super().__init__(f"Tour {tour_id} not found")
        self.tour_id = tour_id


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class StoreError(BookingError):
    """Échec de lecture/écriture persistance / Persistence read or write failure."""

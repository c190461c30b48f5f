from dataclasses import dataclass

from fastapi import status


@dataclass(eq=False)
class OrderingError(Exception):
    message: str
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __str__(self) -> str:
        return self.message


class OrderValidationError(OrderingError):
    def __init__(self, message: str) -> None:
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST)


class OrderNotFoundError(OrderingError):
    def __init__(self, message: str = "Order not found") -> None:
        super().__init__(message=message, status_code=status.HTTP_404_NOT_FOUND)

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DeadlineClosed(ServiceError):
    """Result write attempted while no submission window is open."""

    def __init__(self, message: str = "Result submission deadline has passed or is not open yet") -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class ResultLocked(ServiceError):
    """Single-row write attempted on a locked result."""

    def __init__(self, message: str = "This result has been locked and cannot be modified") -> None:
        super().__init__(message, status.HTTP_423_LOCKED)


class InvalidMarksConfiguration(ServiceError):
    """Grade requested with total marks <= 0. Indicates unvalidated input reached the calculator."""

    def __init__(self, total: float) -> None:
        super().__init__(f"Total marks must be greater than zero (got {total})")
        self.total = total

from fastapi import status


class CampusEventsError(Exception):
    """Base for errors that map straight onto an HTTP response."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CampusEventsError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidStateError(CampusEventsError):
    pass


class CapacityExceededError(CampusEventsError):
    def __init__(self, message: str = "Event is full"):
        super().__init__(message)


class AlreadyRegisteredError(CampusEventsError):
    def __init__(self, message: str = "You are already registered for this event"):
        super().__init__(message)

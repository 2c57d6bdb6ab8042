"""Exceptions for aiobeefmote."""


class BeefmoteException(Exception):
    """Base exception for errors."""


class DuplicateCommandError(BeefmoteException):
    """Raised when two commands are registered with the same name."""


class InvalidArgumentError(BeefmoteException):
    """Raised by a command handler when its argument is missing or invalid."""

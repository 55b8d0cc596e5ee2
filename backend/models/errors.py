# backend/models/errors.py


class ChatError(Exception):
    """Base class for errors raised by the chat services."""


class NotFoundError(ChatError):
    pass


class BadRequestError(ChatError):
    pass

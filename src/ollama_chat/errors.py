"""Error taxonomy for chat turns and conversation management."""


class ConfigError(Exception):
    """Raised at start-up when required configuration cannot be resolved."""


class CompletionError(Exception):
    """Raised by the completion client on transport or protocol failure."""


class ChatError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class BadRequest(ChatError):
    status_code = 400


class SessionNotFound(ChatError):
    status_code = 404


class NamingFailed(ChatError):
    pass


class CompletionFailed(ChatError):
    pass


class PersistenceFailed(ChatError):
    pass


class TransactionFailed(ChatError):
    pass


class InvalidRole(ChatError):
    """A turn role outside of user/assistant reached prompt assembly."""

"""Domain exceptions for the status-check pipeline."""


class StatusBotError(Exception):
    """Base class for all status bot errors."""

    pass


class NavigationTimeout(StatusBotError):
    """Raised when the initial portal navigation exceeds its time bound."""

    pass


class UnknownPortal(StatusBotError):
    """Raised when no script or routine is registered for a URL."""

    pass


class OpcodeExecutionFailure(StatusBotError):
    """Raised when an opcode fails; aborts the rest of the script."""

    def __init__(self, line: int, token: str, cause: BaseException) -> None:
        super().__init__(f"Opcode {token!r} at line {line} failed: {cause}")
        self.line = line
        self.token = token
        self.cause = cause


class CredentialDecryptionFailure(StatusBotError):
    """Raised when a single credential field cannot be decrypted."""

    pass


class NoCredentialsFound(StatusBotError):
    """Raised when an alias matches no usable credential records."""

    pass


class AccountNotFound(NoCredentialsFound):
    """Raised when an alias matches no credential records at all."""

    pass


class IncompleteCredentials(NoCredentialsFound):
    """Raised when every matching record is missing a usable field."""

    pass


class DeliveryFailure(StatusBotError):
    """Raised when a message or image cannot be delivered."""

    pass


class HelperProcessFailure(StatusBotError):
    """Raised when an alternate-strategy helper exits non-zero or emits bad output."""

    pass

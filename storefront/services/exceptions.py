"""Exceptions raised by the storefront service modules."""


class Unavailable(RuntimeError):
    """The database could not be reached."""


class NoSuchUser(RuntimeError):
    """User does not exist."""


class EmailAlreadyExists(RuntimeError):
    """Another account already uses this e-mail address."""


class PasswordAuthenticationFailed(RuntimeError):
    """Password is not correct, or the account has no password."""


class InvalidToken(RuntimeError):
    """A verification or reset token is unknown, used or expired."""


class NoSuchResource(RuntimeError):
    """A catalog or account resource does not exist."""


class ResourceInUse(RuntimeError):
    """A resource cannot be deleted while other rows refer to it."""


class InvalidReference(RuntimeError):
    """A payload refers to something that does not exist in the store."""


class MailDeliveryFailed(RuntimeError):
    """The SMTP service did not accept the message."""


class AuthenticationFailed(RuntimeError):
    """Failed to authenticate user with provided credentials."""

import typing


class UploadableException(Exception):
    """
    Base exception class for all Uploadable-related errors.

    Carries an optional `detail` message which is appended to the
    positional arguments, mirroring how the errors are rendered in logs.
    """

    def __init__(
        self,
        *args: typing.Any,
        detail: str = "",
    ):
        self.detail = detail
        super().__init__(*(str(arg) for arg in args if arg), self.detail)

    def __repr__(self) -> str:
        if self.detail:
            return f"{type(self).__name__} - {self.detail}"
        return type(self).__name__

    def __str__(self) -> str:
        return "".join(self.args).strip()


class ImproperlyConfigured(UploadableException):
    """
    Raised when Uploadable is improperly configured.

    Configuration errors are fatal and are raised while a behavior is attached,
    never in the middle of a save.
    """


class InvalidStrategyError(ImproperlyConfigured):
    """
    Raised when a path processor, transformer or writer identifier cannot be
    resolved or does not satisfy the interface of its role.
    """


class InvalidStorageError(ImproperlyConfigured):
    """
    Raised when an invalid storage backend is configured.
    """


class UnknownColumnTypeError(ImproperlyConfigured):
    """
    Raised when a column is mapped to a logical type the table does not know.
    """


class PathResolutionError(UploadableException):
    """
    Raised when a destination path cannot be built, e.g. a template referencing
    the primary key is evaluated before the record has one.
    """


class FileOperationError(UploadableException):
    """
    Raised when a file operation cannot be carried out, e.g. reopening a file
    which is missing from its storage.
    """


class RecordNotSaved(UploadableException):
    """
    Raised by `Table.save_or_fail` when a save was vetoed, typically because a
    writer reported a failed output.
    """


class MetadataNotPersisted(UploadableException):
    """
    Raised when the file metadata produced after the initial insert could not be
    stored. This is the only chance to persist it, so it is never swallowed.
    """


class DeferredWriteFailed(MetadataNotPersisted):
    """
    Raised when a file whose path needs the primary key could not be written.
    The record is inserted already, the field keeps an empty value.
    """


class RecordNotFound(UploadableException):
    """
    Raised when a requested record is not found in the table.
    """


class SignalError(UploadableException):
    """
    Raised when a signal is misconfigured.
    """


class SuspiciousFileOperation(Exception):
    """
    Raised for suspicious file operations, typically path traversal attempts.
    """

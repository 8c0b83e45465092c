"""Custom exception hierarchy for instacheck."""


class InstacheckError(Exception):
    """Base exception for all instacheck errors."""


class ClassifierError(InstacheckError):
    """The classification call could not be made."""


class MissingCredentialError(ClassifierError):
    """No API credential is configured for the classifier."""


class ImportFileError(InstacheckError):
    """Failed to read usernames from a file."""


class UnsupportedFileError(ImportFileError):
    """File type is not a supported spreadsheet or CSV."""

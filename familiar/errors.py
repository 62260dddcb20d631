class FamiliarError(Exception):
    """Base class for errors reported to the user."""


class StorageError(FamiliarError):
    """A pet file could not be read, parsed or written."""


class PetNotFoundError(FamiliarError):
    """No pet files were found for the current directory or the home directory."""

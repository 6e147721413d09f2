# automount/core/exceptions.py


class AutoMountError(Exception):
    """Base class for all errors raised inside the mount agent."""


class MountError(AutoMountError):
    """Raised by a mount provider when a mount or unmount request fails."""

    def __init__(self, uri: str, message: str):
        self.uri = uri
        self.message = message
        super().__init__(f"{uri}: {message}")


class ProviderUnavailableError(MountError):
    """The mount subsystem could not even be asked (missing tool, spawn failure)."""


class MountFailedError(MountError):
    """The provider accepted the mount request but it failed."""


class UnmountFailedError(MountError):
    """The provider accepted the unmount request but it failed."""


class NotMountedError(MountError):
    """Unmount was requested for a URI without an active mount."""

    def __init__(self, uri: str, message: str = "Location is not mounted"):
        super().__init__(uri, message)


class AliasError(AutoMountError):
    """Base class for alias (symlink) problems. Never fatal to a mount."""

    def __init__(self, alias_path: str, message: str):
        self.alias_path = alias_path
        self.message = message
        super().__init__(f"{alias_path}: {message}")


class AliasCreateFailedError(AliasError):
    """The alias could not be created or refreshed."""


class AliasRemoveFailedError(AliasError):
    """The alias could not be removed."""


class AliasCollisionError(AliasCreateFailedError):
    """Another location already owns the alias path."""

    def __init__(self, alias_path: str, owner_uri: str):
        self.owner_uri = owner_uri
        super().__init__(
            alias_path,
            f"Alias name already used by {owner_uri}; set a distinct alias name",
        )


class ConfigParseFailedError(AutoMountError):
    """The persisted per-location settings blob is malformed."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Could not parse location settings from {source}: {reason}")


class LocationNotFoundError(AutoMountError):
    """A manual action referenced a uri that is not in the bookmark list."""

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Unknown location: {uri}")

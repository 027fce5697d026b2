"""Exceptions raised by the depscout engine."""


class DepscoutError(Exception):
    """Base class for engine errors."""


class ManifestUnreadable(DepscoutError):
    """A manifest exists but cannot be read."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read manifest {path}: {reason}")


class RegistryUnavailable(DepscoutError):
    """A registry lookup failed (network, timeout, non-2xx or bad payload)."""

    def __init__(self, registry: str, package: str, reason: str):
        self.registry = registry
        self.package = package
        self.reason = reason
        super().__init__(f"{registry} lookup for {package} failed: {reason}")


class PackageManagerError(DepscoutError):
    """A package manager command exited non-zero, timed out or was not found."""

    def __init__(self, args: list[str], reason: str, returncode: int | None = None):
        self.command = list(args)
        self.reason = reason
        self.returncode = returncode
        super().__init__(f"{' '.join(self.command)}: {reason}")


class ConfirmationRequired(DepscoutError):
    """Breaking updates were selected without explicit confirmation."""

    def __init__(self, packages: list[str]):
        self.packages = list(packages)
        super().__init__(
            "Breaking changes require confirmation: " + ", ".join(self.packages)
        )

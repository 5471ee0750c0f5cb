from __future__ import annotations


class AssemblyError(RuntimeError):
    """Base class for everything that aborts an assembly run."""


class UnreadableInput(AssemblyError):
    """Options file missing, not valid YAML, or not matching the schema."""


class MissingSecretFile(AssemblyError):
    def __init__(self, path, reason: str = "not found"):
        self.path = str(path)
        super().__init__(f"secret file {self.path}: {reason}")


class InvalidPort(AssemblyError):
    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"{field}={value!r} is not a port (1-65535)")


class InvalidRetentionValue(AssemblyError):
    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"{field}={value!r} must be >= 0 days")


class DuplicateCameraName(AssemblyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"camera name {name!r} used more than once")


class ArtifactWriteError(AssemblyError):
    def __init__(self, path, cause: OSError):
        self.path = str(path)
        super().__init__(f"cannot write {self.path}: {cause.strerror or cause}")

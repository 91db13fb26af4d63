# appbox/core/errors.py

# -----------------------------
# Base Errors
# -----------------------------

class AppboxError(Exception):
    """Base class for all appbox errors."""
    pass


# -----------------------------
# Validation / Structural Errors
# -----------------------------

class AppValidationError(AppboxError):
    """Structural misuse: malformed app, bad subscriber, colliding names."""
    pass


class ConfigError(AppboxError):
    """App config file missing, unreadable or invalid."""
    pass


# -----------------------------
# Collaborator Errors
# -----------------------------

class ServicesNotReadyError(AppboxError):
    """Core services are not available."""
    pass


class EngineError(AppboxError):
    """Container engine call failed."""
    pass


class PluginLoadError(AppboxError):

    def __init__(self, plugin: str, cause: BaseException):
        self.plugin = plugin
        self.cause = cause
        super().__init__(f"Failed to load plugin [{plugin}]: {cause}")


# -----------------------------
# Lifecycle Errors
# -----------------------------

class HookVetoError(AppboxError):
    """A hook subscriber failed and vetoed the phase."""

    def __init__(self, event: str, cause: BaseException):
        self.event = event
        self.cause = cause
        super().__init__(f"Hook [{event}] failed: {cause}")


class ComponentOperationError(AppboxError):
    """A single component failed during a lifecycle phase."""

    def __init__(self, component: str, phase: str, cause: BaseException):
        self.component = component
        self.phase = phase
        self.cause = cause
        super().__init__(f"Component [{component}] failed to {phase}: {cause}")


# -----------------------------
# Registry Errors
# -----------------------------

class DuplicateAppError(AppboxError):

    def __init__(self, names):
        self.names = sorted(names)
        super().__init__(f"Duplicate app names exist: {', '.join(self.names)}")


class AppNotFoundError(AppboxError):

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"App [{name}] does not exist.")

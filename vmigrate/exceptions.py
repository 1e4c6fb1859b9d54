class VMigrateError(Exception):
    """Base class for every error raised by vmigrate."""


class FatalError(VMigrateError):
    """
    Errors that abort the whole run before (or instead of) processing VMs.
    """


class InputError(FatalError):
    pass


class InputFileNotFoundError(InputError, FileNotFoundError):
    def __init__(self, path, kind="input"):
        self.path = path
        self.kind = kind
        super().__init__(f"{kind} file not found: {path}")


class EmptyInputError(InputError):
    def __init__(self, path, kind="input"):
        self.path = path
        self.kind = kind
        super().__init__(f"No entries found in {kind} file: {path}")


class AuthenticationError(FatalError):
    pass


class DependencyMissingError(FatalError):
    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing dependencies: {', '.join(self.missing)}")


class VMMigrationError(VMigrateError):
    """
    Per-VM error. Ends the processing of one VM as a failure; the run
    continues with the next VM.

    Subclasses set `retryable` to tell the executor whether another
    migration attempt may be made.
    """
    retryable = False

    def __init__(self, vm_id, message):
        self.vm_id = vm_id
        super().__init__(message)


class VMNotFoundError(VMMigrationError):
    def __init__(self, vm_id):
        super().__init__(vm_id, f"VM {vm_id} not found")


class UnsupportedStateError(VMMigrationError):
    def __init__(self, vm_id, status, reason=None):
        self.status = status
        message = f"VM {vm_id} is in unsupported state for migration: {status}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(vm_id, message)


class NoTargetHostError(VMMigrationError):
    def __init__(self, vm_id):
        super().__init__(vm_id, f"Failed to find suitable target host for VM {vm_id}")


class MigrationInitiationError(VMMigrationError):
    retryable = True


class MigrationTimeoutError(VMMigrationError):
    retryable = True

    def __init__(self, vm_id, timeout):
        self.timeout = timeout
        super().__init__(vm_id, f"Migration timeout reached ({timeout} seconds) for VM {vm_id}")


class MigrationPlatformError(VMMigrationError):
    retryable = True

"""Data models for vmigrate. Everything here lives for one run only."""

import enum
from dataclasses import dataclass, field
from typing import List, Optional


UNKNOWN_HOST = "UNKNOWN"


class VMStatus(enum.Enum):
    ACTIVE = "ACTIVE"
    SHUTOFF = "SHUTOFF"
    ERROR = "ERROR"
    MIGRATING = "MIGRATING"
    VERIFY_RESIZE = "VERIFY_RESIZE"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw_status):
        """
        Map a platform status string onto the enumeration.
        Empty or missing values mean the VM could not be found; anything the
        enumeration does not name maps to UNKNOWN (the raw string is kept on
        VMInfo).
        """
        if raw_status is None:
            return cls.NOT_FOUND
        value = str(raw_status).strip().upper()
        if not value or value == "NULL":
            return cls.NOT_FOUND
        if value == cls.UNKNOWN.value:
            return cls.UNKNOWN
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def migratable(self):
        return self in (VMStatus.ACTIVE, VMStatus.SHUTOFF)


class MigrationKind(enum.Enum):
    LIVE = "live"
    COLD = "cold"


@dataclass(frozen=True)
class VMInfo:
    vm_id: str
    status: VMStatus
    raw_status: str
    host: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def not_found(cls, vm_id):
        return cls(vm_id=vm_id, status=VMStatus.NOT_FOUND, raw_status=VMStatus.NOT_FOUND.value)

    @property
    def host_display(self):
        return self.host or UNKNOWN_HOST


@dataclass(frozen=True)
class HostInfo:
    name: str
    running_vms: Optional[int]
    state: str
    status: str

    @property
    def healthy(self):
        return self.status == "enabled" and self.state == "up"


class Placement(enum.Enum):
    ALREADY_ON_TARGET = "already_on_target"
    SELECTED = "selected"
    NO_HOST_AVAILABLE = "no_host_available"


@dataclass(frozen=True)
class PlacementDecision:
    placement: Placement
    host: Optional[str] = None
    vm_count: Optional[int] = None

    @classmethod
    def already_on_target(cls, host):
        return cls(Placement.ALREADY_ON_TARGET, host=host)

    @classmethod
    def selected(cls, host, vm_count):
        return cls(Placement.SELECTED, host=host, vm_count=vm_count)

    @classmethod
    def no_host_available(cls):
        return cls(Placement.NO_HOST_AVAILABLE)


@dataclass
class MigrationAttempt:
    vm_id: str
    target_host: str
    kind: MigrationKind
    attempt_number: int
    succeeded: bool = False
    error: Optional[Exception] = None


@dataclass
class MigrationOutcome:
    vm_id: str
    succeeded: bool
    skipped: bool = False
    target_host: Optional[str] = None
    kind: Optional[MigrationKind] = None
    attempts: List[MigrationAttempt] = field(default_factory=list)
    error: Optional[Exception] = None


@dataclass
class RunSummary:
    total_vms: int = 0
    succeeded: int = 0
    failed: int = 0
    elapsed_seconds: float = 0.0
    failed_vms: List[str] = field(default_factory=list)

    def record(self, outcome):
        if outcome.succeeded:
            self.succeeded += 1
        else:
            self.failed += 1
            self.failed_vms.append(outcome.vm_id)

    @property
    def exit_code(self):
        return 1 if self.failed > 0 else 0

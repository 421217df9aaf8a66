"""
Kernel Invariants Contract.

These invariants are structural law for the allocation core. No settings
value or caller flag may switch them off.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across the pure lifecycles in ``domain/``,
InventoryService, ApplicationService, RegistrationService, and the
database constraints declared on the models.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    SINGLE_ACTIVE_APPLICATION = "single_active_application"
    """At most one non-UNSUCCESSFUL application per applicant. Enforced by
    ApplicationService lookup-before-insert and a partial unique index."""

    NON_NEGATIVE_QUOTA = "non_negative_quota"
    """Flat-type quotas never drop below zero. Enforced by
    ProjectInventory.reserve_unit and a CHECK constraint."""

    OFFICER_SLOT_BOUNDS = "officer_slot_bounds"
    """Officer-slot counters stay within [0, MAX_OFFICER_SLOTS]. Enforced by
    ProjectInventory and a CHECK constraint."""

    INVENTORY_WRITE_PATH = "inventory_write_path"
    """Quota and slot columns are written only by InventoryService."""

    NO_ROLE_CONFLICT = "no_role_conflict"
    """An officer with an active application holds no registration.
    Enforced by RegistrationService.submit."""

    NO_OVERLAPPING_COMMITMENT = "no_overlapping_commitment"
    """An officer's APPROVED registrations have pairwise disjoint project
    windows. Enforced by RegistrationService.submit."""

    ATOMIC_TRANSITION = "atomic_transition"
    """A transition applies all of its effects or none. Enforced by the
    AllocationCoordinator savepoint around every request."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "housing_config",
)

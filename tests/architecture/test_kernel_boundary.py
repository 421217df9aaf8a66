"""
Kernel boundary contract.

1. housing_kernel/** may NOT import housing_config.  The kernel never
   depends upward.

2. housing_kernel/domain/** is pure: no SQLAlchemy and no imports from
   db/, models/, services/ or selectors/.

3. Only InventoryService assigns the quota and officer-slot counters.

4. Selectors never mutate the session.

These tests read source code via AST; they cannot break anything.
"""

import ast
import glob
from pathlib import Path

from housing_kernel.invariants import (
    ALL_KERNEL_INVARIANTS,
    FORBIDDEN_KERNEL_IMPORTS,
    KernelInvariant,
)

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[str]:
    return sorted(glob.glob(str(ROOT / package / "**" / "*.py"), recursive=True))


def _parse(filepath: str) -> ast.AST:
    return ast.parse(Path(filepath).read_text(), filename=filepath)


def _extract_imports(filepath: str) -> list[tuple[int, str]]:
    """(line_number, module) for every import in a file."""
    results: list[tuple[int, str]] = []
    for node in ast.walk(_parse(filepath)):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom) and node.module:
            results.append((node.lineno, node.module))
    return results


def _rel(filepath: str) -> str:
    return str(Path(filepath).relative_to(ROOT))


class TestKernelNoUpwardDependencies:

    def test_kernel_does_not_import_config(self):
        violations = [
            f"  {_rel(f)}:{lineno} imports '{module}'"
            for f in _python_files("housing_kernel")
            for lineno, module in _extract_imports(f)
            for prefix in FORBIDDEN_KERNEL_IMPORTS
            if module == prefix or module.startswith(f"{prefix}.")
        ]
        assert not violations, "housing_kernel must not import:\n" + "\n".join(violations)


class TestDomainPurity:

    FORBIDDEN = (
        "sqlalchemy",
        "housing_kernel.db",
        "housing_kernel.models",
        "housing_kernel.services",
        "housing_kernel.selectors",
    )

    def test_domain_has_no_io_imports(self):
        violations = [
            f"  {_rel(f)}:{lineno} imports '{module}'"
            for f in _python_files("housing_kernel/domain")
            for lineno, module in _extract_imports(f)
            if any(module == p or module.startswith(f"{p}.") for p in self.FORBIDDEN)
        ]
        assert not violations, "domain/ must stay pure:\n" + "\n".join(violations)


class TestInventoryWritePath:

    COUNTERS = {"units_available", "officer_slots"}
    ALLOWED = {
        "housing_kernel/models/project.py",
        "housing_kernel/services/inventory_service.py",
    }

    def test_counters_assigned_only_by_inventory_path(self):
        violations = []
        for f in _python_files("housing_kernel"):
            if _rel(f) in self.ALLOWED:
                continue
            for node in ast.walk(_parse(f)):
                if isinstance(node, (ast.Assign, ast.AugAssign)):
                    targets = node.targets if isinstance(node, ast.Assign) else [node.target]
                    for target in targets:
                        if isinstance(target, ast.Attribute) and target.attr in self.COUNTERS:
                            violations.append(f"  {_rel(f)}:{node.lineno} assigns .{target.attr}")
        assert not violations, "inventory counters written outside InventoryService:\n" + "\n".join(
            violations
        )


class TestSelectorsReadOnly:

    MUTATORS = {"add", "add_all", "delete", "commit", "flush", "merge"}

    def test_selectors_do_not_mutate(self):
        violations = []
        for f in _python_files("housing_kernel/selectors"):
            for node in ast.walk(_parse(f)):
                if (
                    isinstance(node, ast.Call)
                    and isinstance(node.func, ast.Attribute)
                    and node.func.attr in self.MUTATORS
                    and isinstance(node.func.value, ast.Attribute)
                    and node.func.value.attr == "session"
                ):
                    violations.append(f"  {_rel(f)}:{node.lineno} calls session.{node.func.attr}")
        assert not violations, "\n".join(violations)


def test_invariants_declared():
    assert ALL_KERNEL_INVARIANTS == frozenset(KernelInvariant)
    assert KernelInvariant.ATOMIC_TRANSITION in ALL_KERNEL_INVARIANTS
    assert len(ALL_KERNEL_INVARIANTS) >= 7

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Implementor records: which public classes realize which interface.

The API reference renders "implemented by" lists from these records. A
record states that `type_name` implements `trait`, with the type's generic
parameters and any constraints on them. `synthetic` marks facts that were
inferred rather than written down: a class that satisfies a runtime
checkable protocol structurally, without subclassing it, is a synthetic
implementor; a class that subclasses the interface is an explicit one.

Records are produced once per documentation build and consumed by a
registry. If the registry callback is already installed the records go
straight to it, otherwise they wait in `pending` until one is installed.

Manifests are one JSON file per interface, `<trait>.json`, holding the
records in the order they were collected.
"""

import importlib
import inspect
import json
import logging
import pkgutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

from optiloop.logging.logger import get_logger
from optiloop.utils.filesystem import atomic_write, safe_read

logger: logging.Logger = get_logger(__name__)

RegistryCallback = Callable[[list["ImplementorRecord"]], None]


@dataclass(frozen=True)
class ImplementorRecord:
    trait: str
    type_name: str
    type_params: tuple[str, ...] = ()
    where_clauses: tuple[str, ...] = ()
    synthetic: bool = False

    def validate(self) -> None:
        """
        Raises:
            ValueError: If the trait or type name is empty.
        """
        if not self.trait.strip():
            raise ValueError("Implementor record has an empty trait name")
        if not self.type_name.strip():
            raise ValueError(f"Implementor record for '{self.trait}' has an empty type name")

    def to_dict(self) -> dict[str, Any]:
        return {
            "trait": self.trait,
            "type_name": self.type_name,
            "type_params": list(self.type_params),
            "where_clauses": list(self.where_clauses),
            "synthetic": self.synthetic,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImplementorRecord":
        return cls(
            trait=data["trait"],
            type_name=data["type_name"],
            type_params=tuple(data.get("type_params", ())),
            where_clauses=tuple(data.get("where_clauses", ())),
            synthetic=bool(data.get("synthetic", False)),
        )


@dataclass
class ImplementorRegistry:
    """
    Hands record lists to a consumer callback, buffering until one exists.

    `register` calls the installed callback immediately, or appends the list
    to `pending`. `install` sets the callback and replays everything that
    was pending, in registration order.
    """

    callback: Optional[RegistryCallback] = None
    pending: list[list[ImplementorRecord]] = field(default_factory=list)

    def register(self, records: Sequence[ImplementorRecord]) -> None:
        batch = list(records)
        if self.callback is not None:
            self.callback(batch)
        else:
            self.pending.append(batch)

    def install(self, callback: RegistryCallback) -> None:
        self.callback = callback
        pending, self.pending = self.pending, []
        for batch in pending:
            callback(batch)

    def uninstall(self) -> None:
        self.callback = None


_default_registry = ImplementorRegistry()


def default_registry() -> ImplementorRegistry:
    return _default_registry


def register_implementors(records: Sequence[ImplementorRecord]) -> None:
    """Register records with the process-wide registry."""
    _default_registry.register(records)


# ── Collection ──────────────────────────────────────────────────────────────


def _qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _type_params(cls: type) -> tuple[tuple[str, ...], tuple[str, ...]]:
    params: tuple[Any, ...] = getattr(cls, "__parameters__", ())
    names: list[str] = []
    clauses: list[str] = []
    for param in params:
        if not isinstance(param, TypeVar):
            continue
        names.append(param.__name__)
        if param.__bound__ is not None:
            bound = param.__bound__
            bound_name = bound.__name__ if isinstance(bound, type) else str(bound)
            clauses.append(f"{param.__name__}: {bound_name}")
        elif param.__constraints__:
            options = " | ".join(getattr(c, "__name__", str(c)) for c in param.__constraints__)
            clauses.append(f"{param.__name__}: {options}")
    return tuple(names), tuple(clauses)


def _is_protocol(interface: type) -> bool:
    return bool(getattr(interface, "_is_protocol", False))


def collect_implementors(interface: type, classes: Iterable[type]) -> list[ImplementorRecord]:
    """
    Build records for every class in `classes` that implements `interface`.

    Subclasses are explicit implementors. For runtime checkable protocols,
    classes that have the protocol's methods without subclassing it are
    synthetic implementors. The interface itself and other protocols are
    skipped. Order follows `classes`, duplicates are dropped.
    """
    records: list[ImplementorRecord] = []
    seen: set[type] = set()
    for cls in classes:
        if cls in seen or cls is interface or not inspect.isclass(cls) or _is_protocol(cls):
            continue
        seen.add(cls)

        if issubclass(cls, interface) and interface in inspect.getmro(cls):
            synthetic = False
        elif _is_protocol(interface) and _structurally_implements(cls, interface):
            synthetic = True
        else:
            continue

        names, clauses = _type_params(cls)
        record = ImplementorRecord(
            trait=interface.__qualname__,
            type_name=_qualified_name(cls),
            type_params=names,
            where_clauses=clauses,
            synthetic=synthetic,
        )
        record.validate()
        records.append(record)
    return records


def _structurally_implements(cls: type, protocol: type) -> bool:
    members = [
        name
        for name in getattr(protocol, "__protocol_attrs__", None) or _protocol_members(protocol)
        if not name.startswith("_")
    ]
    return bool(members) and all(callable(getattr(cls, name, None)) for name in members)


def _protocol_members(protocol: type) -> set[str]:
    members: set[str] = set()
    for base in protocol.__mro__:
        if base is object or not _is_protocol(base):
            continue
        members.update(name for name in vars(base) if not name.startswith("_"))
    return members


def iter_package_classes(package_name: str = "optiloop") -> list[type]:
    """All classes defined in the package's modules, in module then source order."""
    package = importlib.import_module(package_name)
    module_names = [package_name]
    for info in pkgutil.walk_packages(package.__path__, prefix=f"{package_name}."):
        if ".cli." in info.name or info.name.endswith(".cli"):
            continue
        module_names.append(info.name)

    classes: list[type] = []
    for name in sorted(module_names):
        module = importlib.import_module(name)
        members = [
            obj
            for _, obj in inspect.getmembers(module, inspect.isclass)
            if obj.__module__ == module.__name__
        ]
        members.sort(key=lambda c: inspect.getsourcelines(c)[1] if _has_source(c) else 0)
        classes.extend(members)
    return classes


def _has_source(cls: type) -> bool:
    try:
        inspect.getsourcelines(cls)
    except (OSError, TypeError):
        return False
    return True


def build_default_manifest() -> dict[str, list[ImplementorRecord]]:
    """Records for the package's public interfaces, keyed by interface name."""
    from optiloop.core.observers.base import Observe
    from optiloop.core.problem import Anneal, CostFunction
    from optiloop.core.solver import Solver

    classes = iter_package_classes()
    manifest: dict[str, list[ImplementorRecord]] = {}
    for interface in (Solver, Observe, CostFunction, Anneal):
        manifest[interface.__qualname__] = collect_implementors(interface, classes)
    return manifest


# ── Manifest I/O ────────────────────────────────────────────────────────────


def write_manifest(manifest: dict[str, list[ImplementorRecord]], directory: Path) -> list[Path]:
    """
    Write one `<trait>.json` per interface into `directory`, atomically.

    Returns:
        The written paths, sorted by trait name.
    """
    written: list[Path] = []
    for trait in sorted(manifest):
        records = manifest[trait]
        for record in records:
            record.validate()
        target = Path(directory) / f"{trait}.json"
        payload = {"trait": trait, "implementors": [r.to_dict() for r in records]}
        atomic_write(target, json.dumps(payload, indent=2) + "\n")
        written.append(target)
        logger.info("Implementor manifest written", extra={"trait": trait, "count": len(records), "path": str(target)})
    return written


def read_manifest(path: Path) -> list[ImplementorRecord]:
    """
    Read a `<trait>.json` manifest back into records.

    Raises:
        ValueError: If the file isn't a manifest or a record is malformed.
    """
    data = json.loads(safe_read(Path(path)))
    if not isinstance(data, dict) or "implementors" not in data:
        raise ValueError(f"{path} is not an implementor manifest")
    try:
        records = [ImplementorRecord.from_dict(item) for item in data["implementors"]]
    except (KeyError, TypeError) as err:
        raise ValueError(f"Malformed implementor record in {path}: {err}") from err
    for record in records:
        record.validate()
    return records

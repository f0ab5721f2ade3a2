"""Host workspace protocol and an in-memory implementation.

The host owns its storage: pgload publishes what shape of storage is needed
(_obs, _vars, _types, _fmts) and the host's own setup logic allocates it.
Coordinates are 1-based: (var, obs).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from pgload.core.exceptions import HostWriteError

# Valid range of the host's byte type; larger values are reserved for
# missing-value codes.
_BYTE_MIN = -127
_BYTE_MAX = 100

_STRING_TYPE = re.compile(r"str(\d+)")
_NUMERIC_TYPES = ("byte", "int", "long", "float", "double")


@runtime_checkable
class Host(Protocol):
    """What the bridge needs from the host workspace."""

    def observation_count(self) -> int: ...

    def store_number(self, var: int, obs: int, value: float) -> None: ...

    def store_string(self, var: int, obs: int, value: str) -> None: ...

    def publish(self, name: str, value: str) -> None: ...


@dataclass
class Variable:
    name: str
    storage: str
    display_format: str
    values: list[Any] = field(default_factory=list)

    @property
    def width(self) -> int | None:
        m = _STRING_TYPE.fullmatch(self.storage)
        return int(m.group(1)) if m else None


class MemoryHost:
    """Host workspace kept in Python lists.

    Mirrors what a host-side setup script does with the published metadata:
    apply_metadata() declares one variable per column on first use and
    grows the observation count whenever _obs increases.
    """

    def __init__(self) -> None:
        self.macros: dict[str, str] = {}
        self.variables: list[Variable] = []
        self._nobs = 0

    def publish(self, name: str, value: str) -> None:
        self.macros[name] = value

    def observation_count(self) -> int:
        return self._nobs

    def clear(self) -> None:
        self.macros.clear()
        self.variables = []
        self._nobs = 0

    def apply_metadata(self) -> None:
        """Allocate variables and observations from the published macros."""
        if not self.variables:
            names = self.macros.get("_vars", "").split()
            types = self.macros.get("_types", "").split()
            fmts = self.macros.get("_fmts", "").split()
            if not (len(names) == len(types) == len(fmts)):
                msg = (
                    f"Metadata mismatch: {len(names)} names, "
                    f"{len(types)} types, {len(fmts)} formats"
                )
                raise HostWriteError(msg)
            for name, storage, fmt in zip(names, types, fmts, strict=True):
                if storage not in _NUMERIC_TYPES and not _STRING_TYPE.fullmatch(storage):
                    raise HostWriteError(f"Unknown storage type '{storage}' for {name}")
                self.variables.append(Variable(name, storage, fmt))

        nobs = int(self.macros.get("_obs", "0"))
        if nobs > self._nobs:
            for var in self.variables:
                missing = "" if var.width is not None else None
                var.values.extend([missing] * (nobs - self._nobs))
            self._nobs = nobs

    def _slot(self, var: int, obs: int) -> Variable:
        if not (1 <= var <= len(self.variables)):
            raise HostWriteError(f"No variable {var} (have {len(self.variables)})")
        if not (1 <= obs <= self._nobs):
            raise HostWriteError(f"No observation {obs} (have {self._nobs})")
        return self.variables[var - 1]

    def store_number(self, var: int, obs: int, value: float) -> None:
        slot = self._slot(var, obs)
        if slot.width is not None:
            raise HostWriteError(f"Variable {slot.name} is a string variable")
        if slot.storage == "byte" and not (_BYTE_MIN <= value <= _BYTE_MAX):
            raise HostWriteError(f"Value {value} out of range for byte {slot.name}")
        slot.values[obs - 1] = value

    def store_string(self, var: int, obs: int, value: str) -> None:
        slot = self._slot(var, obs)
        width = slot.width
        if width is None:
            raise HostWriteError(f"Variable {slot.name} is a numeric variable")
        if len(value) > width:
            msg = f"String of length {len(value)} too wide for {slot.storage} {slot.name}"
            raise HostWriteError(msg)
        slot.values[obs - 1] = value

    def column_names(self) -> list[str]:
        return [v.name for v in self.variables]

    def rows(self) -> list[tuple[Any, ...]]:
        return list(zip(*(v.values for v in self.variables), strict=True))

# -------------------------------------
# scopes and bindings
# -------------------------------------
"""
Bindings visible at a point in document order.

A Scope is the mutable state threaded through one pass. A GlobalScope is
the read-only seed every pass starts from; passes copy it, never write it.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class FunctionDefinition:
    """
    A user function: name, ordered parameter names and a body expression.

    It carries no scope. Free names in the body are resolved against the
    scope of the line that calls it.
    """
    name: str
    params: tuple[str, ...]
    body: str

    def signature(self) -> str:
        return f"{self.name}({', '.join(self.params)})"


@dataclass
class Scope:
    variables: dict[str, Any] = field(default_factory=dict)
    functions: dict[str, FunctionDefinition] = field(default_factory=dict)

    @classmethod
    def from_seed(cls, seed: "Scope | GlobalScope") -> "Scope":
        """Return a fresh mutable scope holding the seed's bindings."""
        return cls(dict(seed.variables), dict(seed.functions))

    def names(self) -> list[str]:
        """All binding names, variables first, without duplicates."""
        return list(dict.fromkeys([*self.variables, *self.functions]))

    def freeze(self) -> "GlobalScope":
        return GlobalScope(self.variables, self.functions)


@dataclass(frozen=True, eq=False)
class GlobalScope:
    """Read-only seed bindings shared by every pass."""
    variables: Mapping[str, Any] = field(default_factory=dict)
    functions: Mapping[str, FunctionDefinition] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))
        object.__setattr__(self, "functions", MappingProxyType(dict(self.functions)))

    def __len__(self) -> int:
        return len(self.variables) + len(self.functions)


EMPTY = GlobalScope()

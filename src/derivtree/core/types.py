"""Base types and curried function signatures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator


class BaseType(Enum):
    NAT = "Nat"
    BOOL = "Bool"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TypeSignature:
    """An ordered chain of base types.

    A single element is a plain base type; ``[Nat, Bool]`` reads ``Nat -> Bool``,
    each element but the last being the domain of one arrow. The empty signature is
    reserved for :data:`UNCONSTRAINED`, the "infer me" marker used while deriving.
    """

    types: tuple[BaseType, ...] = ()

    @staticmethod
    def of(*types: BaseType) -> TypeSignature:
        return TypeSignature(tuple(types))

    @staticmethod
    def coerce(value: TypeSignature | BaseType | None) -> TypeSignature:
        """Normalise the forms accepted at entry points."""

        match value:
            case None:
                return UNCONSTRAINED
            case BaseType():
                return TypeSignature((value,))
            case TypeSignature():
                return value
        raise TypeError(f"Not a type signature: {value!r}")

    def __len__(self) -> int:
        return len(self.types)

    def __iter__(self) -> Iterator[BaseType]:
        return iter(self.types)

    def __getitem__(self, index: int) -> BaseType:
        return self.types[index]

    @property
    def head(self) -> BaseType | None:
        return self.types[0] if self.types else None

    @property
    def is_unconstrained(self) -> bool:
        return not self.types

    @property
    def is_base(self) -> bool:
        return len(self.types) == 1

    def drop_domain(self) -> TypeSignature:
        """Return the codomain after consuming the first arrow."""

        return TypeSignature(self.types[1:])

    def prepend(self, domain: BaseType) -> TypeSignature:
        return TypeSignature((domain, *self.types))

    def is_exactly(self, base: BaseType) -> bool:
        return self.types == (base,)

    def latex(self) -> str:
        return " \\to ".join(t.value for t in self.types)

    def __str__(self) -> str:
        return " -> ".join(t.value for t in self.types) or "?"


UNCONSTRAINED = TypeSignature(())
NAT = TypeSignature((BaseType.NAT,))
BOOL = TypeSignature((BaseType.BOOL,))


__all__ = ["BaseType", "TypeSignature", "UNCONSTRAINED", "NAT", "BOOL"]

"""Read-only snapshots of host classes handed to the engine by adapters."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ClassDescriptor:
    """Identity of a class as seen by the layer classifier."""

    simple_name: str
    qualified_name: str
    package_name: str = ""
    annotation_qualified_names: tuple[str, ...] = ()

    @classmethod
    def from_qualified_name(
        cls, qualified_name: str, annotations: tuple[str, ...] = ()
    ) -> ClassDescriptor:
        """Split ``com.example.UserController`` into package and simple name."""
        package, _, simple = qualified_name.rpartition(".")
        return cls(
            simple_name=simple,
            qualified_name=qualified_name,
            package_name=package,
            annotation_qualified_names=annotations,
        )


@dataclass(frozen=True)
class MethodBody:
    """Counts of syntactic constructs in one method body, nested blocks included."""

    conditionals: int = 0
    switches: int = 0
    loops: int = 0
    assignments: int = 0
    binary_expressions: int = 0

    @property
    def complex_score(self) -> int:
        return self.conditionals + self.switches + self.loops

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable


Transform = Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class Edit:
    """Atomic change to a forest: members removed, members added, and a transform
    applied to every surviving member."""
    removed: tuple[Any, ...] = ()
    added: tuple[Any, ...] = ()
    transforms: tuple[Transform, ...] = ()

    def full_transformer(self) -> Transform:
        transforms = self.transforms

        def apply(e: Any) -> Any:
            for t in transforms:
                e = t(e)
            return e

        return apply

    def transform(self, transformation: Transform) -> Edit:
        return replace(self, transforms=(*self.transforms, transformation))

    def add(self, *elements: Any) -> Edit:
        return replace(self, added=(*self.added, *elements))

    def remove(self, *elements: Any) -> Edit:
        return replace(self, removed=(*self.removed, *elements))

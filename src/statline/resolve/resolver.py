"""Ordered chain of header resolution strategies."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from statline.models.table import Row
from statline.resolve.strategies import (
    MISSING,
    AlphanumericStrategy,
    CamelCaseStrategy,
    CaseInsensitiveKeyStrategy,
    DeclaredMappingStrategy,
    DirectFieldStrategy,
    ExplicitMappingStrategy,
    HeaderKey,
    PartialMatchStrategy,
    ResolverStrategy,
)


def default_strategies(mappings: Mapping[str, str] | None = None) -> list[ResolverStrategy]:
    mappings = dict(mappings or {})
    return [
        ExplicitMappingStrategy(mappings),
        DeclaredMappingStrategy(mappings),
        DirectFieldStrategy(),
        CaseInsensitiveKeyStrategy(),
        CamelCaseStrategy(),
        AlphanumericStrategy(),
        PartialMatchStrategy(),
    ]


class HeaderResolver:
    """Resolve a displayed header against a row of arbitrary shape.

    A header no strategy can place resolves to ``""``: a header/dataset
    mismatch is a data-quality condition, not a resolver failure.
    """

    def __init__(
        self,
        mappings: Mapping[str, str] | None = None,
        *,
        strategies: Sequence[ResolverStrategy] | None = None,
    ) -> None:
        self.strategies: tuple[ResolverStrategy, ...] = tuple(
            strategies if strategies is not None else default_strategies(mappings)
        )

    def explain(self, row: Row, header: str) -> tuple[str | None, Any]:
        """Return ``(strategy name, value)``; the name is ``None`` on a miss."""
        key = HeaderKey.from_text(header)
        for strategy in self.strategies:
            value = strategy.try_resolve(row, key)
            if value is not MISSING:
                return strategy.name, value
        return None, ""

    def resolve_value(self, row: Row, header: str) -> Any:
        return self.explain(row, header)[1]


__all__ = ["HeaderResolver", "default_strategies"]

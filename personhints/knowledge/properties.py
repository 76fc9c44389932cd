"""Metamodel lookup deciding which properties of a class accept a person."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class PropertyResolver(Protocol):
    async def find_properties_with_range(self, class_type: str, range_uri: str) -> List[str]:
        ...


class StaticPropertyResolver:
    """Resolve properties from a fixed `{class_uri: {property_uri: range_uri}}` metamodel."""

    def __init__(self, metamodel: Optional[Mapping[str, Mapping[str, str]]] = None) -> None:
        self._metamodel: Dict[str, Dict[str, str]] = {
            class_uri: dict(properties) for class_uri, properties in (metamodel or {}).items()
        }
        self.calls = 0

    def add_property(self, class_uri: str, property_uri: str, range_uri: str) -> None:
        self._metamodel.setdefault(class_uri, {})[property_uri] = range_uri

    async def find_properties_with_range(self, class_type: str, range_uri: str) -> List[str]:
        self.calls += 1
        properties = self._metamodel.get(class_type, {})
        return [prop for prop, prop_range in properties.items() if prop_range == range_uri]

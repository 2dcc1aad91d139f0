"""
Extension node model.

A generic, recursive, namespaced element. It carries anything a target
format needs that the canonical model has no field for, as well as private
configuration read by the encoders.

Responsibility: Open-ended extensibility point of the canonical model
"""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

# Names starting with this marker are configuration for an encoder and are
# never emitted as elements.
CONFIG_PREFIX = "_"


class ExtensionNode(BaseModel):
    """
    Arbitrary element injected at channel/feed or item/entry scope.

    Example:
        ExtensionNode(
            name="podcast:funding",
            attrs={"url": "https://example.com/support"},
            text="Support us",
        )
    """

    model_config = ConfigDict(validate_assignment=True)

    name: str = Field(description="Element name, may carry a prefix (e.g. 'itunes:image')")
    attrs: Dict[str, str] = Field(
        default_factory=dict,
        description="Attributes; rendered in ascending key order"
    )
    text: str = Field(default="", description="Character data")
    children: List[ExtensionNode] = Field(default_factory=list)

    @property
    def key(self) -> str:
        """Normalized name used for reserved-name lookups."""
        return self.name.strip().lower()

    @property
    def is_config(self) -> bool:
        """True for private configuration nodes (reserved prefix)."""
        return self.name.strip().startswith(CONFIG_PREFIX)

    def sorted_attrs(self) -> List[tuple[str, str]]:
        """Attributes as (name, value) pairs in deterministic order."""
        return sorted(self.attrs.items())


ExtensionNode.model_rebuild()

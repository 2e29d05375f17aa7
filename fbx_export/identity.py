"""
Creator and application identity written into exported documents.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class HostDefaults:
    """Identity strings supplied by the host application."""
    company_name: str = ""
    product_name: str = ""
    version: str = ""


@dataclass(frozen=True)
class ExportIdentity:
    """Per-export identity; unset fields fall back to HostDefaults."""
    vendor: Optional[str] = None
    creator_name: Optional[str] = None
    application_name: Optional[str] = None
    version: Optional[str] = None

    def resolve(self, host: HostDefaults) -> "ExportIdentity":
        """Return a copy with every empty field filled from host."""
        return replace(
            self,
            vendor=self.vendor or host.company_name,
            creator_name=self.creator_name or host.product_name,
            application_name=self.application_name or host.product_name,
            version=self.version or host.version,
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ExportIdentity":
        """Build an identity from a mapping, ignoring unknown keys.

        Raises:
            ValueError: If a known key holds a non-string value.
        """
        values = {}
        for f in fields(cls):
            if f.name not in data or data[f.name] is None:
                continue
            if not isinstance(data[f.name], str):
                raise ValueError(f"{f.name} must be a string")
            values[f.name] = data[f.name]
        return cls(**values)

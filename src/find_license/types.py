"""Shared Pydantic models for find-license."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from find_license.errors.exceptions import FindLicenseError

# ── Enums ──


class DispatchState(StrEnum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    DRAINING = "draining"
    CLOSED = "closed"


# ── Input models ──


class Module(BaseModel):
    """A Go module dependency as reported by ``go list -m -json``."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(min_length=1)
    version: str = ""
    indirect: bool = False
    error: Any = None

    def __str__(self) -> str:
        return f"{self.path},{self.version},{self.error}"

    @classmethod
    def from_go_list(cls, data: dict[str, Any]) -> Module:
        """Build a Module from one ``go list -m -json`` object."""
        return cls(
            path=data.get("Path", ""),
            version=data.get("Version") or "",
            indirect=bool(data.get("Indirect", False)),
            error=data.get("Error"),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "Path": self.path,
            "Version": self.version,
            "Indirect": self.indirect,
            "Error": self.error,
        }


# ── Result models ──


class LicenseFound(BaseModel):
    """License metadata scraped from a module's licenses page."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["found"] = "found"
    module: Module
    uri: str
    source: str = ""
    content: str = ""
    license_type: str = ""

    @property
    def ok(self) -> bool:
        return True

    def to_record(self) -> dict[str, Any]:
        return {
            "Module": self.module.to_record(),
            "URI": self.uri,
            "Source": self.source,
            "Content": self.content,
            "Type": self.license_type,
        }


class LicenseFailure(BaseModel):
    """A lookup that ended in a classified error."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["failure"] = "failure"
    module: Module
    uri: str
    error: FindLicenseError

    @property
    def ok(self) -> bool:
        return False

    def to_record(self) -> dict[str, Any]:
        return {
            "Module": self.module.to_record(),
            "URI": self.uri,
            "Err": str(self.error),
        }


LicenseResult = Annotated[LicenseFound | LicenseFailure, Field(discriminator="kind")]

# modpeek/models.py
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "EnumModType",
    "EnumAppSide",
    "EnumDataType",
    "BROKEN_VERSION",
    "isBrokenVersion",
    "ModDependency",
    "ModInfo",
    "PlayStyle",
    "WorldConfigurationAttribute",
    "WorldConfiguration",
    "newDependency",
]



class EnumModType(Enum):
    CODE = "Code"
    CONTENT = "Content"
    THEME = "Theme"



class EnumAppSide(Enum):
    CLIENT = "Client"
    SERVER = "Server"
    UNIVERSAL = "Universal"



class EnumDataType(Enum):
    BOOL = "Bool"
    INT_INPUT = "IntInput"
    DOUBLE_INPUT = "DoubleInput"
    INT_RANGE = "IntRange"
    STRING = "String"
    DROP_DOWN = "DropDown"
    # Marks a value that already failed to parse and was reported by the mapper.
    BROKEN = "<broken>"



class _BrokenVersion(str):
    """Identity-checked marker for a version field that failed type coercion."""
    __slots__ = ()

    def __repr__(self) -> str:
        return "BROKEN_VERSION"



# Survives attribute assignment and model_construct only; model validation turns it
# into a plain str.
BROKEN_VERSION: str = _BrokenVersion("broken")



def isBrokenVersion(value: object) -> bool:
    return value is BROKEN_VERSION



# Extractors populate these field by field and the validator repairs them in place.
# Assignments are never re-validated.
_MUTABLE_MODEL = ConfigDict(
    extra="forbid",
    validate_assignment=False,
    arbitrary_types_allowed=True,
)



class ModDependency(BaseModel):
    """A dependency on another mod. `version` None means any version."""
    model_config = _MUTABLE_MODEL

    modId: str | None = None
    version: str | None = None

    def __str__(self) -> str:
        if self.version is None:
            return f"{self.modId}"
        return f"{self.modId}@{self.version}"



def newDependency(modId: str | None, version: str | None) -> ModDependency:
    # Built without validation; the validator checks both fields in its own pass.
    return ModDependency.model_construct(modId=modId, version=version)



class ModInfo(BaseModel):
    """The mod manifest."""
    model_config = _MUTABLE_MODEL

    name: str | None = None
    modId: str | None = None
    version: str | None = None
    networkVersion: str | None = None
    type: Any = EnumModType.CODE
    side: Any = EnumAppSide.UNIVERSAL
    requiredOnClient: bool = True
    requiredOnServer: bool = True
    iconPath: str | None = None
    description: str | None = None
    website: str | None = ""
    textureSize: int = 32
    authors: list[str] = Field(default_factory=list)
    contributors: list[str] = Field(default_factory=list)
    dependencies: list[ModDependency] = Field(default_factory=list)
    coreMod: bool = False



class PlayStyle(BaseModel):
    model_config = _MUTABLE_MODEL

    code: str | None = None
    playListCode: str | None = None
    langCode: str | None = None
    worldType: str | None = None
    listOrder: float = 0.0
    mods: list[str] = Field(default_factory=list)
    # Opaque, passed through as parsed.
    worldConfig: dict[str, Any] | None = None



class WorldConfigurationAttribute(BaseModel):
    model_config = _MUTABLE_MODEL

    dataType: Any = None
    category: str | None = None
    code: str | None = None
    min: float = 0.0
    max: float = 0.0
    step: float = 0.0
    onCustomizeScreen: bool = True
    onlyDuringWorldCreate: bool = False
    default: str | None = None
    values: list[str] | None = None
    names: list[str] | None = None



class WorldConfiguration(BaseModel):
    """World generation choices a mod exposes. Lists stay None when absent."""
    model_config = _MUTABLE_MODEL

    playStyles: list[PlayStyle] | None = None
    worldConfigAttributes: list[WorldConfigurationAttribute] | None = None

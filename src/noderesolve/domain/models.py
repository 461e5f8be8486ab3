from datetime import datetime
from enum import Enum
from typing import FrozenSet, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator
from semantic_version import NpmSpec, Version

from .errors import InvalidVersionSpecError


def parse_version(text: str) -> Version:
    """parse a node-style version string, tolerating a leading 'v'."""
    text = text.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    return Version(text)


class NodeDistroFiles(BaseModel):
    """the set of files published for a single node version."""
    model_config = ConfigDict(frozen=True)

    files: FrozenSet[str] = Field(default_factory=frozenset)

    def __contains__(self, name: str) -> bool:
        return name in self.files


class NodeEntry(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    version: Version
    npm: Version
    files: NodeDistroFiles = Field(default_factory=NodeDistroFiles)
    lts: bool = False

    @field_validator("version", mode="before")
    @classmethod
    def _parse_version(cls, value):
        if isinstance(value, str):
            return parse_version(value)
        return value

    @field_validator("npm", mode="before")
    @classmethod
    def _parse_npm(cls, value):
        # some historical npm releases are not strict semver
        if isinstance(value, str):
            return Version.coerce(value.lstrip("vV"))
        return value


class NodeIndex(BaseModel):
    """the index of the public node server, newest version first."""
    entries: List[NodeEntry] = Field(default_factory=list)


class RawNodeEntry(BaseModel):
    """one element of index.json as published on the wire."""
    version: str
    npm: Optional[str] = None
    files: List[str] = Field(default_factory=list)
    # false, or the release line's codename
    lts: Union[bool, str] = False

    def into_entry(self) -> Optional[NodeEntry]:
        if self.npm is None:
            return None
        return NodeEntry(
            version=self.version,
            npm=self.npm,
            files=NodeDistroFiles(files=frozenset(self.files)),
            lts=self.lts is not False,
        )


class RawNodeIndex(RootModel[List[RawNodeEntry]]):

    def into_index(self) -> NodeIndex:
        entries = []
        for raw in self.root:
            entry = raw.into_entry()
            if entry is not None:
                entries.append(entry)
        return NodeIndex(entries=entries)


def parse_index(text: str) -> NodeIndex:
    """
    parse the raw body of index.json into a NodeIndex.

    raises:
        ValueError: if the body is not valid json or does not match the schema
    """
    return RawNodeIndex.model_validate_json(text).into_index()


class CacheRecord(BaseModel):
    """raw index body plus the instant it stops being fresh."""
    text: str
    valid_until: datetime


class SpecKind(str, Enum):
    LATEST = "latest"
    LTS = "lts"
    SEMVER = "semver"
    EXACT = "exact"


class VersionSpec(BaseModel):
    """a request for a node version: latest, lts, a semver range or an exact version."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: SpecKind
    requirement: Optional[NpmSpec] = None
    version: Optional[Version] = None

    @classmethod
    def latest(cls) -> "VersionSpec":
        return cls(kind=SpecKind.LATEST)

    @classmethod
    def lts(cls) -> "VersionSpec":
        return cls(kind=SpecKind.LTS)

    @classmethod
    def semver(cls, requirement: Union[str, NpmSpec]) -> "VersionSpec":
        if isinstance(requirement, str):
            requirement = NpmSpec(requirement)
        return cls(kind=SpecKind.SEMVER, requirement=requirement)

    @classmethod
    def exact(cls, version: Union[str, Version]) -> "VersionSpec":
        if isinstance(version, str):
            version = parse_version(version)
        return cls(kind=SpecKind.EXACT, version=version)

    @classmethod
    def parse(cls, text: str) -> "VersionSpec":
        """
        parse a user-supplied specifier.

        'latest' and 'lts' are keywords, a full version (optionally prefixed
        with 'v') is exact, anything else is treated as an npm-style range.

        raises:
            InvalidVersionSpecError: if the text is empty or not a valid range
        """
        stripped = text.strip() if text else ""
        if not stripped:
            raise InvalidVersionSpecError(text)

        lowered = stripped.lower()
        if lowered == "latest":
            return cls.latest()
        if lowered == "lts":
            return cls.lts()

        try:
            return cls.exact(stripped)
        except ValueError:
            pass

        try:
            return cls.semver(stripped)
        except ValueError as e:
            raise InvalidVersionSpecError(text) from e

    def __str__(self) -> str:
        if self.kind == SpecKind.SEMVER:
            return str(self.requirement)
        if self.kind == SpecKind.EXACT:
            return str(self.version)
        return self.kind.value

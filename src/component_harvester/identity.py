"""Component identities and their URL/URN serializations.

An identity names one harvestable resource:

    type/provider/namespace/name/revision[/tool/toolVersion]

URL form:  cd:/maven/mavencentral/org.apache/commons/1.0/tool/clearlydefined/1.1.2
URN form:  urn:maven:mavencentral:org.apache:commons:revision:1.0:tool:clearlydefined:1.1.2

A missing namespace is written as ``-`` in both forms.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Mapping, Optional

from .exceptions import FormatError

URL_SCHEME = "cd:/"
NO_NAMESPACE = "-"


def _segment(value: Optional[str]) -> str:
    return value if value else NO_NAMESPACE


@dataclass(frozen=True)
class ComponentIdentity:
    """Immutable identity of a harvested component (optionally tool-qualified)."""

    type: str
    provider: str
    namespace: Optional[str]
    name: str
    revision: Optional[str] = None
    tool: Optional[str] = None
    tool_version: Optional[str] = None

    @classmethod
    def from_url(cls, url: str) -> "ComponentIdentity":
        """Parse a ``cd:/`` URL into an identity."""
        if not url or not url.startswith(URL_SCHEME):
            raise FormatError("Invalid component URL", str(url), "expected cd:/ scheme")
        parts = url[len(URL_SCHEME):].strip("/").split("/")
        if len(parts) < 4:
            raise FormatError(
                "Invalid component URL", url, "expected type/provider/namespace/name"
            )
        type_, provider, namespace, name = parts[:4]
        revision = parts[4] if len(parts) > 4 and parts[4] not in ("", NO_NAMESPACE) else None
        tool = tool_version = None
        if len(parts) > 5:
            if parts[5] != "tool" or len(parts) < 7:
                raise FormatError("Invalid component URL", url, "malformed tool segment")
            tool = parts[6] or None
            tool_version = parts[7] if len(parts) > 7 and parts[7] else None
        return cls(
            type=type_,
            provider=provider,
            namespace=None if namespace == NO_NAMESPACE else namespace,
            name=name,
            revision=revision,
            tool=tool,
            tool_version=tool_version,
        )

    @classmethod
    def from_object(cls, obj: Mapping[str, Any]) -> "ComponentIdentity":
        """Build an identity from a mapping; unknown keys are ignored.

        Accepts both ``tool_version`` and the persisted ``toolVersion`` key.
        """
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in obj.items() if k in known}
        if "tool_version" not in values and "toolVersion" in obj:
            values["tool_version"] = obj["toolVersion"]
        for required in ("type", "provider", "name"):
            if not values.get(required):
                raise FormatError("Invalid component identity", str(dict(obj)), f"missing {required}")
        values.setdefault("namespace", None)
        return cls(**values)

    def to_url(self) -> str:
        path = [self.type, self.provider, _segment(self.namespace), self.name]
        if self.revision:
            path.append(self.revision)
        if self.tool:
            if not self.revision:
                path.append(NO_NAMESPACE)
            path.extend(["tool", self.tool])
            if self.tool_version:
                path.append(self.tool_version)
        return URL_SCHEME + "/".join(path)

    def to_urn(self) -> str:
        parts = ["urn", self.type, self.provider, _segment(self.namespace), self.name]
        if self.revision:
            parts.extend(["revision", self.revision])
        if self.tool:
            parts.extend(["tool", self.tool])
            if self.tool_version:
                parts.append(self.tool_version)
        return ":".join(parts)

    def with_tool(self, tool: Optional[str], tool_version: Optional[str] = None) -> "ComponentIdentity":
        return replace(self, tool=tool, tool_version=tool_version)

    def group(self, default_tool: Optional[str] = None) -> "ComponentIdentity":
        """Identity shared by all runs of one tool over any revision of this component."""
        return replace(self, revision=None, tool=self.tool or default_tool, tool_version=None)

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def __str__(self) -> str:
        return self.to_url()


def overlay(base: ComponentIdentity, overrides: Mapping[str, Any]) -> ComponentIdentity:
    """Return a new identity where non-None ``overrides`` replace ``base`` fields.

    ``toolVersion`` is accepted as an alias of ``tool_version``.
    """
    known = {f.name for f in fields(ComponentIdentity)}
    changes = {}
    for key, value in overrides.items():
        key = "tool_version" if key == "toolVersion" else key
        if key in known and value is not None:
            changes[key] = value
    return replace(base, **changes)


@dataclass(frozen=True)
class SourceLocation:
    """Where the source code for a component lives (repository or archive)."""

    type: str
    provider: str
    namespace: Optional[str]
    name: str
    revision: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_object(cls, obj: Mapping[str, Any]) -> "SourceLocation":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in obj.items() if k in known}
        values.setdefault("namespace", None)
        return cls(**values)

    @classmethod
    def from_identity(cls, identity: ComponentIdentity, **changes: Any) -> "SourceLocation":
        location = cls(
            type=identity.type,
            provider=identity.provider,
            namespace=identity.namespace,
            name=identity.name,
            revision=identity.revision,
        )
        return replace(location, **changes)

    def to_identity(self) -> ComponentIdentity:
        return ComponentIdentity(
            type=self.type,
            provider=self.provider,
            namespace=self.namespace,
            name=self.name,
            revision=self.revision,
        )

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

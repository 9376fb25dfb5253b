"""
Views over Cloud Controller documents, and the rows our reports produce.

The API hands back one loose JSON shape for every kind of entity: v2 wraps
fields in {"metadata": {...}, "entity": {...}}, v3 leaves them flat. Each view
below picks out only the fields that matter for its kind, from either shape.
"""

from typing import NamedTuple, Tuple


def _split(resource: dict) -> Tuple[dict, dict]:
    """Return (metadata, entity) for a v2 document, or the document twice for v3."""
    if "entity" in resource or "metadata" in resource:
        return resource.get("metadata") or {}, resource.get("entity") or {}
    return resource, resource


def _str(fields: dict, key: str) -> str:
    return fields.get(key) or ""


class Organization(NamedTuple):
    name: str
    spaces_url: str
    users_url: str
    managers_url: str
    billing_managers_url: str
    auditors_url: str

    @classmethod
    def from_resource(cls, resource: dict) -> "Organization":
        _, entity = _split(resource)
        return cls(
            name=_str(entity, "name"),
            spaces_url=_str(entity, "spaces_url"),
            users_url=_str(entity, "users_url"),
            managers_url=_str(entity, "managers_url"),
            billing_managers_url=_str(entity, "billing_managers_url"),
            auditors_url=_str(entity, "auditors_url"),
        )


class Space(NamedTuple):
    name: str
    developers_url: str
    managers_url: str
    auditors_url: str
    apps_url: str

    @classmethod
    def from_resource(cls, resource: dict) -> "Space":
        _, entity = _split(resource)
        return cls(
            name=_str(entity, "name"),
            developers_url=_str(entity, "developers_url"),
            managers_url=_str(entity, "managers_url"),
            auditors_url=_str(entity, "auditors_url"),
            apps_url=_str(entity, "apps_url"),
        )


class User(NamedTuple):
    guid: str
    username: str

    @classmethod
    def from_resource(cls, resource: dict) -> "User":
        metadata, entity = _split(resource)
        return cls(
            guid=_str(metadata, "guid"),
            username=_str(entity, "username"),
        )

    @property
    def display_name(self) -> str:
        # UAA clients and users from other identity zones have no username
        return self.username or self.guid


class App(NamedTuple):
    guid: str
    name: str
    buildpack: str
    detected_buildpack: str

    @classmethod
    def from_resource(cls, resource: dict) -> "App":
        metadata, entity = _split(resource)
        return cls(
            guid=_str(metadata, "guid"),
            name=_str(entity, "name"),
            buildpack=_str(entity, "buildpack"),
            detected_buildpack=_str(entity, "detected_buildpack"),
        )

    @property
    def legacy_buildpack(self) -> str:
        return self.buildpack or self.detected_buildpack


class Buildpack(NamedTuple):
    name: str
    filename: str
    enabled: bool

    @classmethod
    def from_resource(cls, resource: dict) -> "Buildpack":
        _, entity = _split(resource)
        return cls(
            name=_str(entity, "name"),
            filename=_str(entity, "filename"),
            enabled=bool(entity.get("enabled")),
        )


class DropletBuildpack(NamedTuple):
    name: str
    buildpack_name: str
    version: str

    @classmethod
    def from_entry(cls, entry) -> "DropletBuildpack":
        # older droplets list buildpacks as bare names
        if isinstance(entry, str):
            return cls(name=entry, buildpack_name="", version="")
        return cls(
            name=_str(entry, "name"),
            buildpack_name=_str(entry, "buildpack_name"),
            version=_str(entry, "version"),
        )

    @property
    def display_name(self) -> str:
        return self.buildpack_name or self.name


class Droplet(NamedTuple):
    buildpacks: Tuple[DropletBuildpack, ...]

    @classmethod
    def from_resource(cls, resource: dict) -> "Droplet":
        entries = resource.get("buildpacks") or []
        return cls(buildpacks=tuple(DropletBuildpack.from_entry(e) for e in entries))


class UserLineItem(NamedTuple):
    organization: str
    space: str
    username: str
    role: str

    def to_json(self) -> dict:
        item = self._asdict()
        if not self.space:
            del item["space"]
        return item


class BuildpackUsage(NamedTuple):
    organization: str
    space: str
    application: str
    buildpacks: Tuple[str, ...]
    messages: Tuple[str, ...]

    def to_json(self) -> dict:
        item = self._asdict()
        item["buildpacks"] = list(self.buildpacks)
        item["messages"] = list(self.messages)
        return item

"""
The reports: a walk over organizations and spaces, one row per finding.

Everything here is sequential. Each collection is walked with
SimpleClient.walk, so the first error anywhere stops the whole report, except
for droplet lookups in the buildpack report, which are best effort per app.
"""

import logging
import re

import requests
from packaging import version

from .client import APIError
from .resources import (
    App,
    Buildpack,
    BuildpackUsage,
    Droplet,
    Organization,
    Space,
    User,
    UserLineItem,
)

logger = logging.getLogger(__name__)

ORGANIZATIONS_PATH = "/v2/organizations"
BUILDPACKS_PATH = "/v2/buildpacks"
CURRENT_DROPLET_PATH = "/v3/apps/{guid}/droplets/current"

# (role, url attribute) pairs, reported in this order
ORG_USER_ROLE = ("OrgUser", "users_url")
ORG_ROLES = (
    ("OrgManager", "managers_url"),
    ("OrgBillingManager", "billing_managers_url"),
    ("OrgAuditor", "auditors_url"),
)
SPACE_ROLES = (
    ("SpaceDeveloper", "developers_url"),
    ("SpaceManager", "managers_url"),
    ("SpaceAuditor", "auditors_url"),
)

OK = "OK"
DROPLET_FETCH_FAILED = "needs attention (droplet fetch failed)"
NO_DROPLET_BUILDPACKS = "needs attention (no buildpacks in droplet)"

version_matcher = re.compile(r"(\d+\.\d+\.\d+)")


def org_roles(include_org_users: bool = False) -> tuple:
    # org users were judged not terribly meaningful, so they are optional
    if include_org_users:
        return (ORG_USER_ROLE,) + ORG_ROLES
    return ORG_ROLES


def report_users(client, include_org_users: bool = False) -> list:
    """
    Return a UserLineItem for every org and space role held by every user,
    in the order the API lists them.
    """
    all_info = []

    def visit_org(resource):
        org = Organization.from_resource(resource)
        logger.debug("reporting users of org %s", org.name)

        for role, url_attr in org_roles(include_org_users):
            for user_resource in client.iter_resources(getattr(org, url_attr)):
                user = User.from_resource(user_resource)
                all_info.append(UserLineItem(org.name, "", user.display_name, role))

        def visit_space(space_resource):
            space = Space.from_resource(space_resource)
            for role, url_attr in SPACE_ROLES:
                for user_resource in client.iter_resources(getattr(space, url_attr)):
                    user = User.from_resource(user_resource)
                    all_info.append(
                        UserLineItem(org.name, space.name, user.display_name, role)
                    )

        client.walk(org.spaces_url, visit_space)

    client.walk(ORGANIZATIONS_PATH, visit_org)
    return all_info


def build_buildpack_index(client) -> dict:
    """
    Map the name of every enabled buildpack to all the enabled Buildpacks of
    that name, one per stack, sorted by filename.
    """
    found = {}
    for resource in client.iter_resources(BUILDPACKS_PATH):
        buildpack = Buildpack.from_resource(resource)
        if buildpack.enabled:
            found.setdefault(buildpack.name, []).append(buildpack)
    index = {name: tuple(sorted(bps)) for name, bps in found.items()}
    logger.debug("%d enabled buildpacks", len(index))
    return index


def fetch_current_droplet(client, app: App) -> Droplet:
    return Droplet.from_resource(client.get(CURRENT_DROPLET_PATH.format(guid=app.guid)))


def version_mismatch(name: str, app_version: str, enabled: tuple) -> str:
    """Describe how an app's buildpack version differs from the newest enabled one."""
    platform_versions = []
    for bp in enabled:
        found = version_matcher.findall(bp.filename)
        if found:
            try:
                platform_versions.append((version.parse(found[0]), found[0]))
            except version.InvalidVersion:
                pass

    if platform_versions:
        try:
            app_parsed = version.parse(app_version)
        except version.InvalidVersion:
            pass
        else:
            newest, newest_text = max(platform_versions)
            if app_parsed < newest:
                return f"needs attention ({name} v{app_version} is behind enabled v{newest_text})"
            if app_parsed > newest:
                return f"needs attention ({name} v{app_version} is ahead of enabled v{newest_text})"

    filenames = ", ".join(bp.filename for bp in enabled)
    return f"needs attention ({name} v{app_version} does not match {filenames})"


def check_buildpacks(app: App, droplet: Droplet, index: dict) -> tuple:
    """
    Reconcile the buildpacks an app's droplet was built with against the
    enabled buildpacks. Returns (buildpacks, messages).
    """
    buildpacks = []
    messages = []

    if not droplet.buildpacks:
        messages.append(NO_DROPLET_BUILDPACKS)

    for bp in droplet.buildpacks:
        if not bp.version:
            continue
        buildpacks.append(f"{bp.display_name} v{bp.version}")

        enabled = index.get(bp.name)
        if not enabled:
            messages.append(f"needs attention ({bp.name} is not an enabled buildpack)")
        elif not any(e.filename.endswith(f"v{bp.version}.zip") for e in enabled):
            messages.append(version_mismatch(bp.name, bp.version, enabled))

    if not buildpacks and app.legacy_buildpack:
        buildpacks.append(app.legacy_buildpack)

    if not messages:
        messages.append(OK)
    return tuple(buildpacks), tuple(messages)


def app_buildpack_usage(client, index: dict, org: Organization, space: Space, app: App) -> BuildpackUsage:
    try:
        droplet = fetch_current_droplet(client, app)
    except (APIError, requests.RequestException, ValueError) as exc:
        logger.info("unable to fetch the droplet of app %s: %s", app.name, exc)
        return BuildpackUsage(org.name, space.name, app.name, (), (DROPLET_FETCH_FAILED,))

    buildpacks, messages = check_buildpacks(app, droplet, index)
    return BuildpackUsage(org.name, space.name, app.name, buildpacks, messages)


def report_buildpacks(client) -> list:
    """
    Return a BuildpackUsage for every app, flagging apps whose droplet was
    built with a buildpack that is no longer enabled, or with a different
    version of it.
    """
    index = build_buildpack_index(client)
    usage = []

    for org_resource in client.iter_resources(ORGANIZATIONS_PATH):
        org = Organization.from_resource(org_resource)
        for space_resource in client.iter_resources(org.spaces_url):
            space = Space.from_resource(space_resource)
            for app_resource in client.iter_resources(space.apps_url):
                app = App.from_resource(app_resource)
                usage.append(app_buildpack_usage(client, index, org, space, app))

    return usage

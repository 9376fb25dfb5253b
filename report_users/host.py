"""
Endpoint and token lookup from the host `cf` CLI.

Login and token refresh belong to the cf CLI; we only ask it for the current
values. Either can be overridden with CF_API / CF_TOKEN, which is handy in
pipelines where no CLI session exists.
"""

import json
import logging
import os
import subprocess

logger = logging.getLogger(__name__)


class HostError(Exception):
    """The cf CLI could not give us an endpoint or a token."""


def cf_config_path(environ=None) -> str:
    environ = os.environ if environ is None else environ
    cf_home = environ.get("CF_HOME") or os.path.expanduser("~")
    return os.path.join(cf_home, ".cf", "config.json")


def api_endpoint(environ=None) -> str:
    """Return the Cloud Controller URL, ie "https://api.system.example.com"."""
    environ = os.environ if environ is None else environ
    api = environ.get("CF_API")
    if api:
        return api.rstrip("/")

    config_file = cf_config_path(environ)
    try:
        with open(config_file, "r") as f:
            configuration = json.load(f)
    except FileNotFoundError:
        raise HostError(
            f"no cf CLI config at {config_file}; run `cf login` or export CF_API"
        )
    except ValueError as exc:
        raise HostError(f"unable to read {config_file}: {exc}")

    target = configuration.get("Target")
    if not target:
        raise HostError("cf CLI has no API target; run `cf api` or export CF_API")
    return target.rstrip("/")


def access_token(environ=None) -> str:
    """Return an Authorization header value, ie "bearer eyXXXXX"."""
    environ = os.environ if environ is None else environ
    token = environ.get("CF_TOKEN", "").strip()
    if token:
        if " " not in token:
            token = "bearer " + token
        return token

    logger.debug("asking the cf CLI for a token")
    try:
        result = subprocess.run(
            ["cf", "oauth-token"], capture_output=True, check=True, text=True
        )
    except FileNotFoundError:
        raise HostError("the cf CLI is not installed; install it or export CF_TOKEN")
    except subprocess.CalledProcessError as exc:
        raise HostError(
            f"`cf oauth-token` failed, are you logged in? {exc.stderr.strip()}"
        )

    token = result.stdout.strip()
    if not token:
        raise HostError("`cf oauth-token` returned no token; run `cf login`")
    return token

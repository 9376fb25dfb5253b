#!/usr/bin/env python3
description = """
Report all users and their org and space roles in a Cloud Foundry
installation, or the buildpacks every app was staged with.

Uses the API endpoint and token of the logged-in cf CLI; export CF_API and
CF_TOKEN to run without one. Progress is logged to stderr, the report is
written to stdout.
"""

import argparse
import logging
import sys

import requests

from . import __version__, host
from .client import APIError, SimpleClient
from .render import BUILDPACK_HEADER, USER_HEADER, render_json, render_table
from .reports import report_buildpacks, report_users

logger = logging.getLogger("report_users")


def parse_args(argv=None):
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--output-json",
        action="store_true",
        help="if set sends JSON to stdout instead of a rendered table",
    )
    common.add_argument(
        "--quiet",
        action="store_true",
        help="if set suppresses printing of progress messages to stderr",
    )
    common.add_argument(
        "--insecure-skip-verify",
        action="store_true",
        help="if set disables TLS verification",
    )
    common.add_argument("--debug", action="store_true", help="Enable debug logging.")

    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--version", action="version", version=__version__)
    subparsers = parser.add_subparsers(
        dest="command", required=True, help="Run <command> --help for more information."
    )

    users_parser = subparsers.add_parser(
        "report-users", parents=[common], help="Report all users in installation"
    )
    users_parser.add_argument(
        "--org-users",
        action="store_true",
        help="if set include org-users which are otherwise skipped",
    )

    subparsers.add_parser(
        "report-buildpacks",
        parents=[common],
        help="Report the buildpacks used by every app in installation",
    )

    return parser.parse_args(argv)


def setup_logging(args):
    if args.debug:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s - %(levelname)s: %(message)s",
    )
    logger.setLevel(level)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args)

    try:
        client = SimpleClient(
            host.api_endpoint(),
            host.access_token(),
            quiet=args.quiet,
            insecure_skip_verify=args.insecure_skip_verify,
        )
        if args.command == "report-users":
            header = USER_HEADER
            rows = report_users(client, include_org_users=args.org_users)
        else:
            header = BUILDPACK_HEADER
            rows = report_buildpacks(client)
    except (host.HostError, APIError, requests.RequestException, ValueError) as exc:
        logger.debug("%s failed", args.command, exc_info=True)
        sys.exit(f"{args.command}: {exc}")

    logger.info("%d rows", len(rows))
    if args.output_json:
        render_json(rows, sys.stdout)
    else:
        render_table(header, rows, sys.stdout)


if __name__ == "__main__":
    main()

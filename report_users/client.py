"""
A simple Cloud Foundry client: authenticated GETs and next_url paging.
"""

import logging
import warnings

import requests
from urllib3.exceptions import InsecureRequestWarning

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for errors talking to the Cloud Controller."""


class BadStatusError(APIError):
    def __init__(self, path: str, status_code: int):
        super().__init__(f"bad status code {status_code} for GET {path}")
        self.path = path
        self.status_code = status_code


def next_page(page: dict) -> str:
    """Return the relative path of the page after this one, or "" on the last page."""
    return page.get("next_url") or ""


class SimpleClient(object):
    """
    Makes GET requests against one Cloud Controller.

    api is the base URL, ie "https://api.system.example.com", and
    authorization the full header value, ie "bearer eyXXXXX". When quiet is
    set, requests are not logged.
    """

    def __init__(
        self,
        api: str,
        authorization: str,
        quiet: bool = False,
        insecure_skip_verify: bool = False,
        session: requests.Session = None,
    ):
        self.api = api.rstrip("/")
        self.quiet = quiet
        self.verify = not insecure_skip_verify
        self.headers = {"Authorization": authorization, "Accept": "application/json"}
        self.session = session if session is not None else requests.Session()

    def get(self, path: str) -> dict:
        """GET path relative to the API and return the decoded JSON body."""
        if not self.quiet:
            logger.info("GET %s%s", self.api, path)

        with warnings.catch_warnings():
            if not self.verify:
                warnings.simplefilter("ignore", InsecureRequestWarning)
            response = self.session.get(
                self.api + path, headers=self.headers, verify=self.verify
            )

        if response.status_code != 200:
            raise BadStatusError(path, response.status_code)
        return response.json()

    def iter_resources(self, path: str):
        """
        Yield every resource of the collection at path, following next_url
        until it runs out. An empty path is an empty collection.
        """
        while path:
            page = self.get(path)
            for resource in page.get("resources") or []:
                yield resource
            path = next_page(page)

    def walk(self, path: str, visit):
        """
        Call visit for each resource in the collection at path. Anything
        visit raises stops the walk and propagates.
        """
        for resource in self.iter_resources(path):
            visit(resource)

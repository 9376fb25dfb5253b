import unittest
from unittest import mock

import requests

from report_users import client as client_module
from report_users.client import BadStatusError, SimpleClient, next_page

API = "https://api.example.gov"


class Response:
    def __init__(self, body=None, status_code=200):
        self.body = body
        self.status_code = status_code

    def json(self):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body


def v2_resource(guid, name=None) -> dict:
    return {"metadata": {"guid": guid}, "entity": {"name": name}}


def v2_page(resources, next_url=None) -> dict:
    return {"total_results": len(resources), "next_url": next_url, "resources": resources}


def make_client(responses, **kwargs):
    session = mock.Mock()
    session.get.side_effect = responses
    return SimpleClient(API, "bearer a-token", quiet=True, session=session, **kwargs), session


class TestGet(unittest.TestCase):
    def test_get_sends_authorization(self):
        client, session = make_client([Response({"name": "an-org"})])
        result = client.get("/v2/organizations/a-guid")
        self.assertEqual(result, {"name": "an-org"})
        session.get.assert_called_once_with(
            API + "/v2/organizations/a-guid",
            headers={"Authorization": "bearer a-token", "Accept": "application/json"},
            verify=True,
        )

    def test_trailing_slash_on_api_is_ignored(self):
        session = mock.Mock()
        session.get.return_value = Response({})
        client = SimpleClient(API + "/", "bearer a-token", quiet=True, session=session)
        client.get("/v2/info")
        self.assertEqual(session.get.call_args[0][0], API + "/v2/info")

    def test_insecure_skip_verify(self):
        client, session = make_client([Response({})], insecure_skip_verify=True)
        client.get("/v2/info")
        self.assertFalse(session.get.call_args[1]["verify"])

    def test_bad_status_code_raises(self):
        client, _ = make_client([Response({"error_code": "CF-NotAuthorized"}, 403)])
        with self.assertRaises(BadStatusError) as cm:
            client.get("/v2/organizations")
        self.assertEqual(cm.exception.status_code, 403)
        self.assertEqual(cm.exception.path, "/v2/organizations")

    def test_created_is_not_ok(self):
        client, _ = make_client([Response({}, 201)])
        with self.assertRaises(BadStatusError):
            client.get("/v2/organizations")

    def test_decode_error_propagates(self):
        client, _ = make_client([Response(ValueError("Expecting value"))])
        with self.assertRaises(ValueError):
            client.get("/v2/organizations")

    def test_transport_error_propagates(self):
        client, _ = make_client(requests.ConnectionError("connection refused"))
        with self.assertRaises(requests.ConnectionError):
            client.get("/v2/organizations")

    def test_logs_requests_unless_quiet(self):
        with mock.patch.object(client_module.logger, "info") as info:
            client, _ = make_client([Response({}), Response({})])
            client.get("/v2/info")
            info.assert_not_called()

            client.quiet = False
            client.get("/v2/info")
            info.assert_called_once_with("GET %s%s", API, "/v2/info")


class TestNextPage(unittest.TestCase):
    def test_v2_next_url(self):
        self.assertEqual(next_page(v2_page([], "/v2/spaces?page=2")), "/v2/spaces?page=2")

    def test_v2_last_page(self):
        self.assertEqual(next_page(v2_page([])), "")

    def test_missing_next_url(self):
        self.assertEqual(next_page({"resources": []}), "")


class TestIterResources(unittest.TestCase):
    def test_one_page(self):
        resources = [v2_resource(f"guid-{i}") for i in range(10)]
        client, session = make_client([Response(v2_page(resources))])
        result = list(client.iter_resources("/v2/organizations"))
        self.assertEqual(result, resources)
        self.assertEqual(session.get.call_count, 1)

    def test_pages_are_joined_in_order(self):
        first = [v2_resource(f"a-{i}") for i in range(10)]
        second = []
        third = [v2_resource(f"b-{i}") for i in range(5)]
        client, session = make_client(
            [
                Response(v2_page(first, "/v2/organizations?page=2")),
                Response(v2_page(second, "/v2/organizations?page=3")),
                Response(v2_page(third)),
            ]
        )
        result = list(client.iter_resources("/v2/organizations"))
        self.assertEqual(result, first + third)
        self.assertEqual(
            [c[0][0] for c in session.get.call_args_list],
            [
                API + "/v2/organizations",
                API + "/v2/organizations?page=2",
                API + "/v2/organizations?page=3",
            ],
        )

    def test_empty_collection_is_one_request(self):
        client, session = make_client([Response(v2_page([]))])
        self.assertEqual(list(client.iter_resources("/v2/organizations")), [])
        self.assertEqual(session.get.call_count, 1)

    def test_null_resources(self):
        client, _ = make_client([Response({"next_url": None, "resources": None})])
        self.assertEqual(list(client.iter_resources("/v2/organizations")), [])

    def test_empty_path_makes_no_request(self):
        client, session = make_client([])
        self.assertEqual(list(client.iter_resources("")), [])
        session.get.assert_not_called()

    def test_error_on_later_page_propagates(self):
        client, _ = make_client(
            [
                Response(v2_page([v2_resource("one")], "/v2/organizations?page=2")),
                Response({}, 500),
            ]
        )
        seen = []
        with self.assertRaises(BadStatusError):
            for resource in client.iter_resources("/v2/organizations"):
                seen.append(resource)
        self.assertEqual(len(seen), 1)


class TestWalk(unittest.TestCase):
    def test_visits_every_item_once(self):
        pages = [
            [v2_resource("1"), v2_resource("2")],
            [v2_resource("3")],
            [v2_resource("4"), v2_resource("5"), v2_resource("6")],
        ]
        client, _ = make_client(
            [
                Response(v2_page(pages[0], "/v2/users?page=2")),
                Response(v2_page(pages[1], "/v2/users?page=3")),
                Response(v2_page(pages[2])),
            ]
        )
        visited = []
        client.walk("/v2/users", lambda r: visited.append(r["metadata"]["guid"]))
        self.assertEqual(visited, ["1", "2", "3", "4", "5", "6"])

    def test_error_in_visit_stops_walk(self):
        client, session = make_client(
            [
                Response(v2_page([v2_resource(str(i)) for i in range(5)], "/v2/users?page=2")),
                Response(v2_page([v2_resource("later")])),
            ]
        )
        visited = []

        def visit(resource):
            visited.append(resource["metadata"]["guid"])
            if resource["metadata"]["guid"] == "2":
                raise RuntimeError("stop here")

        with self.assertRaises(RuntimeError):
            client.walk("/v2/users", visit)
        self.assertEqual(visited, ["0", "1", "2"])
        self.assertEqual(session.get.call_count, 1)


if __name__ == "__main__":
    unittest.main()

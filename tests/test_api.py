import json
import unittest
from unittest import mock

import requests

from src import api as api_mod
from src.config import AppConfig
from src.monitor import monitor


def _response(status_code=200, payload=None, body=None):
    response = requests.Response()
    response.status_code = status_code
    response.url = "http://backend.test/api/users"
    if body is not None:
        response._content = body
    elif payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
    else:
        response._content = b""
    return response


PAGE_PAYLOAD = {
    "users": [{"id": 1, "name": "Ada", "email": "ada@example.com"}],
    "meta": {"page": 2, "totalPages": 4},
}


class UsersAPITests(unittest.TestCase):
    def setUp(self):
        monitor.reset()
        self.client = api_mod.UsersAPI(AppConfig(api_base_url="http://backend.test/"))
        patcher = mock.patch.object(api_mod, "_session")
        self.session = patcher.start()
        self.addCleanup(patcher.stop)

    def test_list_users_sends_page_and_limit(self):
        self.session.get.return_value = _response(payload=PAGE_PAYLOAD)

        payload = self.client.list_users(2)

        self.assertEqual(payload, PAGE_PAYLOAD)
        self.session.get.assert_called_once_with(
            "http://backend.test/api/users",
            headers={"Content-Type": "application/json"},
            params={"page": 2, "limit": 10},
            timeout=None,
        )
        self.assertEqual(monitor.get_stats()["endpoint_stats"], {"/api/users": 1})

    def test_list_users_http_error(self):
        self.session.get.return_value = _response(500, body=b"boom")

        with self.assertRaises(api_mod.UsersAPIError) as ctx:
            self.client.list_users(1, 10)

        self.assertEqual(ctx.exception.status_code, 500)
        errors = monitor.get_errors()
        self.assertEqual(errors[0]["module"], "API_GET")
        self.assertIn("HTTP 500", errors[0]["message"])

    def test_list_users_transport_error(self):
        self.session.get.side_effect = requests.exceptions.ConnectionError("refused")

        with self.assertRaises(api_mod.UsersAPIError) as ctx:
            self.client.list_users(1)

        self.assertIsNone(ctx.exception.status_code)
        self.assertEqual(monitor.get_stats()["total_calls"], 1)

    def test_list_users_rejects_malformed_payload(self):
        for payload in (
            ["not", "a", "dict"],
            {"users": [], "meta": {"page": 1}},
            {"users": None, "meta": {"page": 1, "totalPages": 1}},
            {"users": [], "meta": {"page": 0, "totalPages": 1}},
        ):
            self.session.get.return_value = _response(payload=payload)
            with self.assertRaises(api_mod.UsersAPIError):
                self.client.list_users(1)

    def test_list_users_rejects_invalid_json(self):
        self.session.get.return_value = _response(body=b"<html>")
        with self.assertRaises(api_mod.UsersAPIError):
            self.client.list_users(1)

    def test_create_user_posts_json(self):
        user = {"name": "Ada", "surname": "L", "email": "a@b", "nickname": "", "password": "pw"}
        self.session.post.return_value = _response(201, payload={"id": 7})

        result = self.client.create_user(user)

        self.assertEqual(result, {"id": 7})
        self.session.post.assert_called_once_with(
            "http://backend.test/api/users",
            headers={"Content-Type": "application/json"},
            json=user,
            timeout=None,
        )

    def test_create_user_empty_body(self):
        self.session.post.return_value = _response(204)
        self.assertEqual(self.client.create_user({}), {"status": 204})

    def test_create_user_http_error(self):
        self.session.post.return_value = _response(409, payload={"error": "exists"})
        with self.assertRaises(api_mod.UsersAPIError) as ctx:
            self.client.create_user({})
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(monitor.get_errors()[0]["module"], "API_POST")

    def test_timeout_is_passed_through(self):
        client = api_mod.UsersAPI(AppConfig(api_base_url="http://backend.test", api_timeout=2.5, page_limit=5))
        self.session.get.return_value = _response(payload=PAGE_PAYLOAD)

        client.list_users(1)

        _, kwargs = self.session.get.call_args
        self.assertEqual(kwargs["timeout"], 2.5)
        self.assertEqual(kwargs["params"], {"page": 1, "limit": 5})


if __name__ == "__main__":
    unittest.main()

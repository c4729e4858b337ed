"""Tests for the blog example."""

from tether.testing import TestClient


class TestBlogApp:
    """Verify path-parameter resolution through the ASGI pipeline."""

    def test_bindings_registered(self, example_app) -> None:
        assert example_app.bindings.names == ("user", "post", "archive")

    async def test_show_user(self, example_client: TestClient) -> None:
        response = await example_client.get("/users/1")
        assert response.status == 200
        assert response.json() == {"id": 1, "name": "Mirko"}

    async def test_show_post_resolves_both(self, example_client: TestClient) -> None:
        response = await example_client.get("/users/1/posts/1")
        assert response.status == 200
        assert response.json() == {
            "user": {"id": 1, "name": "Mirko"},
            "post": {"id": 1, "title": "Hello, tether", "author_id": 1},
        }

    async def test_unknown_user(self, example_client: TestClient) -> None:
        response = await example_client.get("/users/999/posts/1")
        assert response.status == 404
        assert response.json() == {"error": "404: No user 999", "param": "user"}

    async def test_post_of_other_author(self, example_client: TestClient) -> None:
        response = await example_client.get("/users/2/posts/1")
        assert response.status == 404
        assert response.json()["param"] == "post"

    async def test_offloaded_resolver(self, example_client: TestClient) -> None:
        response = await example_client.get("/archive/2")
        assert response.status == 200
        assert response.json() == {
            "titles": ["Hello, tether", "Resolvers all the way down"],
        }

    async def test_archive_compares_ids_numerically(self, example_client: TestClient) -> None:
        response = await example_client.get("/archive/10")
        assert response.status == 200
        assert response.json()["titles"] == [
            "Hello, tether",
            "Resolvers all the way down",
            "Notes from Ana",
            "Ten posts in",
        ]

    async def test_archive_rejects_non_numeric(self, example_client: TestClient) -> None:
        response = await example_client.get("/archive/latest")
        assert response.status == 404

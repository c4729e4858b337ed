"""Blog — path parameters resolved into domain objects.

Demonstrates ``@app.param`` resolvers, a resolver that depends on an
earlier one, a blocking resolver offloaded to a worker thread, and a
``ResolutionFailure`` error handler.

Run with any ASGI server:
    uvicorn app:app
"""

import time
from dataclasses import dataclass

from tether import App, NotFound, Request, RequestContext, ResolutionFailure


@dataclass(frozen=True, slots=True)
class User:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class Post:
    id: int
    title: str
    author_id: int


USERS = {1: User(1, "Mirko"), 2: User(2, "Ana")}
POSTS = {
    1: Post(1, "Hello, tether", author_id=1),
    2: Post(2, "Resolvers all the way down", author_id=1),
    3: Post(3, "Notes from Ana", author_id=2),
    10: Post(10, "Ten posts in", author_id=1),
}

app = App()


@app.param("user")
async def load_user(raw: str) -> User:
    if not raw.isdigit() or int(raw) not in USERS:
        raise NotFound(f"No user {raw}")
    return USERS[int(raw)]


@app.param("post")
def load_post(raw: str, request: Request, context: RequestContext) -> Post:
    post = POSTS.get(int(raw)) if raw.isdigit() else None
    # Posts only resolve under their own author
    if post is None or post.author_id != context["user"].id:
        raise NotFound(f"No post {raw} for this user")
    return post


@app.param("archive", offload=True)
def load_archive(raw: str) -> list[Post]:
    time.sleep(0.01)  # stands in for a slow, blocking query
    return [post for post in POSTS.values() if post.id <= int(raw)]


@app.route("/users/{user}")
def show_user(user: User):
    return user


@app.route("/users/{user}/posts/{post}")
def show_post(user: User, post: Post):
    return {"user": user, "post": post}


@app.route("/archive/{archive:int}")
def archive(archive: list[Post]):
    return {"titles": [post.title for post in archive]}


@app.error(ResolutionFailure)
def resolution_failed(request: Request, exc: ResolutionFailure):
    return {"error": exc.info.message, "param": exc.info.name}, exc.status

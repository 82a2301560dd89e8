"""Change assertions against a tiny in-memory post store."""

import re
from dataclasses import dataclass, field

from shouldkit import Between, Suite, TestContext


@dataclass
class Post:
    title: str
    published: bool = False


@dataclass
class PostStore:
    posts: list[Post] = field(default_factory=list)

    def count(self) -> int:
        return len(self.posts)


class BlogContext(TestContext):
    def __init__(self):
        super().__init__()
        self.store = PostStore([Post("draft: hello")])
        self.post = self.store.posts[0]


suite = Suite("A blog", context_factory=BlogContext)

creating = suite.context("creating a post")


@creating.setup
def create(ctx):
    ctx.store.posts.append(Post("second"))


creating.should_change(lambda ctx: ctx.store.count(), label="store.count()", by=1)
creating.should_change(lambda ctx: ctx.store.count(), label="store.count()", from_=1, to=2)
creating.should_not_change("post.title")

publishing = suite.context("publishing the first post")


@publishing.setup
def publish(ctx):
    ctx.post.title = "hello"
    ctx.post.published = True


publishing.should_change("post.title", from_=re.compile(r"^draft"), to="hello")
publishing.should_change("post.published", to=True)
publishing.should_change(lambda ctx: ctx.store.count(), label="store.count()", by=0)
publishing.should_not_change(lambda ctx: ctx.store.count(), label="store.count()")
publishing.should_change(lambda ctx: len(ctx.post.title), label="len(title)", to=Between(1, 5))

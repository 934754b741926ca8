"""Database fixtures for berryfilter tests (shared)."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Post, PostComment, PostStatus, User


async def create_sample_users(session: AsyncSession):
    """Create and commit the sample users used across tests and demos."""
    users = [
        User(name="Alice Johnson", email="alice@example.com", age=34, is_admin=True),
        User(name="Bob Smith", email="bob@example.com", age=27, is_admin=False),
        User(name="Charlie Brown", email="charlie@example.com", age=41, is_admin=False),
        User(name="Dave NoPosts", email="dave@example.com", age=None, is_admin=False),
    ]
    session.add_all(users)
    await session.flush()
    await session.commit()
    return users


@pytest.fixture(scope="function")
async def sample_users(db_session: AsyncSession):
    return await create_sample_users(db_session)


async def create_sample_posts(session: AsyncSession, users):
    """Create and commit the sample posts."""
    alice, bob, charlie, _ = users
    posts = [
        Post(title="First Post", content="Hello world!", author_id=alice.id, status=PostStatus.PUBLISHED, rating=4.0),
        Post(title="GraphQL is Great", content="I love GraphQL!", author_id=alice.id, status=PostStatus.PUBLISHED, rating=4.5),
        Post(title="SQLAlchemy Tips", content="Some useful tips...", author_id=bob.id, status=PostStatus.DRAFT, rating=None),
        Post(title="Python Best Practices", content="Here are some tips...", author_id=bob.id, status=PostStatus.PUBLISHED, rating=3.5),
        Post(title="Getting Started", content="A beginner's guide", author_id=charlie.id, status=PostStatus.ARCHIVED, rating=2.0),
    ]
    session.add_all(posts)
    await session.flush()
    await session.commit()
    return posts


@pytest.fixture(scope="function")
async def sample_posts(db_session: AsyncSession, sample_users):
    return await create_sample_posts(db_session, sample_users)


async def create_sample_comments(session: AsyncSession, users, posts):
    alice, bob, charlie, _ = users
    comments = [
        PostComment(content="Great post!", rate=5, post_id=posts[0].id, author_id=bob.id),
        PostComment(content="Thanks", rate=3, post_id=posts[0].id, author_id=alice.id),
        PostComment(content="Very helpful", rate=4, post_id=posts[2].id, author_id=charlie.id),
        PostComment(content="Meh", rate=1, post_id=posts[3].id, author_id=alice.id),
    ]
    session.add_all(comments)
    await session.flush()
    await session.commit()
    return comments


async def seed_populated_db(session: AsyncSession):
    """Seed users, posts and comments; shared by the tests and the demo app."""
    users = await create_sample_users(session)
    posts = await create_sample_posts(session, users)
    comments = await create_sample_comments(session, users, posts)
    return {'users': users, 'posts': posts, 'comments': comments}


@pytest.fixture(scope="function")
async def populated_db(db_session: AsyncSession):
    return await seed_populated_db(db_session)

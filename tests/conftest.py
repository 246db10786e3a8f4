"""Central test fixtures - imports from the content_app fixtures."""

import pytest

from contour import InMemoryContentNode, Projector, ProjectionHooks, ProjectionSettings
from contour.metadata import TypeMetadataCache


@pytest.fixture
def article_node() -> InMemoryContentNode:
    """Create an article content node with invariant and French values."""
    return InMemoryContentNode(
        type_alias="article",
        name="Hello world",
        properties={
            "title": "Hello",
            "bodyText": "<p>Hi there</p>",
            "tags": "news, python ,",
            "authors": "Ada; Grace",
            "leadAuthor": "Ada; Grace",
            "wordCount": "42",
        },
        variants={"fr-FR": {"title": "Bonjour"}},
    )


@pytest.fixture
def hooks() -> ProjectionHooks:
    """Create an isolated hook registry."""
    return ProjectionHooks()


@pytest.fixture
def settings() -> ProjectionSettings:
    """Create settings independent of the environment."""
    return ProjectionSettings(default_culture="en-GB", log_timings=False)


@pytest.fixture
def projector(settings: ProjectionSettings, hooks: ProjectionHooks) -> Projector:
    """Create a projector with its own hooks and metadata cache."""
    return Projector(settings=settings, hooks=hooks, metadata=TypeMetadataCache())


@pytest.fixture(autouse=True)
def clear_ambient_state():
    """Automatically clear the ambient culture and global hooks after each test."""
    yield
    from contour import clear_culture, hooks

    clear_culture()
    hooks.clear()

"""Tests for ProjectionScenario testing utility."""

import pytest

from contour import ConfigurationError, Decision
from contour.testing import ProjectionScenario
from tests.fixtures.content_app import Article, Author, TwoArguments


def test_scenario_with_property_values(projector, article_node):
    with ProjectionScenario(Article, projector) as scenario:
        scenario.given(article_node).should_have(title="Hello", word_count=42)


def test_scenario_in_culture(projector, article_node):
    with ProjectionScenario(Article, projector) as scenario:
        scenario.given(article_node).in_culture("fr-FR").should_have(
            title="Bonjour", culture="fr-FR"
        )


def test_scenario_with_predicate(projector, article_node):
    with ProjectionScenario(Article, projector) as scenario:
        scenario.given(article_node).should_match(lambda a: Author("Grace") in a.authors)


def test_lazy_properties_are_deferred_even_when_read_later(projector, article_node):
    with ProjectionScenario(Article, projector) as scenario:
        scenario.given(article_node).should_defer("body_text").should_have(
            body_text="<p>Hi there</p>"
        )


def test_scenario_expecting_cancellation(projector, article_node):
    with ProjectionScenario(Article, projector) as scenario:
        scenario.given(article_node).when_converting(
            lambda event: Decision.CANCEL
        ).should_be_cancelled()


def test_scenario_with_converted_callback(projector, article_node):
    def shout(event) -> None:
        event.converted.title = event.converted.title.upper()

    with ProjectionScenario(Article, projector) as scenario:
        scenario.given(article_node).when_converted(shout).should_have(title="HELLO")


def test_scenario_expecting_error(projector, article_node):
    with ProjectionScenario(TwoArguments, projector) as scenario:
        scenario.given(article_node).should_raise(ConfigurationError)


def test_scenario_without_context_manager(projector, article_node):
    scenario = ProjectionScenario(Article, projector)
    scenario.given(article_node).should_have(title="Hello")
    scenario.execute_scenario()


def test_scenario_fails_when_value_differs(projector, article_node):
    with pytest.raises(AssertionError, match="should have title == 'Bye'"):
        with ProjectionScenario(Article, projector) as scenario:
            scenario.given(article_node).should_have(title="Bye")


def test_scenario_fails_when_not_cancelled(projector, article_node):
    with pytest.raises(AssertionError, match="should be cancelled"):
        with ProjectionScenario(Article, projector) as scenario:
            scenario.given(article_node).should_be_cancelled()


def test_scenario_fails_when_property_is_not_lazy(projector, article_node):
    with pytest.raises(AssertionError, match="should defer title"):
        with ProjectionScenario(Article, projector) as scenario:
            scenario.given(article_node).should_defer("title")


def test_scenario_needs_content(projector):
    with pytest.raises(ValueError, match="given"):
        ProjectionScenario(Article, projector).execute_scenario()

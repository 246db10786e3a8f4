import logging
from typing import Annotated

import pytest
from markupsafe import Markup

from contour import (
    CallableResolver,
    ConfigurationError,
    ConvertWith,
    DependencyContainer,
    ResolveWith,
)
from contour.metadata import collect_properties
from contour.resolution import Converted, ValueResolutionPipeline
from tests.fixtures.content_app import (
    Article,
    Author,
    CommaSeparatedConverter,
    CountingResolver,
    DecliningConverter,
    ExplodingConverter,
    FailingResolver,
    Link,
    Point,
    UpperCaseConverter,
)


def prop(cls: type, name: str):
    return next(p for p in collect_properties(cls) if p.name == name)


@pytest.fixture
def container() -> DependencyContainer:
    return DependencyContainer()


@pytest.fixture
def pipeline(container) -> ValueResolutionPipeline:
    return ValueResolutionPipeline(container)


def materialize(pipeline, node, cls, name, culture="en-US"):
    return pipeline.materialize(node, culture, prop(cls, name), None)


class TestResolution:
    def test_default_resolver_reads_content(self, pipeline, article_node):
        assert materialize(pipeline, article_node, Article, "title") == Converted("Hello")

    def test_hinted_resolver(self, pipeline, article_node):
        outcome = materialize(pipeline, article_node, Article, "url")
        assert outcome == Converted(f"/article/{article_node.id}/")

    def test_hinted_resolver_instance(self, pipeline, article_node):
        class Page:
            slug: Annotated[str, ResolveWith(CallableResolver(lambda ctx: "hello-world"))] = ""

        assert materialize(pipeline, article_node, Page, "slug") == Converted("hello-world")

    def test_resolvers_are_obtained_from_the_container(self, container, pipeline, article_node):
        counting = CountingResolver("from the container")
        container.register_instance(CountingResolver, counting)

        class Page:
            teaser: Annotated[str, ResolveWith(CountingResolver)] = ""

        assert materialize(pipeline, article_node, Page, "teaser") == Converted("from the container")
        assert counting.calls == 1

    def test_failing_resolver_is_absorbed(self, pipeline, article_node, caplog):
        class Page:
            title: Annotated[str, ResolveWith(FailingResolver)] = ""

        with caplog.at_level(logging.WARNING, logger="contour.resolution.pipeline"):
            assert materialize(pipeline, article_node, Page, "title") is None

        record = caplog.records[-1]
        assert record.property == "title"
        assert record.content_id == str(article_node.id)
        assert "content backend unavailable" in record.getMessage()

    def test_resolver_of_the_wrong_kind_is_a_configuration_error(self, pipeline, article_node):
        class Page:
            title: Annotated[str, ResolveWith(CommaSeparatedConverter)] = ""  # type: ignore[arg-type]

        with pytest.raises(ConfigurationError, match="not a ValueResolver"):
            materialize(pipeline, article_node, Page, "title")

    def test_resolver_that_cannot_be_built_is_a_configuration_error(self, pipeline, article_node):
        class NeedsService(CountingResolver):
            def __init__(self, service: "UnregisteredService"):  # noqa: F821
                super().__init__()

        class Page:
            title: Annotated[str, ResolveWith(NeedsService)] = ""

        with pytest.raises(ConfigurationError, match="NeedsService"):
            materialize(pipeline, article_node, Page, "title")


class TestConversion:
    def test_hinted_converter_wins(self, pipeline, article_node):
        outcome = materialize(pipeline, article_node, Article, "tags")
        assert outcome == Converted(["news", "python"])

    def test_declined_converter_falls_through(self, pipeline, article_node, container):
        declining = DecliningConverter()
        container.register_instance(DecliningConverter, declining)

        class Page:
            word_count: Annotated[int, ConvertWith(DecliningConverter)] = 0

        assert materialize(pipeline, article_node, Page, "word_count") == Converted(42)
        assert declining.asked == 1

    def test_failing_converter_produces_no_value(self, pipeline, article_node):
        class Page:
            title: Annotated[str, ConvertWith(ExplodingConverter)] = ""

        assert materialize(pipeline, article_node, Page, "title") is None

    def test_hint_is_tried_before_identity(self, pipeline, article_node):
        class Page:
            title: Annotated[str, ConvertWith(UpperCaseConverter)] = ""

        assert materialize(pipeline, article_node, Page, "title") == Converted("HELLO")

    def test_declined_hint_falls_back_to_identity(self, pipeline, article_node, container):
        declining = DecliningConverter()
        container.register_instance(DecliningConverter, declining)

        class Page:
            title: Annotated[str, ConvertWith(DecliningConverter)] = ""

        assert materialize(pipeline, article_node, Page, "title") == Converted("Hello")
        assert declining.asked == 1

    def test_markup_properties(self, pipeline, article_node):
        outcome = materialize(pipeline, article_node, Article, "body_text")
        assert outcome == Converted(Markup("<p>Hi there</p>"))
        assert isinstance(outcome.value, Markup)

    def test_markup_hint_wins_over_markup_converter(self, pipeline, article_node):
        class Page:
            title: Annotated[Markup, ConvertWith(UpperCaseConverter)] = Markup("")

        assert materialize(pipeline, article_node, Page, "title") == Converted("HELLO")

    def test_missing_value_produces_nothing(self, pipeline, article_node):
        class Page:
            subtitle: str = ""

        assert materialize(pipeline, article_node, Page, "subtitle") is None

    def test_values_of_the_declared_type_pass_through(self, pipeline, article_node):
        node = article_node.model_copy(update={"properties": {"authors": [Author("Ada")]}})

        class Page:
            authors: list = []

        outcome = materialize(pipeline, node, Page, "authors")
        assert outcome.value[0] is node.properties["authors"][0]

    def test_generic_conversion(self, pipeline, article_node):
        assert materialize(pipeline, article_node, Article, "word_count") == Converted(42)

    def test_model_validator_errors_produce_nothing(self, pipeline, article_node, caplog):
        node = article_node.model_copy(update={"properties": {"link": {"url": "/x"}}})

        class Page:
            link: Link | None = None

        with caplog.at_level(logging.WARNING, logger="contour.resolution.pipeline"):
            assert materialize(pipeline, node, Page, "link") is None

        record = caplog.records[-1]
        assert record.property == "link"
        assert isinstance(record.exc_info[1], KeyError)

    def test_dataclass_post_init_errors_produce_nothing(self, pipeline, article_node):
        node = article_node.model_copy(update={"properties": {"origin": {"x": -1}}})

        class Page:
            origin: Point | None = None

        assert materialize(pipeline, node, Page, "origin") is None

    def test_validation_errors_are_not_logged(self, pipeline, article_node, caplog):
        node = article_node.model_copy(update={"properties": {"origin": {"x": "far"}}})

        class Page:
            origin: Point | None = None

        with caplog.at_level(logging.WARNING, logger="contour.resolution.pipeline"):
            assert materialize(pipeline, node, Page, "origin") is None
        assert not caplog.records

    def test_unconvertible_value_produces_nothing(self, pipeline, article_node):
        class Page:
            title: int = 0

        assert materialize(pipeline, article_node, Page, "title") is None


class TestReshaping:
    def test_sequence_output_fills_sequence_property(self, pipeline, article_node):
        outcome = materialize(pipeline, article_node, Article, "authors")
        assert outcome == Converted([Author("Ada"), Author("Grace")])

    def test_single_output_is_wrapped_for_sequence_property(self, pipeline, article_node):
        node = article_node.model_copy(update={"properties": {"authors": "Ada"}})
        outcome = materialize(pipeline, node, Article, "authors")
        assert outcome == Converted([Author("Ada")])

    def test_sequence_output_into_tuple_property(self, pipeline, article_node):
        class Page:
            authors: tuple[Author, ...] = ()

        outcome = materialize(pipeline, article_node, Page, "authors")
        assert outcome == Converted((Author("Ada"), Author("Grace")))

    def test_first_element_for_scalar_property(self, pipeline, article_node):
        outcome = materialize(pipeline, article_node, Article, "lead_author")
        assert outcome == Converted(Author("Ada"))

    def test_empty_sequence_output_for_scalar_property_produces_nothing(
        self, pipeline, article_node
    ):
        node = article_node.model_copy(update={"properties": {"leadAuthor": " ; "}})
        assert materialize(pipeline, node, Article, "lead_author") is None

"""Destination types, resolvers and converters used across the tests."""

from .converters import (
    Author,
    AuthorConverter,
    CommaSeparatedConverter,
    DecliningConverter,
    ExplodingConverter,
    UpperCaseConverter,
)
from .models import (
    Article,
    ContentAwarePage,
    Link,
    Point,
    Settings,
    Summary,
    TwoArguments,
    WrongSingleArgument,
)
from .resolvers import CountingResolver, CultureResolver, FailingResolver, UrlResolver

__all__ = [
    "Article",
    "Author",
    "AuthorConverter",
    "CommaSeparatedConverter",
    "ContentAwarePage",
    "CountingResolver",
    "CultureResolver",
    "DecliningConverter",
    "ExplodingConverter",
    "FailingResolver",
    "Link",
    "Point",
    "Settings",
    "Summary",
    "TwoArguments",
    "UpperCaseConverter",
    "UrlResolver",
    "WrongSingleArgument",
]

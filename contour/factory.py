"""Construction of destination type instances."""

from typing import TypeVar

from .content import ContentNode
from .exceptions import InstanceCreationError
from .metadata import ConstructorKind, ConstructorSignature

T = TypeVar("T")


class InstanceFactory:
    """Builds bare destination instances from a cached constructor signature."""

    def create(
        self,
        destination_type: type[T],
        signature: ConstructorSignature,
        content: ContentNode | None = None,
    ) -> T:
        """Create an instance with no properties resolved yet.

        Args:
            destination_type: The type to instantiate.
            signature: The constructor signature of that type.
            content: The content node, passed to constructors that take one.

        Raises:
            InstanceCreationError: If the constructor raised.
        """
        try:
            if signature.kind is ConstructorKind.PARAMETERLESS:
                return destination_type()
            if signature.keyword_only:
                return destination_type(**{signature.parameter: content})  # type: ignore[dict-item]
            return destination_type(content)  # type: ignore[call-arg]
        except Exception as exc:
            raise InstanceCreationError(destination_type, exc) from exc

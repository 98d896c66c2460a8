"""Conversion between records, parameter strings and XML fragments."""

from typing import Any, Dict, Type, TypeVar
from xml.etree.ElementTree import Element

from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)

# Derived fields are computed client-side and never sent
_DERIVED_FIELDS = {"full_url", "duration"}


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_query_string(model: BaseModel, include_nulls: bool = False) -> str:
    """Render a record as an unescaped ``name=value&...`` parameter string.

    Args:
        model: Record whose field aliases are the parameter names
        include_nulls: Emit ``name=`` for unset fields instead of skipping them

    Returns:
        Parameter string in field declaration order
    """
    data = model.model_dump(by_alias=True, mode="json", exclude=_DERIVED_FIELDS)

    pairs = []
    for name, value in data.items():
        if value is None:
            if include_nulls:
                pairs.append(f"{name}=")
            continue
        pairs.append(f"{name}={_format_value(value)}")
    return "&".join(pairs)


def element_to_dict(element: Element) -> Dict[str, Any]:
    """Flatten an XML fragment into a dictionary.

    Attributes and the text of leaf children are merged; an attribute wins
    over a child element of the same name. Empty leaves become None.
    """
    data: Dict[str, Any] = {}
    for child in element:
        if len(child) == 0:
            text = child.text.strip() if child.text else ""
            data[child.tag] = text or None
    data.update(element.attrib)
    return data


def from_element(model_cls: Type[ModelT], element: Element) -> ModelT:
    """Parse an XML fragment into ``model_cls``.

    Raises:
        pydantic.ValidationError: If the fragment does not fit the record
    """
    return model_cls.model_validate(element_to_dict(element))

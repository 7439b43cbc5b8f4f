# This file turns raw keyed records into domain records before they are formatted.
# A payload like {"id": 5, "name": ...} is built into a new model instance; when it
# carries keys the model does not know, the existing record(s) are looked up by id.

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session

from jsonapi_utils.collection import QueryCollection
from jsonapi_utils.errors import RecordConversionError
from jsonapi_utils.resources import read_field

LOGGER = logging.getLogger("jsonapi_utils.models")


class ModelFactory(Protocol):
    def known_fields(self) -> set[str]: ...

    def build(self, attributes: Mapping[str, Any]) -> Any: ...

    def find(self, record_id: Any) -> Any | None: ...

    def find_all(self, record_ids: Sequence[Any]) -> Any: ...


class SQLAlchemyModelFactory:
    """Builds and looks up instances of a mapped SQLAlchemy class."""

    def __init__(self, model: type, session: Session) -> None:
        self.model = model
        self.session = session

    def __repr__(self) -> str:
        return f"SQLAlchemyModelFactory({self.model.__name__})"

    def known_fields(self) -> set[str]:
        return set(inspect(self.model).attrs.keys())

    def build(self, attributes: Mapping[str, Any]) -> Any:
        unknown = sorted(set(attributes) - self.known_fields())
        if unknown:
            raise RecordConversionError(self.model.__name__, unknown)
        return self.model(**attributes)

    def find(self, record_id: Any) -> Any | None:
        if record_id is None:
            return None
        return self.session.get(self.model, record_id)

    def find_all(self, record_ids: Sequence[Any]) -> QueryCollection:
        primary_key = inspect(self.model).primary_key[0]
        ids = [record_id for record_id in record_ids if record_id is not None]
        return QueryCollection(self.session, select(self.model).where(primary_key.in_(ids)))


def as_model_factory(model: Any, session: Session | None = None) -> Any:
    """Accept either a ready factory or a mapped class plus a session."""

    if model is None or not isinstance(model, type):
        return model
    if session is None:
        raise ValueError(f"A session is required to build {model.__name__} records")
    return SQLAlchemyModelFactory(model, session)


def convert_raw_records(data: Any, factory: ModelFactory | None) -> Any:
    """Instantiate `data` (one mapping or a list of them) through the factory."""

    if factory is None or data is None:
        return data

    many = isinstance(data, Sequence) and not isinstance(data, (str, bytes, Mapping))
    items = list(data) if many else [data]
    try:
        built = [factory.build(dict(item)) for item in items]
    except RecordConversionError as exc:
        LOGGER.info("falling back to lookup by id reason=%s", exc)
        if many:
            return factory.find_all([read_field(item, "id") for item in items])
        return factory.find(read_field(data, "id"))
    return built if many else built[0]

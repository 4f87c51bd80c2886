"""Conversion between structured models, protobuf messages and wire bytes."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Type, TypeVar

from google.protobuf.descriptor import FieldDescriptor
from google.protobuf.message import DecodeError, Message
from pydantic import BaseModel, ValidationError

from core.exceptions import (
    ConversionException,
    RequestSerializationException,
    ResponseDeserializationException,
)

M = TypeVar("M", bound=BaseModel)

RequestSerializer = Callable[[Any], bytes]
ResponseDeserializer = Callable[[bytes], BaseModel]


def is_object(value: Any) -> bool:
    return isinstance(value, Mapping)


def convert_object_to_metadata(metadata: Mapping[str, Any]) -> tuple[tuple[str, Any], ...]:
    """Mapping -> grpc metadata pairs. grpc requires lower-case keys."""
    return tuple((str(key).lower(), value) for key, value in metadata.items())


def _is_repeated(field: FieldDescriptor) -> bool:
    # protobuf >= 5.29 exposes is_repeated and deprecates label
    is_repeated = getattr(field, "is_repeated", None)
    if is_repeated is not None:
        return bool(is_repeated)
    return field.label == FieldDescriptor.LABEL_REPEATED


def _is_message(field: FieldDescriptor) -> bool:
    return field.type == FieldDescriptor.TYPE_MESSAGE


def message_to_dict(message: Message) -> dict[str, Any]:
    """Every field of ``message`` as plain python values.

    Unset oneof members are omitted; bytes are kept raw.
    """
    result: dict[str, Any] = {}
    for field in message.DESCRIPTOR.fields:
        oneof = field.containing_oneof
        if oneof is not None and message.WhichOneof(oneof.name) != field.name:
            continue
        value = getattr(message, field.name)
        if _is_repeated(field):
            if _is_message(field):
                result[field.name] = [message_to_dict(item) for item in value]
            else:
                result[field.name] = list(value)
        elif _is_message(field):
            result[field.name] = message_to_dict(value) if message.HasField(field.name) else None
        else:
            result[field.name] = value
    return result


def _fill_message(message: Message, data: Mapping[str, Any]) -> None:
    fields = message.DESCRIPTOR.fields_by_name
    for name, value in data.items():
        if value is None:
            continue
        field = fields.get(name)
        if field is None:
            raise ConversionException(
                f"Unknown field {name!r}",
                message_type=message.DESCRIPTOR.full_name,
                field=name,
            )
        try:
            if _is_repeated(field):
                target = getattr(message, name)
                if _is_message(field):
                    for item in value:
                        _fill_message(target.add(), item)
                else:
                    target.extend(value)
            elif _is_message(field):
                sub = getattr(message, name)
                sub.SetInParent()
                _fill_message(sub, value)
            else:
                setattr(message, name, value)
        except (TypeError, ValueError) as exc:
            raise ConversionException(
                f"Invalid value for field {name!r}: {exc}",
                message_type=message.DESCRIPTOR.full_name,
                field=name,
            ) from exc


def dict_to_message(message_cls: Type[Message], data: Mapping[str, Any]) -> Message:
    message = message_cls()
    _fill_message(message, data)
    return message


def request_serializer_factory(message_cls: Type[Message]) -> RequestSerializer:
    """Build ``request -> wire bytes`` for one request type.

    The request may be a pydantic model, a plain mapping or an already built
    ``message_cls`` instance.
    """
    type_name = message_cls.DESCRIPTOR.full_name

    def serialize(request: Any) -> bytes:
        if isinstance(request, message_cls):
            return request.SerializeToString()
        if isinstance(request, BaseModel):
            data = request.model_dump()
        elif is_object(request):
            data = request
        else:
            raise RequestSerializationException(
                f"Cannot serialize {type(request).__name__} as {type_name}",
                message_type=type_name,
            )
        try:
            return dict_to_message(message_cls, data).SerializeToString()
        except ConversionException as exc:
            raise RequestSerializationException(
                exc.message, message_type=type_name, field=exc.field
            ) from exc

    return serialize


def response_deserializer_factory(message_cls: Type[Message], model_cls: Type[M]) -> Callable[[bytes], M]:
    """Build ``wire bytes -> structured model`` for one response type.

    ``message_cls`` decodes the wire format, ``model_cls`` validates the result.
    """
    type_name = message_cls.DESCRIPTOR.full_name

    def deserialize(data: bytes) -> M:
        try:
            message = message_cls.FromString(data)
        except DecodeError as exc:
            raise ResponseDeserializationException(
                f"Malformed {type_name}: {exc}", message_type=type_name
            ) from exc
        try:
            return model_cls.model_validate(message_to_dict(message))
        except ValidationError as exc:
            raise ResponseDeserializationException(
                f"Invalid {type_name}: {exc}", message_type=type_name
            ) from exc

    return deserialize

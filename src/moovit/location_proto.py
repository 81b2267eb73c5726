"""Protobuf schema and codec for the location search endpoint.

The server does not publish a .proto file, so the message types are
described here with a FileDescriptorProto and built at import time::

    message Coordinates      { int32 latitude = 1; int32 longitude = 2; }
    message MetroInfo        { int32 metroId = 1; }
    message LocationQuery    { double latitude = 1; double longitude = 2; string query = 3; }
    message LocationResult   { int32 type = 1; int64 id = 2; MetroInfo metro = 3;
                               string name = 4; string subtitle = 5;
                               Coordinates coordinates = 6; }
    message LocationResponse { repeated LocationResult results = 2; }
"""

import logging
from typing import List

from google.protobuf import descriptor_pb2, descriptor_pool, message, message_factory

from .coordinates import from_scaled
from .errors import ProtobufError
from .models import LocationSearchResult

logger = logging.getLogger(__name__)

_PACKAGE = "moovit.location"

_F = descriptor_pb2.FieldDescriptorProto

LOCATION_TYPES = {
    2: "address",
    3: "poi",
    4: "stop",
}


def _add_message(file_proto, name, field_specs):
    msg = file_proto.message_type.add()
    msg.name = name
    for field_name, number, field_type, label, type_name in field_specs:
        f = msg.field.add()
        f.name = field_name
        f.number = number
        f.type = field_type
        f.label = label
        if type_name:
            f.type_name = f".{_PACKAGE}.{type_name}"


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = "moovit/location.proto"
    file_proto.package = _PACKAGE
    # proto2 semantics keep field presence, so absent subtitle/metro can be told apart
    file_proto.syntax = "proto2"

    opt = _F.LABEL_OPTIONAL
    _add_message(file_proto, "Coordinates", [
        ("latitude", 1, _F.TYPE_INT32, opt, None),
        ("longitude", 2, _F.TYPE_INT32, opt, None),
    ])
    _add_message(file_proto, "MetroInfo", [
        ("metroId", 1, _F.TYPE_INT32, opt, None),
    ])
    _add_message(file_proto, "LocationQuery", [
        ("latitude", 1, _F.TYPE_DOUBLE, opt, None),
        ("longitude", 2, _F.TYPE_DOUBLE, opt, None),
        ("query", 3, _F.TYPE_STRING, opt, None),
    ])
    _add_message(file_proto, "LocationResult", [
        ("type", 1, _F.TYPE_INT32, opt, None),
        ("id", 2, _F.TYPE_INT64, opt, None),
        ("metro", 3, _F.TYPE_MESSAGE, opt, "MetroInfo"),
        ("name", 4, _F.TYPE_STRING, opt, None),
        ("subtitle", 5, _F.TYPE_STRING, opt, None),
        ("coordinates", 6, _F.TYPE_MESSAGE, opt, "Coordinates"),
    ])
    _add_message(file_proto, "LocationResponse", [
        ("results", 2, _F.TYPE_MESSAGE, _F.LABEL_REPEATED, "LocationResult"),
    ])
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.Add(_build_file_descriptor())


def _message_class(name: str):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{_PACKAGE}.{name}"))


LocationQuery = _message_class("LocationQuery")
LocationResult = _message_class("LocationResult")
LocationResponse = _message_class("LocationResponse")


def encode_location_query(lat: float, lon: float, query: str) -> bytes:
    """
    Encode a location search request.

    Args:
        lat: Bias latitude in degrees.
        lon: Bias longitude in degrees.
        query: Free-text search query.

    Returns:
        Serialized LocationQuery message.
    """
    try:
        msg = LocationQuery(latitude=lat, longitude=lon, query=query)
        return msg.SerializeToString()
    except (TypeError, ValueError, message.EncodeError) as e:
        raise ProtobufError(f"Failed to encode location query: {e}") from e


def decode_location_results(buffer: bytes) -> List[LocationSearchResult]:
    """
    Decode a LocationResponse into search results.

    An empty buffer is a valid, empty response.

    Raises:
        ProtobufError: If the buffer is not a valid LocationResponse.
    """
    response = LocationResponse()
    try:
        response.ParseFromString(bytes(buffer))
    except (message.DecodeError, TypeError) as e:
        raise ProtobufError(f"Failed to decode location results: {e}") from e

    results: List[LocationSearchResult] = []
    for r in response.results:
        results.append(
            LocationSearchResult(
                type=LOCATION_TYPES.get(r.type, "poi"),
                id=r.id,
                name=_text(r.name),
                lat=from_scaled(r.coordinates.latitude),
                lon=from_scaled(r.coordinates.longitude),
                metro_id=r.metro.metroId if r.HasField("metro") and r.metro.HasField("metroId") else None,
                subtitle=_text(r.subtitle) if r.HasField("subtitle") else None,
            )
        )
    logger.debug(f"Decoded {len(results)} location results")
    return results


def _text(value) -> str:
    # proto2 string fields holding invalid UTF-8 come back as bytes
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value

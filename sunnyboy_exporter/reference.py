# SPDX-FileComment: sunnyboy-exporter - locale and metadata tables
# SPDX-FileCopyrightText: Copyright (C) 2022 Ryan Finnie
# SPDX-License-Identifier: MPL-2.0

# The device resolves sensor keys to human-readable names in two steps:
#
#     ObjectMetadata_Istl.json:  "6100_40263F00" -> {"TagIdEvtMsg": 7021, ...}
#     l10n/en-US.json:           "7021" -> "Voltage"
#
# Both tables are static for a given firmware, so they are loaded once
# at startup and never refreshed.

import json
import math
import sys
import types
from collections import namedtuple

from .client import LOCALE_PATH, METADATA_PATH
from .errors import DecodeError


class Metadata(namedtuple("Metadata", ["tag_id", "unit"])):
    __slots__ = ()

    def __new__(cls, tag_id=0, unit=0):
        return super(Metadata, cls).__new__(cls, tag_id, unit)


def _finite_float(s):
    value = float(s)
    if math.isinf(value):
        raise ValueError("number {} out of range".format(s))
    return value


def _finite_int(s):
    value = int(s)
    if abs(value) > sys.float_info.max:
        raise ValueError("number {} out of range".format(s))
    return value


def _no_constant(s):
    raise ValueError("invalid literal {}".format(s))


def decode_json(body, what):
    # NaN, Infinity and numbers beyond float range are not valid JSON
    try:
        return json.loads(
            body,
            parse_float=_finite_float,
            parse_int=_finite_int,
            parse_constant=_no_constant,
        )
    except ValueError as e:
        raise DecodeError("Invalid JSON in {}: {}".format(what, e)) from e


def json_object(value, what):
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(
            "Expected a JSON object for {}, got {}".format(what, type(value).__name__)
        )
    return value


def _json_int(value, what):
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError("Expected an integer for {}, got {!r}".format(what, value))
    return value


def decode_locale(body):
    locale = {}
    for k, v in json_object(decode_json(body, "locale"), "locale").items():
        if v is None:
            v = ""
        elif not isinstance(v, str):
            raise DecodeError("Expected a string for locale {}, got {!r}".format(k, v))
        locale[k] = v
    return locale


def decode_metadata(body):
    metadata = {}
    for k, v in json_object(decode_json(body, "metadata"), "metadata").items():
        record = json_object(v, "metadata {}".format(k))
        metadata[k] = Metadata(
            tag_id=_json_int(record.get("TagIdEvtMsg"), "{} TagIdEvtMsg".format(k)),
            unit=_json_int(record.get("Unit"), "{} Unit".format(k)),
        )
    return metadata


def load_locale(client):
    return decode_locale(client.fetch(LOCALE_PATH))


def load_metadata(client):
    return decode_metadata(client.fetch(METADATA_PATH))


class ReferenceData:
    def __init__(self, locale, metadata):
        self.locale = types.MappingProxyType(dict(locale))
        self.metadata = types.MappingProxyType(dict(metadata))

    @classmethod
    def load(cls, client):
        return cls(load_locale(client), load_metadata(client))

    def display_name(self, sensor):
        """Localized name for a sensor key, or "" if it can't be resolved"""
        metadata = self.metadata.get(sensor)
        if metadata is None:
            return ""
        return self.locale.get(str(metadata.tag_id), "")

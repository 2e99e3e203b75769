# SPDX-FileComment: sunnyboy-exporter - live dashboard values
# SPDX-FileCopyrightText: Copyright (C) 2022 Ryan Finnie
# SPDX-License-Identifier: MPL-2.0

# getDashValues.json is nested four levels deep:
#
#     {"result": {"<device>": {"<sensor>": {"<result kind>": [{"val": ...}]}}}}
#
# "val" is a number for measurements, but can also be a string, a
# status tag object or null.  Only numbers become samples.

from collections import namedtuple

from .client import DASH_VALUES_PATH
from .errors import DecodeError
from .reference import decode_json, json_object

VALUE_LABELS = ["device", "sensor", "result", "id", "name"]


class DashValue(namedtuple("DashValue", ["value", "is_numeric"])):
    __slots__ = ()

    @classmethod
    def from_json(cls, raw):
        # bool is an int subclass, but JSON true/false is not a reading
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            return cls(raw, False)
        return cls(float(raw), True)


class Sample(namedtuple("Sample", VALUE_LABELS + ["value"])):
    __slots__ = ()

    def label_values(self):
        return [self.device, self.sensor, self.result, self.id, self.name]


def _json_array(value, what):
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeError(
            "Expected a JSON array for {}, got {}".format(what, type(value).__name__)
        )
    return value


def decode_dashboard(body):
    """Decode getDashValues.json into device -> sensor -> kind -> [DashValue]"""
    doc = json_object(decode_json(body, "dashboard values"), "dashboard values")
    result = {}
    for device, sensors in json_object(doc.get("result"), "result").items():
        result[device] = {}
        for sensor, kinds in json_object(sensors, device).items():
            result[device][sensor] = {}
            for kind, entries in json_object(kinds, sensor).items():
                values = []
                for entry in _json_array(entries, "{}/{}".format(sensor, kind)):
                    entry = json_object(entry, "{}/{} value".format(sensor, kind))
                    values.append(DashValue.from_json(entry.get("val")))
                result[device][sensor][kind] = values
    return result


def flatten(result, reference):
    for device, sensors in result.items():
        for sensor, kinds in sensors.items():
            name = reference.display_name(sensor)
            for kind, values in kinds.items():
                for i, v in enumerate(values):
                    if not v.is_numeric:
                        continue
                    yield Sample(device, sensor, kind, str(i), name, v.value)


class Translator:
    def __init__(self, client, reference):
        self.client = client
        self.reference = reference

    def translate(self):
        result = decode_dashboard(self.client.fetch(DASH_VALUES_PATH))
        samples = {}
        for sample in flatten(result, self.reference):
            samples[tuple(sample.label_values())] = sample
        return list(samples.values())

import json

import pytest

from sunnyboy_exporter.client import DeviceClient

BASE_URL = "https://sunnyboy.test"

LOCALE = {"7021": "Voltage", "7022": "Current", "1": "Status"}
METADATA = {
    "6100_40263F00": {"TagIdEvtMsg": 7021, "Unit": 0},
    "6100_40465300": {"TagIdEvtMsg": 7022, "Unit": 3},
    "6180_08214800": {"TagIdEvtMsg": 1},
}
DASH_VALUES = {
    "result": {
        "dev1": {
            "6100_40263F00": {"1": [{"val": 235.4}]},
            "6100_40465300": {"1": [{"val": 1.5}, {"val": 2}, {"val": None}]},
            "6180_08214800": {"1": [{"val": [{"tag": 307}]}]},
        }
    }
}


class FakeResponse:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content


class FakeSession:
    """Maps full URLs to (status, body); a body may be an exception to raise"""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []
        self.verify = True

    def get(self, url):
        self.calls.append(url)
        status_code, body = self.responses.get(url, (404, b"{}"))
        if isinstance(body, Exception):
            raise body
        if not isinstance(body, bytes):
            body = json.dumps(body).encode("UTF-8")
        return FakeResponse(status_code, body)


def device_responses(locale=LOCALE, metadata=METADATA, dash_values=DASH_VALUES):
    return {
        BASE_URL + "/data/l10n/en-US.json": (200, locale),
        BASE_URL + "/data/ObjectMetadata_Istl.json": (200, metadata),
        BASE_URL + "/dyn/getDashValues.json": (200, dash_values),
    }


@pytest.fixture
def session():
    return FakeSession(device_responses())


@pytest.fixture
def client(session):
    return DeviceClient(BASE_URL, session=session)

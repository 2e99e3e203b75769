# SPDX-FileComment: sunnyboy-exporter - device HTTP client
# SPDX-FileCopyrightText: Copyright (C) 2022 Ryan Finnie
# SPDX-License-Identifier: MPL-2.0

import logging

import requests
import urllib3

from .errors import FetchError

LOCALE_PATH = "/data/l10n/en-US.json"
METADATA_PATH = "/data/ObjectMetadata_Istl.json"
DASH_VALUES_PATH = "/dyn/getDashValues.json"


class DeviceClient:
    """GET-only client for the inverter's local web API.

    Sunny Boy inverters ship self-signed certificates, so certificate
    validation is skipped unless asked for.  Responses are returned
    whatever their status code; the device is known to answer errors
    with JSON bodies, and a body that doesn't decode is what gets
    reported upstream.
    """

    def __init__(self, base_url, skip_cert_validation=True, session=None, logger=None):
        self.base_url = base_url.rstrip("/")
        self.skip_cert_validation = skip_cert_validation
        self.logger = logger or logging.getLogger(__name__)
        self.session = session if session is not None else requests.Session()
        self.session.verify = not skip_cert_validation
        if skip_cert_validation:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def url(self, path):
        return self.base_url + path

    def fetch(self, path):
        url = self.url(path)
        self.logger.debug("Fetching {}".format(url))
        try:
            r = self.session.get(url)
            body = r.content
        except requests.RequestException as e:
            raise FetchError("Error fetching {}: {}".format(url, e)) from e
        if not 200 <= r.status_code < 300:
            self.logger.debug("{} returned HTTP {}".format(url, r.status_code))
        return body

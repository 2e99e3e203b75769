# SPDX-FileComment: sunnyboy-exporter - Prometheus collector
# SPDX-FileCopyrightText: Copyright (C) 2022 Ryan Finnie
# SPDX-License-Identifier: MPL-2.0

import logging
import threading
import time

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily

from .dashboard import VALUE_LABELS


class SunnyBoyCollector:
    """Scrapes the device each time the registry is collected.

    A failed scrape never raises out of collect(); it is logged and
    reported through sunny_boy_up.
    """

    prefix = "sunny_boy"

    def __init__(self, translator, logger=None):
        self.translator = translator
        self.logger = logger or logging.getLogger(__name__)
        self.up = 0
        self.scrape_duration = 0.0
        self.scrape_errors = 0
        self._errors_lock = threading.Lock()

    def value_family(self):
        return GaugeMetricFamily(
            "{}_value".format(self.prefix),
            "Value from the Sunnyboy API",
            labels=VALUE_LABELS,
        )

    def up_family(self, value=None):
        return GaugeMetricFamily(
            "{}_up".format(self.prefix),
            "Is sunny boy scrape successful",
            value=value,
        )

    def duration_family(self, value=None):
        return GaugeMetricFamily(
            "{}_scrape_duration_seconds".format(self.prefix),
            "Time spent scraping the Sunnyboy API",
            value=value,
        )

    def errors_family(self, value=None):
        return CounterMetricFamily(
            "{}_scrape_errors".format(self.prefix),
            "Failed scrapes of the Sunnyboy API",
            value=value,
        )

    def describe(self):
        return [
            self.value_family(),
            self.up_family(),
            self.duration_family(),
            self.errors_family(),
        ]

    def collect(self):
        self.logger.debug("Beginning collection run")
        samples = []
        begin = time.time()
        try:
            samples = self.translator.translate()
        except Exception:
            self.logger.exception("Encountered an error during collection")
            up = 0
            with self._errors_lock:
                self.scrape_errors += 1
        else:
            up = 1
        self.scrape_duration = time.time() - begin
        self.up = up

        if up:
            value = self.value_family()
            for sample in samples:
                value.add_metric(sample.label_values(), sample.value)
            yield value
        yield self.up_family(up)
        yield self.duration_family(self.scrape_duration)
        yield self.errors_family(self.scrape_errors)

# SPDX-FileComment: sunnyboy-exporter - SMA Sunny Boy
# SPDX-FileCopyrightText: Copyright (C) 2022 Ryan Finnie
# SPDX-License-Identifier: MPL-2.0

# Sample sunnyboy.yaml:
#
# url: https://192.168.1.50
# skip_cert_validation: true
# listen_address: ":9725"
# telemetry_path: /metrics
#
# Every key can also be given on the command line, which takes
# precedence, e.g. --sunnyboy.url https://192.168.1.50

import argparse
import sys

from . import BaseMetrics
from .client import DeviceClient
from .collector import SunnyBoyCollector
from .dashboard import Translator
from .reference import ReferenceData


class Metrics(BaseMetrics):
    prefix = "sunnyboy"
    title = "Sunny Boy Exporter"
    required_args = [("--sunnyboy.url", "url")]

    def metrics_args(self, parser):
        parser.add_argument(
            "--sunnyboy.url",
            dest="url",
            help="Sunny Boy URL",
            metavar="URL",
        )
        parser.add_argument(
            "--sunnyboy.skip-cert-validation",
            dest="skip_cert_validation",
            action=argparse.BooleanOptionalAction,
            default=True,
            help="Ignore self-signed certificate",
        )

    def setup(self):
        self.client = DeviceClient(
            self.args.url,
            skip_cert_validation=self.args.skip_cert_validation,
            logger=self.logger,
        )
        self.reference = ReferenceData.load(self.client)
        self.logger.info(
            "Loaded {} locale strings and {} sensor definitions from {}".format(
                len(self.reference.locale),
                len(self.reference.metadata),
                self.client.base_url,
            )
        )
        self.collector = SunnyBoyCollector(
            Translator(self.client, self.reference), logger=self.logger
        )
        self.registry.register(self.collector)


def main(argv=None):
    sys.exit(Metrics().main(argv))


def module_init():
    if __name__ == "__main__":
        sys.exit(main(sys.argv))


module_init()

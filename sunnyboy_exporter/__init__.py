# SPDX-FileComment: sunnyboy-exporter
# SPDX-FileCopyrightText: Copyright (C) 2022 Ryan Finnie
# SPDX-License-Identifier: MPL-2.0

import argparse
import logging
import os
import pathlib
import socket
import sys
from wsgiref.simple_server import WSGIRequestHandler, make_server

import yaml
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    PlatformCollector,
    ProcessCollector,
    make_wsgi_app,
)
from prometheus_client.exposition import ThreadingWSGIServer

from .logs import LOG_FORMATS, LOG_LEVELS, setup_logging

INDEX_PAGE = """<html>
<head><title>{title}</title></head>
<body>
<h1>{title}</h1>
<p><a href='{telemetry_path}'>Metrics</a></p>
</body>
</html>
"""


def parse_listen_address(address):
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError("Listen address {!r} has no port".format(address))
    return host.strip("[]"), int(port)


class BaseMetrics:
    prefix = "base"
    title = "Exporter"
    listen_address = ":9725"
    telemetry_path = "/metrics"
    needs_config = False
    required_args = []

    args = None
    config = None
    registry = None

    def setup(self):
        pass

    def metrics_args(self, parser):
        pass

    def parse_args(self, argv=None):
        def _optional_path(string):
            return pathlib.Path(string) if string else None

        if argv is None:
            argv = sys.argv

        parser = argparse.ArgumentParser(
            formatter_class=argparse.ArgumentDefaultsHelpFormatter,
            prog=os.path.basename(argv[0]),
        )

        default_config_file = pathlib.Path(
            "/etc/sunnyboy-exporter/{}.yaml".format(self.prefix)
        )
        if (not self.needs_config) and (not default_config_file.exists()):
            default_config_file = None
        parser.add_argument(
            "--config",
            type=_optional_path,
            default=default_config_file,
            help="YAML configuration file",
            metavar="FILE",
        )
        parser.add_argument(
            "--web.listen-address",
            dest="listen_address",
            default=self.listen_address,
            help="Address to listen on for web interface and telemetry",
            metavar="ADDRESS",
        )
        parser.add_argument(
            "--web.telemetry-path",
            dest="telemetry_path",
            default=self.telemetry_path,
            help="Path under which to expose metrics",
            metavar="PATH",
        )
        parser.add_argument(
            "--log.level",
            dest="log_level",
            choices=sorted(LOG_LEVELS),
            default=None,
            help="Only log messages with the given severity or above (debug on a tty, info otherwise)",
        )
        parser.add_argument(
            "--log.format",
            dest="log_format",
            choices=LOG_FORMATS,
            default="logfmt",
            help="Output format of log messages",
        )
        self.metrics_args(parser)

        # Config file values replace built-in defaults, but not
        # anything given on the command line.
        pre_args, _ = parser.parse_known_args(args=argv[1:])
        self.config = self.load_config(pre_args.config)
        if not isinstance(self.config, dict):
            parser.error(
                "{}: configuration must be a YAML mapping".format(pre_args.config)
            )
        parser.set_defaults(
            **{k: v for k, v in self.config.items() if k != "config"}
        )
        args = parser.parse_args(args=argv[1:])

        missing = [
            option for option, dest in self.required_args if not getattr(args, dest)
        ]
        if missing:
            parser.error(
                "the following arguments are required: {}".format(", ".join(missing))
            )
        return args

    def load_config(self, config_file):
        if not config_file:
            return {}
        with config_file.open() as f:
            return yaml.safe_load(f) or {}

    def setup_logging(self):
        if self.args.log_level:
            logging_level = LOG_LEVELS[self.args.log_level]
        else:
            logging_level = logging.DEBUG if sys.stdin.isatty() else logging.INFO
        setup_logging(logging_level, self.args.log_format)
        self.logger = logging.getLogger(self.prefix)

    def make_registry(self):
        registry = CollectorRegistry()
        ProcessCollector(registry=registry)
        PlatformCollector(registry=registry)
        return registry

    def make_server(self, application):
        host, port = parse_listen_address(self.args.listen_address)
        server_class = ThreadingWSGIServer
        if ":" in host:
            server_class = type(
                "ThreadingWSGIServerV6",
                (ThreadingWSGIServer,),
                {"address_family": socket.AF_INET6},
            )
        handler_class = type(
            "RequestHandler", (LoggingRequestHandler,), {"logger": self.logger}
        )
        return make_server(
            host, port, application, server_class=server_class, handler_class=handler_class
        )

    def main(self, argv=None):
        self.args = self.parse_args(argv)
        self.setup_logging()
        self.registry = self.make_registry()

        try:
            self.setup()
        except Exception:
            self.logger.exception("Error creating the exporter")
            return 1

        application = WSGIApplication(self)
        try:
            self.wsgi_server = self.make_server(application)
        except (OSError, ValueError):
            self.logger.exception("Error starting HTTP server")
            return 1
        self.logger.info(
            "Listening on address {}".format(self.args.listen_address)
        )
        return self.main_loop()

    def main_loop(self):
        try:
            self.wsgi_server.serve_forever()
        except KeyboardInterrupt:
            pass
        finally:
            self.wsgi_server.server_close()
        return 0


class LoggingRequestHandler(WSGIRequestHandler):
    logger = logging.getLogger(__name__)

    def log_message(self, format, *args):
        self.logger.debug("{} - {}".format(self.address_string(), format % args))


class WSGIApplication:
    def __init__(self, collector):
        self.collector = collector
        self.telemetry_path = collector.args.telemetry_path
        self.metrics_app = make_wsgi_app(collector.registry)
        self.index = INDEX_PAGE.format(
            title=collector.title, telemetry_path=self.telemetry_path
        ).encode("UTF-8")

        self.requests_total = Counter(
            "promhttp_metric_handler_requests",
            "Total number of scrapes by HTTP status code",
            ["code"],
            registry=collector.registry,
        )
        for code in ("200", "500", "503"):
            self.requests_total.labels(code)
        self.requests_in_flight = Gauge(
            "promhttp_metric_handler_requests_in_flight",
            "Current number of scrapes being served",
            registry=collector.registry,
        )

    def __call__(self, environ, start_response):
        path = environ.get("PATH_INFO", "/")
        if path == self.telemetry_path:
            return self.serve_metrics(environ, start_response)
        if path in ("/-/healthy", "/-/ready"):
            return self.respond(start_response, "200 OK", b"OK")
        if path == "/":
            return self.respond(
                start_response, "200 OK", self.index, "text/html; charset=UTF-8"
            )
        return self.respond(start_response, "404 Not Found", b"Not Found\n")

    def serve_metrics(self, environ, start_response):
        status = {}

        def _start_response(status_line, headers, exc_info=None):
            status["code"] = status_line.split(" ", 1)[0]
            return start_response(status_line, headers, exc_info)

        with self.requests_in_flight.track_inprogress():
            body = self.metrics_app(environ, _start_response)
        self.requests_total.labels(status.get("code", "500")).inc()
        return body

    def respond(self, start_response, status, body, content_type="text/plain; charset=UTF-8"):
        start_response(
            status,
            [
                ("Content-Type", content_type),
                ("Content-Length", str(len(body))),
            ],
        )
        return [body]

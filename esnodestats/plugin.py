# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
# Modifications Copyright OpenSearch Contributors. See
# GitHub history for details.
# Licensed to Elasticsearch B.V. under one or more contributor
# license agreements. See the NOTICE file distributed with
# this work for additional information regarding copyright
# ownership. Elasticsearch B.V. licenses this file to you under
# the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#	http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an
# "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
# KIND, either express or implied.  See the License for the
# specific language governing permissions and limitations
# under the License.

import json
import logging
import os
import time

from esnodestats import exceptions, metric_kinds
from esnodestats.loader import NodeStatsLoader
from esnodestats.reporter import MetricReporter
from esnodestats.utils import console

META_ENV_VAR = "MACKEREL_AGENT_PLUGIN_META"
META_HEADER = "# mackerel-agent-plugin"

SCHEMES = ["http", "https"]
ON_ERROR_POLICIES = ["empty", "fail"]


def default_tempfile(host, port):
    return "/tmp/mackerel-plugin-elasticsearch-nodes-stats-{}-{}".format(host, port)


class PluginConfig:
    def __init__(self, scheme="http", host="localhost", port=9200, tempfile=None, variant=metric_kinds.FULL,
                 on_error="empty"):
        self.scheme = scheme
        self.host = host
        self.port = port
        self.tempfile = tempfile or default_tempfile(host, port)
        self.variant = variant
        self.on_error = on_error

    @property
    def uri(self):
        return "{}://{}:{}".format(self.scheme, self.host, self.port)

    @classmethod
    def from_params(cls, params):
        scheme = params.get("nodes-stats-scheme", "http")
        if scheme not in SCHEMES:
            raise exceptions.SystemSetupError(
                "The parameter 'nodes-stats-scheme' must be one of {} but was {}.".format(SCHEMES, scheme))

        host = params.get("nodes-stats-host", "localhost")
        if not host:
            raise exceptions.SystemSetupError("The parameter 'nodes-stats-host' must not be empty.")

        port = params.get("nodes-stats-port", 9200)
        try:
            port = int(port)
        except (TypeError, ValueError):
            raise exceptions.SystemSetupError(
                "The parameter 'nodes-stats-port' must be a number but was {}.".format(port)) from None
        if not 0 < port < 65536:
            raise exceptions.SystemSetupError(
                "The parameter 'nodes-stats-port' must be between 1 and 65535 but was {}.".format(port))

        on_error = params.get("nodes-stats-on-error", "empty")
        if on_error not in ON_ERROR_POLICIES:
            raise exceptions.SystemSetupError(
                "The parameter 'nodes-stats-on-error' must be one of {} but was {}.".format(ON_ERROR_POLICIES, on_error))

        return cls(scheme=scheme,
                   host=host,
                   port=port,
                   tempfile=params.get("nodes-stats-tempfile"),
                   variant=metric_kinds.variant(params.get("nodes-stats-variant", "full")),
                   on_error=on_error)


class NodesStatsPlugin:
    """
    Runs one fetch-and-report cycle for the monitoring agent.
    """

    def __init__(self, config, loader=None, clock=time.time, env=None, out=None):
        self.logger = logging.getLogger(__name__)
        self.config = config
        self.loader = loader or NodeStatsLoader(config.uri, config.variant)
        self.clock = clock
        self.env = os.environ if env is None else env
        self.out = out

    def meta_mode(self):
        return bool(self.env.get(META_ENV_VAR))

    def reporter(self):
        result = self.loader.load()
        if not result.ok:
            if self.config.on_error == "fail":
                result.raise_if_failed()
            console.warn("Reporting no metrics because {}".format(result.error))
        return MetricReporter.from_result(result, self.config.variant)

    def run(self):
        reporter = self.reporter()
        if self.meta_mode():
            self.output_definitions(reporter)
        else:
            self.output_values(reporter)

    def output_definitions(self, reporter):
        graphs = {graph_id: graph.as_dict() for graph_id, graph in reporter.graph_definition().items()}
        console.println(META_HEADER, stream=self.out)
        console.println(json.dumps({"graphs": graphs}), stream=self.out)

    def output_values(self, reporter):
        now = int(self.clock())
        stats = reporter.fetch_metrics()
        for graph_id, graph in reporter.graph_definition().items():
            for metric in graph.metrics:
                if metric.name not in stats:
                    self.logger.debug("No value for [%s].", metric.name)
                    continue
                console.println("%s.%s\t%f\t%d" % (graph_id, metric.name, stats[metric.name], now), stream=self.out)
        self.save_values(stats, now)

    def save_values(self, stats, now):
        values = {"_lastTime": now}
        values.update(stats)
        try:
            directory = os.path.dirname(self.config.tempfile)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.config.tempfile, "wt", encoding="utf-8") as f:
                json.dump(values, f)
        except OSError:
            self.logger.warning("Could not write last values to [%s].", self.config.tempfile, exc_info=True)

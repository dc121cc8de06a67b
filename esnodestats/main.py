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

import argparse
import logging
import sys

from esnodestats import exceptions, metric_kinds, plugin
from esnodestats.utils import console


def create_arg_parser():
    parser = argparse.ArgumentParser(prog="esnodestats",
                                     description="Reports Elasticsearch nodes stats as mackerel-agent plugin metrics.")
    parser.add_argument("--scheme", default="http", choices=plugin.SCHEMES, help="Scheme (default: http)")
    parser.add_argument("--host", default="localhost", help="Host (default: localhost)")
    parser.add_argument("--port", default="9200", help="Port (default: 9200)")
    parser.add_argument("--tempfile", default=None,
                        help="Temp file name (default: /tmp/mackerel-plugin-elasticsearch-nodes-stats-<host>-<port>)")
    parser.add_argument("--variant", default="full", choices=sorted(metric_kinds.VARIANTS.keys()),
                        help="Which metric kinds to report (default: full)")
    parser.add_argument("--on-error", default="empty", choices=plugin.ON_ERROR_POLICIES,
                        help="Report no metrics ('empty') or exit with an error ('fail') if stats cannot be loaded "
                             "(default: empty)")
    parser.add_argument("--list-metrics", action="store_true", help="List the available metric kinds and exit")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Log level for messages on stderr (default: WARNING)")
    return parser


def to_params(args):
    return {
        "nodes-stats-scheme": args.scheme,
        "nodes-stats-host": args.host,
        "nodes-stats-port": args.port,
        "nodes-stats-tempfile": args.tempfile,
        "nodes-stats-variant": args.variant,
        "nodes-stats-on-error": args.on_error,
    }


def configure_logging(level):
    logging.basicConfig(level=level, stream=sys.stderr,
                        format="%(asctime)s %(name)s %(levelname)s %(message)s")


def main(argv=None):
    args = create_arg_parser().parse_args(argv)
    configure_logging(args.log_level)
    logger = logging.getLogger(__name__)

    if args.list_metrics:
        metric_kinds.list_metric_kinds()
        return 0

    try:
        config = plugin.PluginConfig.from_params(to_params(args))
        plugin.NodesStatsPlugin(config).run()
    except exceptions.NodeStatsError as e:
        console.error(str(e))
        logger.debug("Plugin run failed.", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

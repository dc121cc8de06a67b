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

import collections
import logging

import elasticsearch

from esnodestats import exceptions
from esnodestats.cluster import ClusterSnapshot
from esnodestats.metric_kinds import OS_LOAD_AVERAGE, PROCESS_CPU_PERCENT, JVM_MEM_HEAP_USED_IN_BYTES, DISK_USED_IN_BYTES

READERS = {
    OS_LOAD_AVERAGE.key: lambda node: node.os_load_average,
    PROCESS_CPU_PERCENT.key: lambda node: node.process_cpu_percent,
    JVM_MEM_HEAP_USED_IN_BYTES.key: lambda node: node.jvm_mem_heap_used_in_bytes,
    DISK_USED_IN_BYTES.key: lambda node: node.disk_used_in_bytes,
}

NODES_STATS_PATH = "/_nodes/stats"


def create_client(uri):
    return elasticsearch.Elasticsearch(hosts=[uri], max_retries=0, retry_on_timeout=False)


class LoadResult:
    """
    Outcome of one stats load: either a node metric table or the error that prevented building it.
    """

    def __init__(self, table=None, error=None):
        self.table = table
        self.error = error

    @classmethod
    def success(cls, table):
        return cls(table=table)

    @classmethod
    def failure(cls, error):
        return cls(error=error)

    @property
    def ok(self):
        return self.error is None

    def table_or_empty(self):
        return self.table if self.ok else collections.OrderedDict()

    def raise_if_failed(self):
        if not self.ok:
            raise self.error


class NodeStatsLoader:
    def __init__(self, uri, variant, client_factory=create_client):
        self.logger = logging.getLogger(__name__)
        self.uri = uri
        self.variant = variant
        self.client_factory = client_factory

    def __str__(self):
        return "nodes stats of [{}]".format(self.uri)

    def load(self):
        try:
            snapshot = ClusterSnapshot.parse(self.sample())
        except exceptions.StatsLoadError as e:
            self.logger.debug("Could not load %s.", self, exc_info=True)
            return LoadResult.failure(e)
        table = self.flatten(snapshot)
        self.logger.debug("Loaded stats of [%d] nodes from [%s].", len(table), self.uri)
        return LoadResult.success(table)

    def sample(self):
        # the transport layer does no product check and accepts plain JSON
        try:
            with self.client_factory(self.uri) as client:
                response = client.transport.perform_request("GET", NODES_STATS_PATH,
                                                            headers={"accept": "application/json"})
        except elasticsearch.ConnectionError as e:
            raise exceptions.StatsTransportError("Could not connect to [{}]".format(self.uri), e)
        except elasticsearch.SerializationError as e:
            raise exceptions.StatsDecodeError("Could not decode nodes stats from [{}]".format(self.uri), e)
        except elasticsearch.TransportError as e:
            raise exceptions.StatsReadError("Could not read nodes stats from [{}]".format(self.uri), e)
        status = response.meta.status
        if not 200 <= status < 300:
            raise exceptions.StatsReadError(
                "Unsuccessful response from [{}{}] with status [{}]".format(self.uri, NODES_STATS_PATH, status))
        return response.body

    def flatten(self, snapshot):
        """
        Projects a cluster snapshot into the node metric table.

        :param snapshot: A ``ClusterSnapshot``.
        :return: An ordered dict of node name to an ordered dict of metric key to value. Only metric kinds of this
                 loader's variant are included.
        """
        table = collections.OrderedDict()
        for node in snapshot.nodes.values():
            node_stats = collections.OrderedDict()
            for key in self.variant.keys:
                node_stats[key] = READERS[key](node)
            if node.name in table:
                self.logger.warning("Node name [%s] is reported more than once. Keeping the last one.", node.name)
            table[node.name] = node_stats
        return table

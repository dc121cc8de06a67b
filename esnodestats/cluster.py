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

from esnodestats import exceptions


def _dotted(path):
    return ".".join(str(k) for k in path)


def extract_value(node, path, fallback=None):
    value = node
    try:
        for k in path:
            value = value[k]
    except KeyError:
        value = fallback
    except TypeError:
        raise exceptions.StatsDecodeError(
            "Expected an object on the way to [{}] but got [{}].".format(_dotted(path), value)) from None
    return value


def extract_number(node, path):
    """
    Reads a numeric reading from a node's stats. Absent readings count as zero.

    :param node: The raw stats of one node as decoded from JSON.
    :param path: Keys leading to the reading.
    :return: The reading as a float.
    """
    value = extract_value(node, path)
    if value is None:
        return 0.0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise exceptions.StatsDecodeError("Expected a number at [{}] but got [{}].".format(_dotted(path), value))


def extract_load_average(node):
    load_average = extract_value(node, ["os", "load_average"])
    # 1.x clusters report [1m, 5m, 15m]
    if isinstance(load_average, list):
        return extract_number(node, ["os", "load_average", 0]) if load_average else 0.0
    if load_average is not None:
        return extract_number(node, ["os", "load_average"])
    return extract_number(node, ["os", "cpu", "load_average", "1m"])


class NodeRecord:
    def __init__(self, name, os_load_average=0.0, process_cpu_percent=0.0, jvm_mem_heap_used_in_bytes=0.0,
                 fs_total_in_bytes=0.0, fs_free_in_bytes=0.0):
        self.name = name
        self.os_load_average = os_load_average
        self.process_cpu_percent = process_cpu_percent
        self.jvm_mem_heap_used_in_bytes = jvm_mem_heap_used_in_bytes
        self.fs_total_in_bytes = fs_total_in_bytes
        self.fs_free_in_bytes = fs_free_in_bytes

    @property
    def disk_used_in_bytes(self):
        return self.fs_total_in_bytes - self.fs_free_in_bytes

    @classmethod
    def parse(cls, node_id, node_stats):
        if not isinstance(node_stats, dict):
            raise exceptions.StatsDecodeError("Stats of node [{}] are not an object.".format(node_id))
        name = node_stats.get("name")
        if not isinstance(name, str):
            raise exceptions.StatsDecodeError("Node [{}] has no name.".format(node_id))
        return cls(name,
                   os_load_average=extract_load_average(node_stats),
                   process_cpu_percent=extract_number(node_stats, ["process", "cpu", "percent"]),
                   jvm_mem_heap_used_in_bytes=extract_number(node_stats, ["jvm", "mem", "heap_used_in_bytes"]),
                   fs_total_in_bytes=extract_number(node_stats, ["fs", "total", "total_in_bytes"]),
                   fs_free_in_bytes=extract_number(node_stats, ["fs", "total", "free_in_bytes"]))

    def __repr__(self):
        return "NodeRecord({})".format(self.name)


class ClusterSnapshot:
    """
    The subset of a ``_nodes/stats`` response that is needed for reporting.
    """

    def __init__(self, cluster_name, nodes):
        self.cluster_name = cluster_name
        self.nodes = nodes

    @classmethod
    def parse(cls, response):
        if not isinstance(response, dict):
            raise exceptions.StatsDecodeError("Expected a JSON object as nodes stats response.")
        nodes = response.get("nodes", {})
        if not isinstance(nodes, dict):
            raise exceptions.StatsDecodeError("Expected [nodes] to be an object.")
        records = collections.OrderedDict()
        for node_id, node_stats in nodes.items():
            records[node_id] = NodeRecord.parse(node_id, node_stats)
        return cls(response.get("cluster_name"), records)

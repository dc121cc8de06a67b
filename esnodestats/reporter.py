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


class Metric:
    def __init__(self, name, label, diff=False, type="uint64", stacked=False):
        self.name = name
        self.label = label
        self.diff = diff
        self.type = type
        self.stacked = stacked

    def as_dict(self):
        return {"name": self.name, "label": self.label, "stacked": self.stacked}

    def __repr__(self):
        return "Metric({})".format(self.name)


class Graph:
    def __init__(self, label, unit, metrics):
        self.label = label
        self.unit = unit
        self.metrics = metrics

    def as_dict(self):
        return {"label": self.label, "unit": self.unit, "metrics": [m.as_dict() for m in self.metrics]}


class MetricReporter:
    """
    Exposes a node metric table in the shape the monitoring agent expects.

    Both views are computed from the same table on every call so that value keys and graph metrics always match.
    """

    def __init__(self, table, variant):
        self.table = table
        self.variant = variant

    @classmethod
    def from_result(cls, result, variant):
        return cls(result.table_or_empty(), variant)

    def fetch_metrics(self):
        stats = collections.OrderedDict()
        for node_name, node_stats in self.table.items():
            for kind in self.variant.kinds:
                if kind.key in node_stats:
                    stats[kind.metric_name(node_name)] = node_stats[kind.key]
        return stats

    def graph_definition(self):
        graphdef = collections.OrderedDict()
        for kind in self.variant.kinds:
            metrics = [Metric(kind.metric_name(node_name), node_name)
                       for node_name, node_stats in self.table.items() if kind.key in node_stats]
            graphdef[kind.graph_id] = Graph(kind.label, kind.unit, metrics)
        return graphdef

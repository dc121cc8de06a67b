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

import tabulate

from esnodestats import exceptions
from esnodestats.utils import console

GRAPH_PREFIX = "elasticsearch-nodes"


class MetricKind:
    """
    One numeric reading reported per node, together with the graph it is shown in.
    """

    def __init__(self, key, graph_name, label, unit):
        self.key = key
        self.graph_name = graph_name
        self.label = label
        self.unit = unit

    @property
    def graph_id(self):
        return "{}.{}".format(GRAPH_PREFIX, self.graph_name)

    def metric_name(self, node_name):
        return "{}_{}".format(node_name, self.key)

    def __repr__(self):
        return "MetricKind({})".format(self.key)


OS_LOAD_AVERAGE = MetricKind("os_load_average", "OSLoadAverage",
                             "Elasticsearch nodes OS Load Average", "float")
PROCESS_CPU_PERCENT = MetricKind("process_cpu_percent", "ProcessCPUPercent",
                                 "Elasticsearch nodes Process CPU Percent", "percentage")
JVM_MEM_HEAP_USED_IN_BYTES = MetricKind("jvm_mem_heap_used_in_bytes", "JvmMemHeapUsedInBytes",
                                        "Elasticsearch nodes JVM Heap Mem Used", "bytes")
DISK_USED_IN_BYTES = MetricKind("disk_used_in_bytes", "DiskUsedInBytes",
                                "Elasticsearch nodes Disk Used", "bytes")

ALL_KINDS = [OS_LOAD_AVERAGE, PROCESS_CPU_PERCENT, JVM_MEM_HEAP_USED_IN_BYTES, DISK_USED_IN_BYTES]


class Variant:
    """
    A selection of metric kinds that are read from the nodes stats and reported.
    """

    def __init__(self, name, kinds, description):
        self.name = name
        self.kinds = kinds
        self.description = description

    @property
    def keys(self):
        return [kind.key for kind in self.kinds]

    def includes(self, kind):
        return kind in self.kinds

    def __str__(self):
        return self.name


FULL = Variant("full", ALL_KINDS, "OS load average, process CPU, JVM heap and disk usage")
REDUCED = Variant("reduced", [PROCESS_CPU_PERCENT, JVM_MEM_HEAP_USED_IN_BYTES], "Process CPU and JVM heap only")

VARIANTS = {v.name: v for v in [FULL, REDUCED]}


def variant(name):
    try:
        return VARIANTS[name]
    except KeyError:
        raise exceptions.SystemSetupError(
            "Unknown variant [{}]. Use one of {}.".format(name, ", ".join(sorted(VARIANTS.keys())))) from None


def list_metric_kinds():
    console.println("Available metric kinds:\n")
    kinds = [[kind.key, kind.graph_id, kind.unit, ", ".join(v.name for v in VARIANTS.values() if v.includes(kind))]
             for kind in ALL_KINDS]
    console.println(tabulate.tabulate(kinds, ["Metric", "Graph", "Unit", "Variants"]))
    console.println("\nVariants:\n")
    console.println(tabulate.tabulate([[v.name, v.description] for v in VARIANTS.values()], ["Name", "Description"]))

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

class NodeStatsError(Exception):
    """
    Base class for all errors raised by the nodes stats plugin.
    """

    def __init__(self, message, cause=None):
        super().__init__(message, cause)
        self.message = message
        self.cause = cause

    def __repr__(self):
        return self.message

    def __str__(self):
        if self.cause:
            return "%s caused by %s" % (self.message, self.cause)
        return self.message


class SystemSetupError(NodeStatsError):
    """
    Thrown when a user did something wrong, e.g. configured an unknown variant or an invalid port.
    """


class StatsLoadError(NodeStatsError):
    """
    Thrown when the nodes stats could not be loaded from the cluster.
    """


class StatsTransportError(StatsLoadError):
    """
    The cluster could not be reached (connection refused, DNS failure, timeout).
    """


class StatsReadError(StatsLoadError):
    """
    The cluster was reached but did not deliver a successful response body.
    """


class StatsDecodeError(StatsLoadError):
    """
    The response body is not valid JSON or does not match the nodes stats shape.
    """

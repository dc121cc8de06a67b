from unittest import TestCase, mock

import elasticsearch

from esnodestats import exceptions, metric_kinds
from esnodestats.cluster import ClusterSnapshot
from esnodestats.loader import LoadResult, NodeStatsLoader
from tests.stats_test_helpers import NodesStatsServer, nodes_stats_response


def client_factory(response=None, status=200, error=None):
    factory = mock.MagicMock()
    client = factory.return_value.__enter__.return_value
    if error:
        client.transport.perform_request.side_effect = error
    else:
        client.transport.perform_request.return_value = mock.Mock(meta=mock.Mock(status=status), body=response)
    return factory


class NodeStatsLoaderTests(TestCase):
    def test_loads_full_variant(self):
        factory = client_factory(nodes_stats_response())
        loader = NodeStatsLoader("http://localhost:9200", metric_kinds.FULL, client_factory=factory)

        result = loader.load()

        self.assertTrue(result.ok)
        self.assertEqual({
            "es-1": {
                "os_load_average": 1.5,
                "process_cpu_percent": 12.0,
                "jvm_mem_heap_used_in_bytes": 104857600.0,
                "disk_used_in_bytes": 20000000000.0
            },
            "es-2": {
                "os_load_average": 0.25,
                "process_cpu_percent": 3.0,
                "jvm_mem_heap_used_in_bytes": 52428800.0,
                "disk_used_in_bytes": 1500.0
            }
        }, result.table)

    def test_loads_reduced_variant(self):
        response = {"nodes": {"n1": {"name": "es-1",
                                     "process": {"cpu": {"percent": 12}},
                                     "jvm": {"mem": {"heap_used_in_bytes": 104857600}}}}}
        loader = NodeStatsLoader("http://localhost:9200", metric_kinds.REDUCED, client_factory=client_factory(response))

        result = loader.load()

        self.assertEqual({"es-1": {"process_cpu_percent": 12, "jvm_mem_heap_used_in_bytes": 104857600}}, result.table)

    def test_connection_is_scoped_to_the_request(self):
        factory = client_factory(nodes_stats_response())
        loader = NodeStatsLoader("https://es.example.org:9243", metric_kinds.FULL, client_factory=factory)

        loader.load()

        factory.assert_called_once_with("https://es.example.org:9243")
        factory.return_value.__enter__.return_value.transport.perform_request.assert_called_once_with(
            "GET", "/_nodes/stats", headers={"accept": "application/json"})
        factory.return_value.__exit__.assert_called_once()

    def test_returns_response_body(self):
        loader = NodeStatsLoader("http://localhost:9200", metric_kinds.FULL,
                                 client_factory=client_factory(nodes_stats_response()))

        self.assertEqual(nodes_stats_response(), loader.sample())

    def test_rows_are_keyed_by_node_name(self):
        response = {"nodes": {"abc": {"name": "es-1"}, "def": {"name": "es-1", "process": {"cpu": {"percent": 7}}}}}
        loader = NodeStatsLoader("http://localhost:9200", metric_kinds.REDUCED, client_factory=client_factory(response))

        result = loader.load()

        self.assertEqual({"es-1": {"process_cpu_percent": 7.0, "jvm_mem_heap_used_in_bytes": 0.0}}, result.table)

    def test_connection_error_is_a_transport_error(self):
        factory = client_factory(error=elasticsearch.ConnectionError("connection refused"))
        loader = NodeStatsLoader("http://localhost:9200", metric_kinds.FULL, client_factory=factory)

        result = loader.load()

        self.assertFalse(result.ok)
        self.assertIsNone(result.table)
        self.assertIsInstance(result.error, exceptions.StatsTransportError)
        self.assertEqual("Could not connect to [http://localhost:9200]", result.error.message)

    def test_failure_is_only_logged_at_debug_level(self):
        factory = client_factory(error=elasticsearch.ConnectionError("connection refused"))
        loader = NodeStatsLoader("http://localhost:9200", metric_kinds.FULL, client_factory=factory)

        with self.assertLogs("esnodestats.loader", level="DEBUG") as logs:
            loader.load()

        self.assertEqual(["DEBUG"], [record.levelname for record in logs.records])

    def test_unsuccessful_response_is_a_read_error(self):
        factory = client_factory({"error": "service unavailable"}, status=503)
        loader = NodeStatsLoader("http://localhost:9200", metric_kinds.FULL, client_factory=factory)

        result = loader.load()

        self.assertIsInstance(result.error, exceptions.StatsReadError)
        self.assertEqual("Unsuccessful response from [http://localhost:9200/_nodes/stats] with status [503]",
                         result.error.message)

    def test_other_transport_failure_is_a_read_error(self):
        factory = client_factory(error=elasticsearch.TransportError("connection reset while reading body"))
        loader = NodeStatsLoader("http://localhost:9200", metric_kinds.FULL, client_factory=factory)

        result = loader.load()

        self.assertIsInstance(result.error, exceptions.StatsReadError)

    def test_malformed_json_is_a_decode_error(self):
        factory = client_factory(error=elasticsearch.SerializationError("Expecting value: line 1 column 1"))
        loader = NodeStatsLoader("http://localhost:9200", metric_kinds.FULL, client_factory=factory)

        result = loader.load()

        self.assertIsInstance(result.error, exceptions.StatsDecodeError)

    def test_schema_mismatch_is_a_decode_error(self):
        response = {"nodes": {"n1": {"name": "es-1", "process": {"cpu": {"percent": "high"}}}}}
        loader = NodeStatsLoader("http://localhost:9200", metric_kinds.FULL, client_factory=client_factory(response))

        result = loader.load()

        self.assertIsInstance(result.error, exceptions.StatsDecodeError)

    def test_unreachable_host(self):
        # nothing listens on port 1
        loader = NodeStatsLoader("http://127.0.0.1:1", metric_kinds.FULL)

        result = loader.load()

        self.assertIsInstance(result.error, exceptions.StatsTransportError)

    def test_flatten_counts(self):
        loader = NodeStatsLoader("http://localhost:9200", metric_kinds.FULL, client_factory=mock.Mock())
        snapshot = ClusterSnapshot.parse(nodes_stats_response())

        table = loader.flatten(snapshot)

        self.assertEqual(["es-1", "es-2"], list(table.keys()))
        for node_stats in table.values():
            self.assertEqual(4, len(node_stats))


class NodeStatsLoaderHttpTests(TestCase):
    REDUCED_EXAMPLE = {"nodes": {"n1": {"name": "es-1",
                                        "process": {"cpu": {"percent": 12}},
                                        "jvm": {"mem": {"heap_used_in_bytes": 104857600}}}}}

    def test_loads_from_server_without_product_header(self):
        with NodesStatsServer(self.REDUCED_EXAMPLE) as server:
            result = NodeStatsLoader(server.uri, metric_kinds.REDUCED).load()

        self.assertTrue(result.ok, result.error)
        self.assertEqual({"es-1": {"process_cpu_percent": 12.0, "jvm_mem_heap_used_in_bytes": 104857600.0}},
                         result.table)
        self.assertEqual([("/_nodes/stats", "application/json")], server.requests)

    def test_loads_full_variant_from_server(self):
        with NodesStatsServer(nodes_stats_response()) as server:
            result = NodeStatsLoader(server.uri, metric_kinds.FULL).load()

        self.assertTrue(result.ok, result.error)
        self.assertEqual(1500.0, result.table["es-2"]["disk_used_in_bytes"])

    def test_server_error_is_a_read_error(self):
        with NodesStatsServer({"error": "boom"}, status=500) as server:
            result = NodeStatsLoader(server.uri, metric_kinds.FULL).load()

        self.assertIsInstance(result.error, exceptions.StatsReadError)

    def test_malformed_body_is_a_decode_error(self):
        with NodesStatsServer("{\"nodes\": {") as server:
            result = NodeStatsLoader(server.uri, metric_kinds.FULL).load()

        self.assertIsInstance(result.error, exceptions.StatsDecodeError)


class LoadResultTests(TestCase):
    def test_success(self):
        result = LoadResult.success({"es-1": {}})

        self.assertTrue(result.ok)
        self.assertEqual({"es-1": {}}, result.table_or_empty())
        result.raise_if_failed()

    def test_failure(self):
        error = exceptions.StatsTransportError("unreachable")
        result = LoadResult.failure(error)

        self.assertFalse(result.ok)
        self.assertEqual({}, result.table_or_empty())
        with self.assertRaises(exceptions.StatsTransportError):
            result.raise_if_failed()

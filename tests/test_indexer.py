import pytest
import responses

from zgstorage.indexer import IndexerApi
from zgstorage.rpc import RpcError
from zgstorage.shard import ShardConfig
from zgstorage.zgs_client import new_zgs_clients

URL_A = "http://127.0.0.1:5678"
URL_B = "http://127.0.0.1:5679"


@pytest.fixture
def rsps():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


def _shard(rsps, url, shard_id, num_shard):
    rsps.add(
        responses.POST,
        url,
        json={"jsonrpc": "2.0", "id": 1, "result": {"shardId": shard_id, "numShard": num_shard}},
    )


def test_namespace():
    assert IndexerApi([]).namespace == "indexer"


def test_get_nodes_returns_valid_configs(rsps):
    _shard(rsps, URL_A, 1, 2)
    _shard(rsps, URL_B, 0, 4)
    nodes = IndexerApi(new_zgs_clients([URL_A, URL_B])).get_nodes()
    assert [n.url for n in nodes] == [URL_A, URL_B]
    assert nodes[0].config == ShardConfig(shard_id=1, num_shard=2)
    assert nodes[1].config == ShardConfig(shard_id=0, num_shard=4)


def test_get_nodes_skips_invalid_configs(rsps):
    _shard(rsps, URL_A, 0, 0)
    _shard(rsps, URL_B, 0, 1)
    nodes = IndexerApi(new_zgs_clients([URL_A, URL_B])).get_nodes()
    assert [n.url for n in nodes] == [URL_B]


def test_get_nodes_with_no_nodes():
    assert IndexerApi([]).get_nodes() == []


def test_get_nodes_reports_rpc_failure(rsps):
    rsps.add(
        responses.POST,
        URL_A,
        json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "boom"}},
    )
    with pytest.raises(RpcError, match="Failed to query shard config from storage node"):
        IndexerApi(new_zgs_clients([URL_A])).get_nodes()
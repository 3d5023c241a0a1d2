import base64
import json

import pytest
import responses

from zgstorage.hashes import encode_hex, keccak256
from zgstorage.merkle import Proof
from zgstorage.node_types import SegmentWithProof
from zgstorage.rpc import RpcError
from zgstorage.shard import ShardConfig
from zgstorage.zgs_client import ZgsClient, new_zgs_clients

URL = "http://localhost:5678"
ROOT = keccak256(b"file")


def _serve(rsps, results):
    calls = []

    def handler(request):
        body = json.loads(request.body)
        calls.append(body)
        reply = {"jsonrpc": "2.0", "id": body["id"], "result": results[body["method"]]}
        return (200, {"Content-Type": "application/json"}, json.dumps(reply))

    rsps.add_callback(responses.POST, URL, callback=handler)
    return calls


def test_get_status():
    client = ZgsClient(URL)
    with responses.RequestsMock() as rsps:
        _serve(rsps, {"zgs_getStatus": {"connectedPeers": 2, "logSyncHeight": 50, "logSyncBlock": encode_hex(ROOT)}})
        status = client.get_status()
    assert status.connected_peers == 2
    assert status.log_sync_height == 50
    assert status.log_sync_block == ROOT


def test_get_file_info_sends_hex_root():
    client = ZgsClient(URL)
    with responses.RequestsMock() as rsps:
        calls = _serve(rsps, {"zgs_getFileInfo": {"tx": {"size": 10, "seq": 1}, "finalized": True}})
        info = client.get_file_info(ROOT)
    assert calls[0]["params"] == [encode_hex(ROOT)]
    assert info.finalized is True
    assert info.tx.size == 10


def test_get_file_info_missing_returns_none():
    client = ZgsClient(URL)
    with responses.RequestsMock() as rsps:
        _serve(rsps, {"zgs_getFileInfo": None})
        assert client.get_file_info(ROOT) is None


def test_get_file_info_by_tx_seq():
    client = ZgsClient(URL)
    with responses.RequestsMock() as rsps:
        calls = _serve(rsps, {"zgs_getFileInfoByTxSeq": {"tx": {"seq": 6}}})
        info = client.get_file_info_by_tx_seq(6)
    assert calls[0]["params"] == [6]
    assert info.tx.seq == 6


def test_upload_segments_sends_encoded_segments():
    segment = SegmentWithProof(root=ROOT, data=b"abc", index=0, proof=Proof(lemma=[ROOT], path=[]), file_size=3)
    client = ZgsClient(URL)
    with responses.RequestsMock() as rsps:
        calls = _serve(rsps, {"zgs_uploadSegments": 0, "zgs_uploadSegment": 0})
        assert client.upload_segments([segment]) == 0
        assert client.upload_segment(segment) == 0
    assert calls[0]["method"] == "zgs_uploadSegments"
    assert calls[0]["params"] == [[segment.to_dict()]]
    assert SegmentWithProof.from_dict(calls[1]["params"][0]) == segment


def test_download_segment_decodes_data():
    client = ZgsClient(URL)
    with responses.RequestsMock() as rsps:
        calls = _serve(rsps, {"zgs_downloadSegment": base64.b64encode(b"chunk").decode()})
        data = client.download_segment(ROOT, 0, 1)
    assert data == b"chunk"
    assert calls[0]["params"] == [encode_hex(ROOT), 0, 1]


def test_download_segment_empty_returns_none():
    client = ZgsClient(URL)
    with responses.RequestsMock() as rsps:
        _serve(rsps, {"zgs_downloadSegment": None})
        assert client.download_segment(ROOT, 0, 1) is None


def test_download_segment_with_proof():
    segment = SegmentWithProof(root=ROOT, data=b"xyz", index=2, proof=Proof(lemma=[ROOT], path=[]), file_size=3)
    client = ZgsClient(URL)
    with responses.RequestsMock() as rsps:
        calls = _serve(rsps, {"zgs_downloadSegmentWithProof": segment.to_dict()})
        result = client.download_segment_with_proof(ROOT, 2)
    assert result == segment
    assert calls[0]["params"] == [encode_hex(ROOT), 2]


def test_get_shard_config():
    client = ZgsClient(URL)
    with responses.RequestsMock() as rsps:
        _serve(rsps, {"zgs_getShardConfig": {"shardId": 1, "numShard": 4}})
        config = client.get_shard_config()
    assert config == ShardConfig(shard_id=1, num_shard=4)


def test_rpc_error_propagates():
    client = ZgsClient(URL)
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, URL, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -1, "message": "down"}})
        with pytest.raises(RpcError, match="down"):
            client.get_status()


def test_new_zgs_clients_keeps_order():
    urls = ["http://localhost:5678", "http://localhost:5679"]
    clients = new_zgs_clients(urls)
    assert [c.url for c in clients] == urls


def test_new_zgs_clients_rejects_bad_url():
    with pytest.raises(ValueError):
        new_zgs_clients(["localhost:5678"])
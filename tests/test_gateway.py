# tests/test_gateway.py
"""
HTTP tests for the mock exchange gateway
"""

import time
import uuid

import pytest
from fastapi.testclient import TestClient

from gateway.app import create_app
from gateway.commands import (
    AddOrderRequest,
    FormBodyParser,
    JsonBodyParser,
    QueryOrderRequest,
    parse_fields,
    parse_request,
)
from mock_exchange import BadRequest, Settings, StaticPriceSource

CONFIG_YAML = """
balances:
  xbt: 1.5
  Eth: 10
addresses:
  XBT: bc1qtestaddress
"""


@pytest.fixture
def settings(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML)
    return Settings(account_config_path=str(path))


def make_client(settings, delay=0.0):
    app = create_app(
        settings=settings,
        price_source=StaticPriceSource({"XBTUSD": 30000.0}),
        delay_provider=lambda: delay,
    )
    return TestClient(app)


def wait_for_status(client, txid, status, timeout=5.0):
    deadline = time.monotonic() + timeout
    while True:
        body = client.post("/0/private/QueryOrders", json={"txid": txid}).json()
        if body["result"][txid]["status"] == status or time.monotonic() > deadline:
            return body["result"][txid]
        time.sleep(0.01)


class TestBodyParsers:
    """Test request body parsing"""

    def test_json_object(self):
        assert JsonBodyParser().parse(b'{"txid": "abc"}') == {"txid": "abc"}

    def test_json_rejects_non_objects(self):
        assert JsonBodyParser().parse(b'[1, 2]') is None
        assert JsonBodyParser().parse(b'txid=abc') is None

    def test_form_pairs(self):
        fields = FormBodyParser().parse(b"nonce=1&pair=XBTUSD&volume=2.0&")

        assert fields == {"nonce": "1", "pair": "XBTUSD", "volume": "2.0"}

    def test_form_percent_decoding(self):
        assert FormBodyParser().parse(b"asset=x%20b+t") == {"asset": "x b t"}

    def test_form_rejects_bare_segments(self):
        assert FormBodyParser().parse(b"garbage") is None
        assert FormBodyParser().parse(b"a=1&oops") is None

    def test_both_encodings_give_same_command(self):
        from_json = parse_request(
            b'{"ordertype": "market", "type": "buy", "volume": 2.0, "pair": "XBTUSD"}', AddOrderRequest)
        from_form = parse_request(b"orderType=market&type=buy&volume=2.0&pair=XBTUSD", AddOrderRequest)

        assert from_json == from_form
        assert from_json.to_new_order().volume == 2.0

    def test_empty_body(self):
        with pytest.raises(BadRequest):
            parse_fields(b"  ")

    def test_bad_volume(self):
        with pytest.raises(BadRequest):
            parse_request(b"type=buy&volume=lots", AddOrderRequest)

    def test_unknown_fields_ignored(self):
        assert parse_request(b'{"txid": "abc", "nonce": 5}', QueryOrderRequest).txid == "abc"


class TestOrderEndpoints:
    """Test AddOrder / QueryOrders"""

    def test_place_and_settle(self, settings):
        with make_client(settings) as client:
            resp = client.post("/0/private/AddOrder", json={
                "ordertype": "market", "type": "buy", "volume": 2.0, "pair": "XBTUSD",
            })
            assert resp.status_code == 200
            result = resp.json()["result"]
            assert len(result["txid"]) == 1
            assert result["descr"] == "buy 2.000000 XBTUSD @ market"

            order = wait_for_status(client, result["txid"][0], "closed")

        assert order["status"] == "closed"
        assert order["vol"] == 2.0
        assert order["fee"] == pytest.approx(0.2)
        assert order["price"] == 30000.0
        assert order["cost"] == pytest.approx(60000.0)

    def test_open_before_settlement(self, settings):
        with make_client(settings, delay=3600.0) as client:
            txid = client.post(
                "/0/private/AddOrder",
                content="orderType=market&type=sell&volume=1.5&pair=XBTUSD",
            ).json()["result"]["txid"][0]

            resp = client.post("/0/private/QueryOrders", content=f"nonce=1&txid={txid}")

        assert resp.status_code == 200
        assert resp.json()["result"][txid] == {
            "status": "open", "vol": 1.5, "fee": 0.0, "price": 0.0, "cost": 0.0,
        }

    def test_unknown_pair_stays_open(self, settings):
        with make_client(settings) as client:
            txid = client.post("/0/private/AddOrder", json={
                "ordertype": "market", "type": "buy", "volume": 1.0, "pair": "NOPE",
            }).json()["result"]["txid"][0]

            deadline = time.monotonic() + 5.0
            while client.get("/health").json()["pending_settlements"] and time.monotonic() < deadline:
                time.sleep(0.01)
            order = client.post("/0/private/QueryOrders", json={"txid": txid}).json()["result"][txid]
            metrics = client.get("/metrics").text

        assert order["status"] == "open"
        assert order["price"] == 0.0
        assert "orders_abandoned_total 1.0" in metrics

    def test_distinct_ids(self, settings):
        with make_client(settings, delay=3600.0) as client:
            ids = {
                client.post("/0/private/AddOrder", json={"type": "buy", "volume": 1, "pair": "XBTUSD"})
                .json()["result"]["txid"][0]
                for _ in range(5)
            }
        assert len(ids) == 5

    def test_query_unknown_order(self, settings):
        with make_client(settings) as client:
            resp = client.post("/0/private/QueryOrders", json={"txid": str(uuid.uuid4())})

        assert resp.status_code == 404
        assert resp.json() == {"error": ["order not found"]}

    def test_query_malformed_id(self, settings):
        with make_client(settings) as client:
            resp = client.post("/0/private/QueryOrders", content="txid=%00%ff")

        assert resp.status_code == 404

    @pytest.mark.parametrize("body", ['{"txid": 123}', '{"txid": null}', '{"txid": ["x"]}'])
    def test_query_non_string_id(self, settings, body):
        with make_client(settings) as client:
            resp = client.post("/0/private/QueryOrders", content=body)

        assert resp.status_code == 404
        assert resp.json() == {"error": ["order not found"]}

    @pytest.mark.parametrize("body", [
        "type=buy&pair=XBTUSD&volume=nan",
        "type=buy&pair=XBTUSD&volume=inf",
        '{"type": "buy", "pair": "XBTUSD", "volume": NaN}',
        '{"type": "buy", "pair": "XBTUSD", "volume": Infinity}',
    ])
    def test_add_order_non_finite_volume(self, settings, body):
        with make_client(settings) as client:
            resp = client.post("/0/private/AddOrder", content=body)
            health = client.get("/health").json()

        assert resp.status_code == 500
        assert resp.json() == {"error": ["bad request"]}
        assert health["orders"] == 0

    def test_add_order_bad_body(self, settings):
        with make_client(settings) as client:
            resp = client.post("/0/private/AddOrder", content="not a valid body")

        assert resp.status_code == 500
        assert resp.json() == {"error": ["bad request"]}

    def test_query_bad_body(self, settings):
        with make_client(settings) as client:
            resp = client.post("/0/private/QueryOrders", content="")

        assert resp.status_code == 500


class TestAccountEndpoints:
    """Test Balance / Addresses / Withdraw"""

    def test_balance_keys_upper_cased(self, settings):
        with make_client(settings) as client:
            resp = client.post("/0/private/Balance")

        assert resp.status_code == 200
        assert resp.json() == {"error": [], "result": {"XBT": 1.5, "ETH": 10.0}}

    def test_balance_config_error(self, tmp_path):
        with make_client(Settings(account_config_path=str(tmp_path / "missing.yaml"))) as client:
            resp = client.post("/0/private/Balance")

        assert resp.status_code == 500
        assert isinstance(resp.json()["error"], str)

    def test_balance_undecodable_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_bytes(b"balances:\n  xbt: \xff\xfe\n")

        with make_client(Settings(account_config_path=str(path))) as client:
            resp = client.post("/0/private/Balance")

        assert resp.status_code == 500
        assert "cannot parse config" in resp.json()["error"]

    @pytest.mark.parametrize("path", ["/0/private/DepositAddresses", "/0/private/WithdrawAddresses"])
    def test_address_lookup(self, settings, path):
        with make_client(settings) as client:
            resp = client.post(path, content="asset=xbt&method=Bitcoin")

        assert resp.status_code == 200
        body = resp.json()
        assert body["error"] == []
        assert body["result"][0]["address"] == "bc1qtestaddress"

    def test_address_json_body(self, settings):
        with make_client(settings) as client:
            resp = client.post("/0/private/DepositAddresses", json={"asset": "XBT"})

        assert resp.json()["result"][0]["address"] == "bc1qtestaddress"

    def test_address_missing_asset(self, settings):
        with make_client(settings) as client:
            resp = client.post("/0/private/DepositAddresses", content="")

        assert resp.status_code == 400
        assert resp.json() == {"error": "missing asset"}

    def test_address_unknown_asset(self, settings):
        with make_client(settings) as client:
            resp = client.post("/0/private/DepositAddresses", json={"asset": "doge"})

        assert resp.status_code == 500
        assert "doge" in resp.json()["error"]

    def test_withdraw(self, settings):
        with make_client(settings) as client:
            first = client.post("/0/private/Withdraw", content="asset=xbt&amount=1").json()
            second = client.post("/0/private/Withdraw").json()

        assert first["error"] == []
        assert first["result"]["refid"] != second["result"]["refid"]


class TestOperationalEndpoints:
    """Test health and metrics"""

    def test_health(self, settings):
        with make_client(settings, delay=3600.0) as client:
            client.post("/0/private/AddOrder", json={"type": "buy", "volume": 1, "pair": "XBTUSD"})
            body = client.get("/health").json()

        assert body["status"] == "ok"
        assert body["orders"] == 1
        assert body["pending_settlements"] == 1

    def test_metrics(self, settings):
        with make_client(settings, delay=3600.0) as client:
            client.post("/0/private/AddOrder", json={"type": "buy", "volume": 1, "pair": "XBTUSD"})
            resp = client.get("/metrics")

        assert resp.status_code == 200
        assert "orders_placed_total 1.0" in resp.text
        assert "orders_open 1" in resp.text

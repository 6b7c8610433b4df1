# tests/conftest.py
import itertools
import json
from collections import defaultdict

import httpx
import pytest
from eth_abi import decode, encode
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector

from ledgersync.abi import CONTRACT_ABI
from ledgersync.errors import RpcError, WriteRejected
from ledgersync.schemas.ledger import NetworkDescriptor, TransactionResult
from ledgersync.services.gateway import LedgerGateway
from ledgersync.services.rpc_client import JsonRpcClient
from ledgersync.services.signing import EventHub, JsonRpcSigningProvider, UNRECOGNIZED_CHAIN

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20
CONTRACT = "0x333bAec4BbC595049a6ec186Ddd6EE03fe349D44"
RPC_URL = "http://ledger.test"

SEPOLIA = NetworkDescriptor(
    chain_id=11155111,
    name="Sepolia Test Network",
    rpc_endpoints=["https://sepolia.infura.io/v3/"],
    explorer_endpoints=["https://sepolia.etherscan.io/"],
)
MAINNET_ID = 1


def revert(reason: str) -> RpcError:
    """RpcError shaped like a node's require() failure."""
    data = encode_hex(bytes.fromhex("08c379a0") + encode(["string"], [reason]))
    return RpcError(3, f"execution reverted: {reason}", data)


# ---- 1) In-memory contract ----

class FakeLedger:
    """Mimics the registry contract: point lookups, counters and writes."""

    def __init__(self):
        self.devices = []
        self.records = []
        self.thresholds = {}
        self.failing_devices = set()
        self.failing_records = set()
        self.calls = []

    def add_device(self, device_id, owner, is_active=True, registration_time=1700000000,
                   last_update_time=0):
        self.devices.append({
            "device_id": device_id,
            "owner": owner,
            "is_active": is_active,
            "registration_time": registration_time,
            "last_update_time": last_update_time,
        })
        return len(self.devices) - 1

    def add_record(self, device_index, data_type=0, timestamp=1700000100, submitter=ALICE):
        self.records.append({
            "device_index": device_index,
            "data_type": data_type,
            "timestamp": timestamp,
            "submitter": submitter,
        })
        return len(self.records) - 1

    def _find(self, device_id):
        for i, d in enumerate(self.devices):
            if d["device_id"] == device_id:
                return i
        return None

    def call(self, op, *args):
        self.calls.append((op, args))
        if op == "getTotalDevices":
            return len(self.devices)
        if op == "getTotalDataRecords":
            return len(self.records)
        if op == "getDeviceInfo":
            (index,) = args
            if index in self.failing_devices or index >= len(self.devices):
                raise revert("Invalid device index")
            d = self.devices[index]
            return (d["device_id"], d["owner"], d["is_active"],
                    d["registration_time"], d["last_update_time"])
        if op == "getDataRecord":
            (record_id,) = args
            if record_id in self.failing_records or record_id >= len(self.records):
                raise revert("Invalid record id")
            r = self.records[record_id]
            return (r["device_index"], r["data_type"], r["timestamp"], r["submitter"])
        if op == "getDeviceByString":
            index = self._find(args[0])
            return (0, False) if index is None else (index, True)
        if op == "getDeviceDataCount":
            return sum(1 for r in self.records if r["device_index"] == args[0])
        if op == "isThresholdSet":
            return (args[0], args[1]) in self.thresholds
        raise AssertionError(f"Unexpected read: {op}")

    def execute(self, op, sender, *args):
        self.calls.append((op, args))
        if op == "registerDevice":
            if self._find(args[0]) is not None:
                raise revert("Device already registered")
            return self.add_device(args[0], sender.lower())
        if op == "submitData":
            index, value, data_type = args
            if index >= len(self.devices) or not self.devices[index]["is_active"]:
                raise revert("Device not active")
            self.devices[index]["last_update_time"] = 1700000500
            return self.add_record(index, data_type, 1700000500, sender.lower())
        if op == "setThreshold":
            index, data_type, min_value, max_value = args
            self.thresholds[(index, data_type)] = (min_value, max_value)
            return None
        if op == "deactivateDevice":
            (index,) = args
            if self.devices[index]["owner"].lower() != sender.lower():
                raise revert("Not device owner")
            self.devices[index]["is_active"] = False
            return None
        raise AssertionError(f"Unexpected write: {op}")


# ---- 2) Gateway stand-in for scanner / service tests ----

class FakeGateway:
    def __init__(self, ledger, identity=ALICE):
        self.ledger = ledger
        self.identity = identity
        self.is_ready = True
        self.provider = None
        self.network = SEPOLIA
        self.submitted = []
        self._hashes = itertools.count(1)

    async def query(self, op, *args):
        return self.ledger.call(op, *args)

    async def submit(self, op, *args):
        self.submitted.append((op, args))
        try:
            self.ledger.execute(op, self.identity, *args)
        except RpcError as e:
            raise WriteRejected(e.message) from e
        return TransactionResult(tx_hash="0x%064x" % next(self._hashes), block_number=1)


# ---- 3) JSON-RPC node behind httpx.MockTransport ----

SELECTORS = {}
for _fn in CONTRACT_ABI:
    _in = [i["type"] for i in _fn["inputs"]]
    _sig = f"{_fn['name']}({','.join(_in)})"
    SELECTORS[function_signature_to_4byte_selector(_sig)] = (
        _fn["name"], _in, [o["type"] for o in _fn["outputs"]],
    )


class LedgerNode:
    """JSON-RPC endpoint + wallet in one, backed by a FakeLedger."""

    def __init__(self, ledger, accounts=None, chain_id=SEPOLIA.chain_id):
        self.ledger = ledger
        self.accounts = list(accounts) if accounts is not None else [ALICE]
        self.chain_id = chain_id
        self.known_chains = {SEPOLIA.chain_id, MAINNET_ID}
        self.switch_error = None
        self.permission_error = None
        self.authorized = True
        self.down = False
        self.pending_polls = 0
        self.revert_on_chain = False
        self.balance_wei = 10 ** 18
        self.receipts = {}
        self.polls = defaultdict(int)
        self.log = []
        self.added_chains = []
        self._hashes = itertools.count(1)

    def _decode(self, data):
        raw = decode_hex(data)
        name, in_types, out_types = SELECTORS[raw[:4]]
        return name, decode(in_types, raw[4:]), out_types

    def _eth_call(self, tx):
        name, args, out_types = self._decode(tx["data"])
        result = self.ledger.call(name, *args)
        if len(out_types) == 1:
            result = (result,)
        return encode_hex(encode(out_types, list(result)))

    def _send(self, tx):
        name, args, _ = self._decode(tx["data"])
        tx_hash = "0x%064x" % next(self._hashes)
        status = "0x1"
        if self.revert_on_chain:
            status = "0x0"
        else:
            self.ledger.execute(name, tx["from"], *args)
        self.receipts[tx_hash] = {
            "transactionHash": tx_hash,
            "blockNumber": hex(100 + len(self.receipts)),
            "status": status,
        }
        return tx_hash

    def _receipt(self, tx_hash):
        self.polls[tx_hash] += 1
        if self.polls[tx_hash] <= self.pending_polls:
            return None
        return self.receipts.get(tx_hash)

    def _switch(self, chain_id_hex):
        if self.switch_error is not None:
            raise self.switch_error
        chain_id = int(chain_id_hex, 16)
        if chain_id not in self.known_chains:
            raise RpcError(UNRECOGNIZED_CHAIN, "Unrecognized chain ID")
        self.chain_id = chain_id

    def _add_chain(self, descriptor):
        self.added_chains.append(descriptor)
        chain_id = int(descriptor["chainId"], 16)
        self.known_chains.add(chain_id)
        self.chain_id = chain_id

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method, params = body["method"], body["params"]
        self.log.append(method)
        if self.down:
            raise httpx.ConnectError("endpoint down", request=request)
        try:
            if method == "eth_call":
                result = self._eth_call(params[0])
            elif method == "eth_sendTransaction":
                result = self._send(params[0])
            elif method == "eth_getTransactionReceipt":
                result = self._receipt(params[0])
            elif method == "eth_getBalance":
                result = hex(self.balance_wei)
            elif method == "eth_requestAccounts":
                result = list(self.accounts)
            elif method == "eth_accounts":
                result = list(self.accounts) if self.authorized else []
            elif method == "wallet_requestPermissions":
                if self.permission_error is not None:
                    raise self.permission_error
                result = [{"parentCapability": "eth_accounts"}]
            elif method == "eth_chainId":
                result = hex(self.chain_id)
            elif method == "wallet_switchEthereumChain":
                result = self._switch(params[0]["chainId"])
            elif method == "wallet_addEthereumChain":
                result = self._add_chain(params[0])
            else:
                raise RpcError(-32601, f"Method not found: {method}")
        except RpcError as e:
            error = {"code": e.code, "message": e.message, "data": e.data}
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": error})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def count(self, method):
        return self.log.count(method)


def make_gateway(node, provider="jsonrpc", receipt_timeout=5.0):
    rpc = JsonRpcClient(RPC_URL, transport=httpx.MockTransport(node.handle))
    if provider == "jsonrpc":
        provider = JsonRpcSigningProvider(rpc)
    return LedgerGateway(
        provider=provider,
        rpc=rpc,
        contract_address=CONTRACT,
        network=SEPOLIA,
        receipt_timeout=receipt_timeout,
        poll_interval=0,
    )


# ---- 4) Provider stand-in for negotiation tests ----

class FakeProvider:
    def __init__(self, chain_id=SEPOLIA.chain_id, accounts=None):
        self.accounts = list(accounts) if accounts is not None else [ALICE]
        self.current_chain = chain_id
        self.known_chains = {SEPOLIA.chain_id, MAINNET_ID}
        self.chain_error = None
        self.switch_error = None
        self.register_error = None
        self.requests = []
        self.registered = []
        self._events = EventHub()

    async def request_accounts(self):
        self.requests.append("eth_requestAccounts")
        return list(self.accounts)

    async def existing_accounts(self):
        self.requests.append("eth_accounts")
        return list(self.accounts)

    async def request_identity_switch(self):
        self.requests.append("wallet_requestPermissions")
        return list(self.accounts)

    async def chain_id(self):
        self.requests.append("eth_chainId")
        if self.chain_error is not None:
            raise self.chain_error
        return self.current_chain

    async def switch_network(self, chain_id_hex):
        self.requests.append("wallet_switchEthereumChain")
        if self.switch_error is not None:
            raise self.switch_error
        chain_id = int(chain_id_hex, 16)
        if chain_id not in self.known_chains:
            raise RpcError(UNRECOGNIZED_CHAIN, "Unrecognized chain ID")
        self.current_chain = chain_id

    async def register_network(self, descriptor):
        self.requests.append("wallet_addEthereumChain")
        self.registered.append(descriptor)
        if self.register_error is not None:
            raise self.register_error
        chain_id = int(descriptor["chainId"], 16)
        self.known_chains.add(chain_id)
        self.current_chain = chain_id

    async def send_transaction(self, tx):
        raise AssertionError("not used in negotiation tests")

    def subscribe(self, event, listener):
        return self._events.subscribe(event, listener)

    async def emit(self, event, payload):
        await self._events.emit(event, payload)


# ---- 5) Fixtures ----

@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def node(ledger):
    return LedgerNode(ledger)


@pytest.fixture
def fake_gateway(ledger):
    return FakeGateway(ledger)

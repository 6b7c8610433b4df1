"""
Contract call codec.
Turns (function name, args) into eth_call / eth_sendTransaction calldata and
decodes the hex results back into Python values, driven by the ABI table.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from eth_abi import decode, encode
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector

from ledgersync.abi import CONTRACT_ABI

logger = logging.getLogger(__name__)

# Error(string) selector used by require()/revert("...")
REVERT_SELECTOR = bytes.fromhex("08c379a0")


class ContractCodec:
    def __init__(self, abi: Optional[List[dict]] = None):
        self._functions: Dict[str, dict] = {
            entry["name"]: entry
            for entry in (abi if abi is not None else CONTRACT_ABI)
            if entry.get("type") == "function"
        }

    def _function(self, name: str) -> dict:
        try:
            return self._functions[name]
        except KeyError:
            raise ValueError(f"Unknown contract function: {name!r}")

    @staticmethod
    def _types(params: List[dict]) -> List[str]:
        return [p["type"] for p in params]

    def signature(self, name: str) -> str:
        fn = self._function(name)
        return f"{name}({','.join(self._types(fn['inputs']))})"

    def encode_call(self, name: str, args: Tuple[Any, ...]) -> str:
        """Return 0x-prefixed calldata for `name(*args)`."""
        fn = self._function(name)
        input_types = self._types(fn["inputs"])
        if len(args) != len(input_types):
            raise ValueError(
                f"{name} expects {len(input_types)} argument(s), got {len(args)}"
            )
        selector = function_signature_to_4byte_selector(self.signature(name))
        return encode_hex(selector + encode(input_types, list(args)))

    def decode_result(self, name: str, raw: str) -> Any:
        """Decode eth_call output. One output -> bare value, several -> tuple."""
        output_types = self._types(self._function(name)["outputs"])
        if not output_types:
            return None
        values = decode(output_types, decode_hex(raw))
        if len(values) == 1:
            return values[0]
        return tuple(values)

    @staticmethod
    def decode_revert_reason(data: Any) -> Optional[str]:
        """Extract the reason string from Error(string) revert data, if present."""
        if not isinstance(data, str) or not data.startswith("0x"):
            return None
        raw = decode_hex(data)
        if raw[:4] != REVERT_SELECTOR:
            return None
        try:
            (reason,) = decode(["string"], raw[4:])
        except Exception as e:
            logger.debug("Undecodable revert payload %s: %s", data, e)
            return None
        return reason

"""Unit tests for revert payload decoding."""

from eth_abi import encode
from eth_utils import keccak
from web3.exceptions import ContractLogicError

from amm_ops.core.exceptions import RemoteRejectionError, TransactionError
from amm_ops.utils.reverts import (
    ERROR_SELECTOR,
    PANIC_SELECTOR,
    abi_signature,
    decode_revert,
    error_selector,
    to_remote_rejection,
)

TRADING_CLOSED = {
    "type": "error",
    "name": "TradingClosed",
    "inputs": [
        {"name": "account", "type": "address"},
        {"name": "limit", "type": "uint256"},
    ],
}

ACCOUNT = "0x" + "ab" * 20


def hexdata(raw):
    return "0x" + raw.hex()


class TestSignatures:
    def test_error_signature(self):
        assert abi_signature(TRADING_CLOSED) == "TradingClosed(address,uint256)"

    def test_tuple_signature(self):
        entry = {
            "name": "Bad",
            "inputs": [{
                "type": "tuple[]",
                "components": [{"type": "uint24"}, {"type": "int24"}],
            }],
        }
        assert abi_signature(entry) == "Bad((uint24,int24)[])"

    def test_selector(self):
        assert error_selector(TRADING_CLOSED) == keccak(text="TradingClosed(address,uint256)")[:4]


class TestDecodeRevert:
    """Decoding Error(string), Panic(uint256) and custom errors."""

    def test_error_string(self):
        data = ERROR_SELECTOR + encode(["string"], ["Not approved"])
        decoded = decode_revert(hexdata(data))

        assert decoded["reason"] == "Not approved"
        assert decoded["error_name"] == "Error"
        assert decoded["data"] == hexdata(data)

    def test_panic(self):
        decoded = decode_revert(PANIC_SELECTOR + encode(["uint256"], [0x11]))

        assert decoded["error_name"] == "Panic"
        assert decoded["error_args"] == (0x11,)
        assert "overflow" in decoded["reason"]

    def test_custom_error_from_abi(self):
        data = error_selector(TRADING_CLOSED) + encode(["address", "uint256"], [ACCOUNT, 5])
        decoded = decode_revert(hexdata(data), [TRADING_CLOSED])

        assert decoded["error_name"] == "TradingClosed"
        assert decoded["error_args"][0].lower() == ACCOUNT
        assert decoded["error_args"][1] == 5
        assert decoded["reason"] is None

    def test_unknown_selector_keeps_raw_data(self):
        decoded = decode_revert("0xdeadbeef", [TRADING_CLOSED])

        assert decoded["error_name"] is None
        assert decoded["data"] == "0xdeadbeef"

    def test_truncated_payload(self):
        decoded = decode_revert(hexdata(ERROR_SELECTOR + b"\x00" * 4))

        assert decoded["reason"] is None
        assert decoded["data"] is not None

    def test_empty(self):
        assert decode_revert(None)["data"] is None
        assert decode_revert("0x")["data"] is None


class TestToRemoteRejection:
    """Converting web3 contract errors."""

    def test_reason_from_data(self):
        data = hexdata(ERROR_SELECTOR + encode(["string"], ["STF"]))
        exc = ContractLogicError("execution reverted: STF", data=data)

        error = to_remote_rejection(exc)

        assert isinstance(error, RemoteRejectionError)
        assert isinstance(error, TransactionError)
        assert error.reason == "STF"
        assert error.data == data
        assert error.__cause__ is exc
        assert "STF" in str(error)

    def test_reason_from_message_only(self):
        error = to_remote_rejection(ContractLogicError("execution reverted: Price slippage check"))

        assert error.reason == "Price slippage check"
        assert error.data is None

    def test_custom_error(self):
        data = hexdata(error_selector(TRADING_CLOSED) + encode(["address", "uint256"], [ACCOUNT, 0]))
        error = to_remote_rejection(ContractLogicError("execution reverted", data=data), [TRADING_CLOSED])

        assert error.error_name == "TradingClosed"
        assert "TradingClosed" in str(error)
        assert error.details()["error"] == "TradingClosed"

"""Decode revert payloads returned by remote contracts"""

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_utils import keccak

from ..core.exceptions import RemoteRejectionError
from ..core.logs import get_logger

logger = get_logger(__name__)

# Error(string) and Panic(uint256)
ERROR_SELECTOR = bytes.fromhex("08c379a0")
PANIC_SELECTOR = bytes.fromhex("4e487b71")

PANIC_CODES = {
    0x00: "generic compiler panic",
    0x01: "assertion failed",
    0x11: "arithmetic overflow or underflow",
    0x12: "division or modulo by zero",
    0x21: "invalid enum value",
    0x22: "invalid storage byte array encoding",
    0x31: "pop on empty array",
    0x32: "array index out of bounds",
    0x41: "out of memory",
    0x51: "call to uninitialized function",
}


def _canonical_type(param):
    """ABI type string for a parameter, expanding tuples"""
    abi_type = param["type"]
    if abi_type.startswith("tuple"):
        inner = ",".join(_canonical_type(c) for c in param.get("components", []))
        return f"({inner}){abi_type[len('tuple'):]}"
    return abi_type


def abi_signature(entry):
    """Canonical signature of an error or event entry, e.g. Swap(address,address,int256,...)"""
    types = ",".join(_canonical_type(p) for p in entry.get("inputs", []))
    return f"{entry['name']}({types})"


def error_selector(entry):
    """First four bytes of keccak256 of the error signature"""
    return keccak(text=abi_signature(entry))[:4]


def _to_bytes(data):
    if data is None:
        return None
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str) and data.startswith("0x"):
        try:
            return bytes.fromhex(data[2:])
        except ValueError:
            return None
    return None


def decode_revert(data, abi=None):
    """
    Decode a revert payload.

    Args:
        data: Raw revert data (hex string or bytes)
        abi: Contract ABI used to look up custom errors

    Returns:
        Dict with reason, error_name, error_args and data (hex); fields that
        could not be decoded are None
    """
    raw = _to_bytes(data)
    result = {
        "reason": None,
        "error_name": None,
        "error_args": None,
        "data": "0x" + raw.hex() if raw else None,
    }
    if not raw or len(raw) < 4:
        return result

    selector, payload = raw[:4], raw[4:]

    try:
        if selector == ERROR_SELECTOR:
            (reason,) = decode(["string"], payload)
            result.update(reason=reason, error_name="Error", error_args=(reason,))
        elif selector == PANIC_SELECTOR:
            (code,) = decode(["uint256"], payload)
            description = PANIC_CODES.get(code, "unknown panic code")
            result.update(
                reason=f"panic 0x{code:02x}: {description}",
                error_name="Panic",
                error_args=(code,),
            )
        else:
            for entry in abi or []:
                if entry.get("type") != "error" or error_selector(entry) != selector:
                    continue
                types = [_canonical_type(p) for p in entry.get("inputs", [])]
                args = decode(types, payload)
                result.update(error_name=entry["name"], error_args=tuple(args))
                break
    except DecodingError as e:
        logger.debug(f"Could not decode revert payload {result['data']}: {e}")

    return result


def to_remote_rejection(exc, abi=None):
    """
    Convert a web3 contract logic error into a RemoteRejectionError.

    Args:
        exc: web3.exceptions.ContractLogicError (or subclass)
        abi: ABI of the contract that was called, for custom error lookup
    """
    data = getattr(exc, "data", None)
    if isinstance(data, dict):
        data = data.get("data")

    message = getattr(exc, "message", None) or str(exc)
    decoded = decode_revert(data, abi)

    reason = decoded["reason"]
    prefix = "execution reverted: "
    if reason is None and message.startswith(prefix):
        reason = message[len(prefix):]

    summary = reason or decoded["error_name"] or message
    error = RemoteRejectionError(
        f"Remote contract rejected the call: {summary}",
        reason=reason,
        error_name=decoded["error_name"],
        error_args=decoded["error_args"],
        data=decoded["data"],
    )
    error.__cause__ = exc
    return error

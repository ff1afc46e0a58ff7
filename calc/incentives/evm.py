"""
Direct on-chain readers for reward pools, ERC-20 supplies and stash tokens.

Production configuration:
- RPC URL loaded from environment (ALCHEMY_ETH_RPC_URL) unless passed in
- Raw eth_call over JSON-RPC, selectors derived from the ABI signature
- NO caching: every method is one eth_call, errors loudly with RpcError

Convex / Aura BaseRewardPool:
- rewardRate(), totalSupply(), periodFinish(), rewardToken(), rewardPerToken()
- extraRewardsLength(), extraRewards(uint256) → VirtualBalanceRewardPool
- pid() → booster pool id (decides stash token handling)

Extra reward pools (VirtualBalanceRewardPool) expose the same reward
accessors and report 0 extras.
"""

from __future__ import annotations

from functools import lru_cache

import requests
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from .config import get_eth_rpc_url
from .errors import RpcError

# ============================================================================
# LOW-LEVEL RPC
# ============================================================================


@lru_cache(maxsize=None)
def _selector(signature: str) -> str:
    """4-byte selector as 0x-prefixed hex, e.g. totalSupply() → 0x18160ddd."""
    return "0x" + function_signature_to_4byte_selector(signature).hex()


def _eth_call(rpc_url: str, to: str, data: str) -> str:
    """Raw eth_call, returns hex result."""
    try:
        resp = requests.post(
            rpc_url,
            json={
                "jsonrpc": "2.0",
                "method": "eth_call",
                "params": [{"to": to, "data": data}, "latest"],
                "id": 1,
            },
            timeout=30,
        )
        result = resp.json()
    except (requests.RequestException, ValueError) as e:
        raise RpcError(f"eth_call to {to} failed: {e}") from e

    if not isinstance(result, dict):
        raise RpcError(f"eth_call to {to} returned a non-object reply: {result!r}")
    if "error" in result:
        raise RpcError(f"eth_call error: {result['error']}")

    payload = result.get("result")
    if not isinstance(payload, str):
        raise RpcError(f"eth_call to {to} returned no result")
    return payload


def _word(hex_str: str) -> str:
    """First 32-byte word of a call result. Short results mean no contract code."""
    h = hex_str[2:] if hex_str.startswith("0x") else hex_str
    if len(h) < 64:
        raise RpcError(f"eth_call returned {len(h) // 2} bytes, expected at least 32: {hex_str!r}")
    return h[:64]


def _decode_uint256(hex_str: str) -> int:
    """Decode uint256 from hex."""
    word = _word(hex_str)
    try:
        return int(word, 16)
    except ValueError as e:
        raise RpcError(f"eth_call returned non-hex data: {hex_str!r}") from e


def _decode_address(hex_str: str) -> str:
    """Decode address from 32-byte padded hex."""
    word = _word(hex_str)
    try:
        return to_checksum_address("0x" + word[24:])
    except ValueError as e:
        raise RpcError(f"eth_call returned a malformed address: {hex_str!r}") from e


def _encode_uint256(value: int) -> str:
    """Encode uint256 as 32-byte padded hex (no 0x prefix)."""
    return format(value, "064x")


# ============================================================================
# CONTRACT READERS
# ============================================================================


class _RpcContract:
    def __init__(self, address: str, rpc_url: str | None = None):
        self.address = to_checksum_address(address)
        self.rpc_url = rpc_url or get_eth_rpc_url()

    def _call(self, signature: str, args: str = "") -> str:
        return _eth_call(self.rpc_url, self.address, _selector(signature) + args)

    def _uint(self, signature: str, args: str = "") -> int:
        return _decode_uint256(self._call(signature, args))

    def _address(self, signature: str, args: str = "") -> str:
        return _decode_address(self._call(signature, args))

    def _bool(self, signature: str) -> bool:
        return self._uint(signature) != 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address})"


class RpcRewardPool(_RpcContract):
    """BaseRewardPool / VirtualBalanceRewardPool over JSON-RPC."""

    def reward_rate(self) -> int:
        return self._uint("rewardRate()")

    def total_supply(self) -> int:
        return self._uint("totalSupply()")

    def period_finish(self) -> int:
        return self._uint("periodFinish()")

    def reward_token(self) -> str:
        return self._address("rewardToken()")

    def reward_per_token(self) -> int:
        return self._uint("rewardPerToken()")

    def extra_rewards_length(self) -> int:
        return self._uint("extraRewardsLength()")

    def extra_rewards(self, index: int) -> RpcRewardPool:
        address = self._address("extraRewards(uint256)", _encode_uint256(index))
        return RpcRewardPool(address, self.rpc_url)

    def pid(self) -> int:
        return self._uint("pid()")


class RpcErc20(_RpcContract):
    def total_supply(self) -> int:
        return self._uint("totalSupply()")


class RpcConvexStashToken(_RpcContract):
    """Convex StashTokenWrapper."""

    def is_invalid(self) -> bool:
        return self._bool("isInvalid()")

    def token(self) -> str:
        return self._address("token()")


class RpcAuraStashToken(_RpcContract):
    """Aura stash token wrapper."""

    def is_valid(self) -> bool:
        return self._bool("isValid()")

    def base_token(self) -> str:
        return self._address("baseToken()")

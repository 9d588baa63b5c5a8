"""Uniswap V3 NonfungiblePositionManager contract wrapper"""

from web3.logs import DISCARD

from ..core.config import Config
from ..core.exceptions import PositionError, RemoteRejectionError
from ..utils.transactions import TransactionBuilder, call


class NFPM:
    """Wrapper for NonfungiblePositionManager interactions"""

    def __init__(self, manager, address, tx_builder=None):
        """
        Args:
            manager: Web3Manager instance
            address: NonfungiblePositionManager address
            tx_builder: Shared TransactionBuilder (created if None)
        """
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(self.address, "uniswap_v3_nfpm")
        self.tx_builder = tx_builder or TransactionBuilder(manager)

    def get_position(self, token_id):
        """
        Position data by token ID.

        Raises:
            PositionError: If the position does not exist
        """
        try:
            pos = call(self.contract.functions.positions(token_id))
        except RemoteRejectionError as e:
            raise PositionError(f"Position {token_id} not found: {e.reason or e}") from e

        return {
            "token_id": token_id,
            "nonce": pos[0],
            "operator": pos[1],
            "token0": pos[2],
            "token1": pos[3],
            "fee": pos[4],
            "tick_lower": pos[5],
            "tick_upper": pos[6],
            "liquidity": pos[7],
            "fee_growth_inside_0_last": pos[8],
            "fee_growth_inside_1_last": pos[9],
            "tokens_owed_0": pos[10],
            "tokens_owed_1": pos[11],
        }

    def owner_of(self, token_id):
        """
        Owner of a position NFT.

        Raises:
            PositionError: If the token does not exist
        """
        try:
            return call(self.contract.functions.ownerOf(token_id))
        except RemoteRejectionError as e:
            raise PositionError(f"Position {token_id} does not exist: {e.reason or e}") from e

    def require_owner(self, token_id, address=None):
        """Raise PositionError unless address (default: signer) owns token_id"""
        address = address or self.manager.address
        owner = self.owner_of(token_id)
        if owner.lower() != address.lower():
            raise PositionError(f"Position {token_id} is owned by {owner}, not {address}")
        return owner

    def balance_of(self, address=None):
        addr = address or self.manager.address
        return self.contract.functions.balanceOf(addr).call()

    def token_of_owner_by_index(self, index, address=None):
        addr = address or self.manager.address
        return self.contract.functions.tokenOfOwnerByIndex(addr, index).call()

    def token_ids(self, address=None):
        """All position token IDs held by address"""
        return [
            self.token_of_owner_by_index(i, address)
            for i in range(self.balance_of(address))
        ]

    def _events(self, receipt, name):
        event = getattr(self.contract.events, name)()
        return [
            e for e in event.process_receipt(receipt, errors=DISCARD)
            if e["address"].lower() == self.address.lower()
        ]

    def mint(self, params, gas_limit=None):
        """
        Mint new liquidity position.

        Args:
            params: dict with token0, token1, fee, tick_lower, tick_upper,
                    amount0_desired, amount1_desired, amount0_min, amount1_min,
                    recipient, deadline
            gas_limit: Fixed gas limit (estimated if None)

        Returns:
            Dict with receipt, token_id, liquidity, amount0, amount1
        """
        mint_params = {
            "token0": self.manager.checksum(params["token0"]),
            "token1": self.manager.checksum(params["token1"]),
            "fee": params["fee"],
            "tickLower": params["tick_lower"],
            "tickUpper": params["tick_upper"],
            "amount0Desired": params["amount0_desired"],
            "amount1Desired": params["amount1_desired"],
            "amount0Min": params.get("amount0_min", 0),
            "amount1Min": params.get("amount1_min", 0),
            "recipient": self.manager.checksum(params.get("recipient") or self.manager.address),
            "deadline": params["deadline"],
        }

        receipt = self.tx_builder.build_and_send(
            self.contract.functions.mint(mint_params),
            operation_type="mint",
            gas_limit=gas_limit,
            label="Mint position",
        )

        result = {"receipt": receipt, "token_id": None, "liquidity": None, "amount0": None, "amount1": None}

        increases = self._events(receipt, "IncreaseLiquidity")
        if increases:
            args = increases[0]["args"]
            result.update(
                token_id=args["tokenId"],
                liquidity=args["liquidity"],
                amount0=args["amount0"],
                amount1=args["amount1"],
            )
        else:
            # Fall back to the NFT mint Transfer
            transfers = self._events(receipt, "Transfer")
            if transfers:
                result["token_id"] = transfers[0]["args"]["tokenId"]

        return result

    def increase_liquidity(self, token_id, amount0_desired, amount1_desired,
                           deadline, amount0_min=0, amount1_min=0, gas_limit=None):
        """
        Add liquidity to an existing position.

        Returns:
            Dict with receipt, liquidity, amount0, amount1 and collected (amounts of
            any Collect event in the same receipt)
        """
        params = {
            "tokenId": token_id,
            "amount0Desired": amount0_desired,
            "amount1Desired": amount1_desired,
            "amount0Min": amount0_min,
            "amount1Min": amount1_min,
            "deadline": deadline,
        }

        receipt = self.tx_builder.build_and_send(
            self.contract.functions.increaseLiquidity(params),
            operation_type="increaseLiquidity",
            gas_limit=gas_limit,
            label="Increase liquidity",
        )

        result = {"receipt": receipt, "liquidity": None, "amount0": None, "amount1": None, "collected": None}
        increases = self._events(receipt, "IncreaseLiquidity")
        if increases:
            args = increases[0]["args"]
            result.update(liquidity=args["liquidity"], amount0=args["amount0"], amount1=args["amount1"])
        collects = self._events(receipt, "Collect")
        if collects:
            args = collects[0]["args"]
            result["collected"] = (args["amount0"], args["amount1"])
        return result

    def decrease_liquidity(self, token_id, liquidity, deadline, amount0_min=0, amount1_min=0):
        """Decrease liquidity from position; tokens become owed, not transferred"""
        params = {
            "tokenId": token_id,
            "liquidity": liquidity,
            "amount0Min": amount0_min,
            "amount1Min": amount1_min,
            "deadline": deadline,
        }

        receipt = self.tx_builder.build_and_send(
            self.contract.functions.decreaseLiquidity(params),
            operation_type="decreaseLiquidity",
            label="Decrease liquidity",
        )

        result = {"receipt": receipt, "amount0": None, "amount1": None}
        decreases = self._events(receipt, "DecreaseLiquidity")
        if decreases:
            args = decreases[0]["args"]
            result.update(amount0=args["amount0"], amount1=args["amount1"])
        return result

    def collect(self, token_id, recipient=None, amount0_max=None, amount1_max=None, gas_limit=None):
        """
        Collect owed tokens from a position.

        Returns:
            Dict with receipt, amount0, amount1 (from the Collect event)
        """
        params = {
            "tokenId": token_id,
            "recipient": self.manager.checksum(recipient or self.manager.address),
            "amount0Max": Config.MAX_UINT128 if amount0_max is None else amount0_max,
            "amount1Max": Config.MAX_UINT128 if amount1_max is None else amount1_max,
        }

        receipt = self.tx_builder.build_and_send(
            self.contract.functions.collect(params),
            operation_type="collect",
            gas_limit=gas_limit,
            label="Collect",
        )

        result = {"receipt": receipt, "amount0": None, "amount1": None}
        collects = self._events(receipt, "Collect")
        if collects:
            args = collects[0]["args"]
            result.update(amount0=args["amount0"], amount1=args["amount1"])
        return result

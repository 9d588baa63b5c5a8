"""Position operations: mint, increase, decrease, collect, fee queries"""

from decimal import Decimal, ROUND_FLOOR

from ..contracts import ERC20, NFPM
from ..core.exceptions import ConfigError, PositionError
from ..core.runner import Operation
from ..utils.math import sort_tokens
from ..utils.transactions import tx_hash_hex
from . import defaults


def _pool_fee(ctx):
    """Fee tier from --fee or the manifest's Pool record"""
    if ctx.settings.fee is not None:
        return ctx.settings.fee
    record = ctx.manifest.get("Pool") if ctx.manifest else None
    fee = record.get("fee") if record else None
    if fee is None:
        raise ConfigError("Pool fee not recorded in manifest; pass --fee")
    return int(fee)


def _require_token_id(ctx):
    if ctx.settings.token_id is None:
        raise ConfigError("--token-id is required")
    return ctx.settings.token_id


def _position_tokens(ctx, position):
    return (
        ERC20(ctx.manager, position["token0"], ctx.tx),
        ERC20(ctx.manager, position["token1"], ctx.tx),
    )


def _print_position(reporter, position, token0, token1):
    reporter.kv("Position ID", position["token_id"])
    reporter.kv("Pair", f"{token0.symbol}/{token1.symbol} (fee {position['fee']})")
    reporter.kv("Tick range", f"{position['tick_lower']} to {position['tick_upper']}")
    reporter.kv("Liquidity", position["liquidity"])
    reporter.kv(f"Owed {token0.symbol}", token0.from_wei(position["tokens_owed_0"]))
    reporter.kv(f"Owed {token1.symbol}", token1.from_wei(position["tokens_owed_1"]))


def add_liquidity(ctx):
    """Mint a new position on the TokenA/TokenB pool with explicit ticks and amounts"""
    settings = ctx.settings
    fee = _pool_fee(ctx)
    tick_lower = settings.tick_lower if settings.tick_lower is not None else defaults.ADD_LIQUIDITY_TICK_LOWER
    tick_upper = settings.tick_upper if settings.tick_upper is not None else defaults.ADD_LIQUIDITY_TICK_UPPER

    spacing = ctx.config.get_tick_spacing(fee)
    if tick_lower >= tick_upper:
        raise ValueError(f"Invalid tick range: {tick_lower} >= {tick_upper}")
    if tick_lower % spacing or tick_upper % spacing:
        raise ValueError(f"Ticks must be multiples of the tick spacing ({spacing}) for fee {fee}")

    token_a = ERC20(ctx.manager, ctx.resolve("TokenA"), ctx.tx)
    token_b = ERC20(ctx.manager, ctx.resolve("TokenB"), ctx.tx)
    nfpm = NFPM(ctx.manager, ctx.resolve("NonfungiblePositionManager"), ctx.tx)

    amount_a = token_a.to_wei(settings.amount0 if settings.amount0 is not None else defaults.ADD_LIQUIDITY_AMOUNT)
    amount_b = token_b.to_wei(settings.amount1 if settings.amount1 is not None else defaults.ADD_LIQUIDITY_AMOUNT)

    token0, token1, swapped = sort_tokens(token_a.address, token_b.address)
    amount0, amount1 = (amount_b, amount_a) if swapped else (amount_a, amount_b)

    ctx.reporter.banner(f"ADD LIQUIDITY: {token_a.symbol}/{token_b.symbol}")
    ctx.reporter.kv("Pool", ctx.resolve("Pool"))
    ctx.reporter.kv("Fee", fee)
    ctx.reporter.kv("Tick range", f"{tick_lower} to {tick_upper}")

    ctx.reporter.step("Approving position manager...")
    token_a.approve_max(nfpm.address)
    token_b.approve_max(nfpm.address)

    ctx.reporter.step("Minting position...")
    minted = nfpm.mint({
        "token0": token0,
        "token1": token1,
        "fee": fee,
        "tick_lower": tick_lower,
        "tick_upper": tick_upper,
        "amount0_desired": amount0,
        "amount1_desired": amount1,
        "recipient": ctx.manager.address,
        "deadline": ctx.deadline(defaults.MINT_DEADLINE_MINUTES),
    })

    erc0, erc1 = (token_b, token_a) if swapped else (token_a, token_b)
    ctx.reporter.tx("mint", minted["receipt"])
    ctx.reporter.kv("Position ID", minted["token_id"])
    ctx.reporter.kv("Liquidity", minted["liquidity"])
    if minted["amount0"] is not None:
        ctx.reporter.kv(f"Deposited {erc0.symbol}", erc0.from_wei(minted["amount0"]))
        ctx.reporter.kv(f"Deposited {erc1.symbol}", erc1.from_wei(minted["amount1"]))

    return {
        "token_id": minted["token_id"],
        "liquidity": minted["liquidity"],
        "amount0": minted["amount0"],
        "amount1": minted["amount1"],
        "transactionHash": tx_hash_hex(minted["receipt"]["transactionHash"]),
    }


def _select_position(ctx, positions):
    token_id = ctx.settings.token_id
    if token_id is None:
        answer = input("\nToken ID to increase: ").strip()
        try:
            token_id = int(answer)
        except ValueError:
            raise ConfigError(f"Not a token ID: {answer!r}")

    for position in positions:
        if position["token_id"] == token_id:
            return position
    raise PositionError(f"Position {token_id} is not owned by {ctx.manager.address}")


def increase_liquidity(ctx):
    """Add TokenA/TokenB to one of the signer's positions"""
    settings = ctx.settings
    nfpm = NFPM(ctx.manager, ctx.resolve("NonfungiblePositionManager"), ctx.tx)

    ctx.reporter.banner("INCREASE LIQUIDITY")
    token_ids = nfpm.token_ids()
    if not token_ids:
        raise PositionError(f"No positions owned by {ctx.manager.address}")

    ctx.reporter.section(f"Positions owned ({len(token_ids)})")
    positions = []
    for token_id in token_ids:
        position = nfpm.get_position(token_id)
        positions.append(position)
        ctx.reporter.info(
            f"#{token_id}: liquidity={position['liquidity']}, "
            f"owed={position['tokens_owed_0']}/{position['tokens_owed_1']}"
        )

    position = _select_position(ctx, positions)
    token_id = position["token_id"]
    token0, token1 = _position_tokens(ctx, position)

    # Amounts are given for TokenA/TokenB; map them onto the position's token order
    token_a = ctx.resolve("TokenA")
    amount_a = settings.amount0 if settings.amount0 is not None else defaults.INCREASE_LIQUIDITY_AMOUNT
    amount_b = settings.amount1 if settings.amount1 is not None else defaults.INCREASE_LIQUIDITY_AMOUNT
    if position["token0"].lower() == token_a.lower():
        amount0, amount1 = token0.to_wei(amount_a), token1.to_wei(amount_b)
    else:
        amount0, amount1 = token0.to_wei(amount_b), token1.to_wei(amount_a)

    ctx.reporter.step("Approving position manager...")
    token0.approve(nfpm.address, amount0)
    token1.approve(nfpm.address, amount1)

    ctx.reporter.step(f"Increasing liquidity of position {token_id}...")
    increased = nfpm.increase_liquidity(
        token_id, amount0, amount1,
        deadline=ctx.deadline(defaults.MINT_DEADLINE_MINUTES),
    )
    ctx.reporter.tx("increaseLiquidity", increased["receipt"])
    if increased["liquidity"] is not None:
        ctx.reporter.kv("Liquidity added", increased["liquidity"])
        ctx.reporter.kv(f"Deposited {token0.symbol}", token0.from_wei(increased["amount0"]))
        ctx.reporter.kv(f"Deposited {token1.symbol}", token1.from_wei(increased["amount1"]))
    if increased["collected"]:
        collected0, collected1 = increased["collected"]
        ctx.reporter.kv(f"Collected {token0.symbol}", token0.from_wei(collected0))
        ctx.reporter.kv(f"Collected {token1.symbol}", token1.from_wei(collected1))

    ctx.reporter.section("Updated position")
    updated = nfpm.get_position(token_id)
    _print_position(ctx.reporter, updated, token0, token1)

    return {
        "token_id": token_id,
        "liquidity_added": increased["liquidity"],
        "liquidity": updated["liquidity"],
    }


def liquidity_to_remove(liquidity, percentage):
    """
    Share of liquidity for a fraction, truncated to whole percent.

    liquidity * floor(percentage * 100) // 100, e.g. 0.555 removes 55%.
    """
    percentage = Decimal(str(percentage))
    if not 0 < percentage <= 1:
        raise ValueError(f"Percentage must be in (0, 1], got {percentage}")
    percent = int((percentage * 100).to_integral_value(rounding=ROUND_FLOOR))
    return liquidity * percent // 100


def remove_liquidity(ctx):
    """Decrease a position's liquidity by a fraction; tokens become collectable"""
    token_id = _require_token_id(ctx)
    percentage = ctx.settings.percentage
    if percentage is None:
        percentage = defaults.REMOVE_LIQUIDITY_PERCENTAGE
    nfpm = NFPM(ctx.manager, ctx.resolve("NonfungiblePositionManager"), ctx.tx)

    ctx.reporter.banner(f"REMOVE LIQUIDITY: position {token_id}")
    nfpm.require_owner(token_id)
    position = nfpm.get_position(token_id)
    if position["liquidity"] == 0:
        raise PositionError(f"Position {token_id} has no liquidity")

    amount = liquidity_to_remove(position["liquidity"], percentage)
    if amount == 0:
        raise PositionError(f"{percentage:%} of position {token_id} liquidity rounds to 0")

    ctx.reporter.kv("Position liquidity", position["liquidity"])
    ctx.reporter.kv("Removing", f"{amount} ({percentage * 100:.0f}%)")

    decreased = nfpm.decrease_liquidity(
        token_id, amount,
        deadline=ctx.deadline(defaults.DECREASE_DEADLINE_MINUTES),
    )
    ctx.reporter.tx("decreaseLiquidity", decreased["receipt"])

    token0, token1 = _position_tokens(ctx, position)
    if decreased["amount0"] is not None:
        ctx.reporter.kv(f"Released {token0.symbol}", token0.from_wei(decreased["amount0"]))
        ctx.reporter.kv(f"Released {token1.symbol}", token1.from_wei(decreased["amount1"]))
    ctx.reporter.info("Released tokens are owed to the position; run collect to withdraw them")

    return {
        "token_id": token_id,
        "liquidity_removed": amount,
        "amount0": decreased["amount0"],
        "amount1": decreased["amount1"],
    }


def collect(ctx):
    """Collect owed tokens from a position and check the balances moved by that much"""
    token_id = _require_token_id(ctx)
    nfpm = NFPM(ctx.manager, ctx.resolve("NonfungiblePositionManager"), ctx.tx)

    ctx.reporter.banner(f"COLLECT FEES: position {token_id}")
    ctx.reporter.step("Verifying ownership...")
    nfpm.require_owner(token_id)

    position = nfpm.get_position(token_id)
    owed0, owed1 = position["tokens_owed_0"], position["tokens_owed_1"]
    token0, token1 = _position_tokens(ctx, position)
    ctx.reporter.kv(f"Owed {token0.symbol}", token0.from_wei(owed0))
    ctx.reporter.kv(f"Owed {token1.symbol}", token1.from_wei(owed1))

    if owed0 == 0 and owed1 == 0:
        ctx.reporter.success("Nothing to collect")
        return {"token_id": token_id, "collected": False, "amount0": 0, "amount1": 0}

    before0 = token0.balance_of()
    before1 = token1.balance_of()

    ctx.reporter.step("Collecting...")
    collected = nfpm.collect(token_id, amount0_max=owed0, amount1_max=owed1)
    ctx.reporter.tx("collect", collected["receipt"])

    received0 = token0.balance_of() - before0
    received1 = token1.balance_of() - before1
    ctx.reporter.kv(f"Received {token0.symbol}", token0.from_wei(received0))
    ctx.reporter.kv(f"Received {token1.symbol}", token1.from_wei(received1))

    ctx.verify(
        received0 == owed0 and received1 == owed1,
        f"Collected amounts differ from owed: received {received0}/{received1}, "
        f"owed {owed0}/{owed1}",
    )

    ctx.reporter.success("Fees collected")
    return {"token_id": token_id, "collected": True, "amount0": received0, "amount1": received1}


def query_fees(ctx):
    """Show a position's owed fees without sending a transaction"""
    token_id = _require_token_id(ctx)
    if not ctx.manager.address:
        raise ConfigError("No account address: set PUBLIC_KEY or PRIVATE_KEY in wallet.env")
    nfpm = NFPM(ctx.manager, ctx.resolve("NonfungiblePositionManager"))

    ctx.reporter.banner(f"POSITION FEES: position {token_id}")
    nfpm.require_owner(token_id)
    position = nfpm.get_position(token_id)
    token0, token1 = _position_tokens(ctx, position)
    _print_position(ctx.reporter, position, token0, token1)

    return {
        "token_id": token_id,
        "tokens_owed_0": position["tokens_owed_0"],
        "tokens_owed_1": position["tokens_owed_1"],
    }


ADD_LIQUIDITY = Operation(
    name="add-liquidity",
    func=add_liquidity,
    manifest=defaults.POSITION_MANIFEST,
    roles=("TokenA", "TokenB", "Pool", "NonfungiblePositionManager"),
    description="Mint a new position with explicit ticks",
)

INCREASE_LIQUIDITY = Operation(
    name="increase-liquidity",
    func=increase_liquidity,
    manifest=defaults.POOL_MANIFEST,
    roles=("TokenA", "TokenB", "NonfungiblePositionManager"),
    description="Add liquidity to an existing position",
)

REMOVE_LIQUIDITY = Operation(
    name="remove-liquidity",
    func=remove_liquidity,
    manifest=defaults.POOL_MANIFEST,
    roles=("NonfungiblePositionManager",),
    description="Decrease a position's liquidity",
)

COLLECT = Operation(
    name="collect",
    func=collect,
    manifest=defaults.POOL_MANIFEST,
    roles=("NonfungiblePositionManager",),
    description="Collect owed fees from a position",
)

QUERY_FEES = Operation(
    name="query-fees",
    func=query_fees,
    manifest=defaults.POOL_MANIFEST,
    roles=("NonfungiblePositionManager",),
    signer=False,
    description="Show a position's owed fees",
)

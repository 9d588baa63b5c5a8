"""Pool creation and pool queries"""

from ..contracts import ERC20, NFPM, Pool, UniswapV3Factory
from ..core.runner import Operation
from ..utils.math import encode_price_sqrt, format_units, sort_tokens, tick_range_around
from ..utils.transactions import tx_hash_hex
from . import defaults
from .deploy import deploy_token_pair


def _pool_tokens(ctx):
    """TokenA/TokenB: reused from --tokens-from, otherwise freshly deployed"""
    settings = ctx.settings
    if settings.tokens_from:
        source = ctx.store.load(ctx.network, settings.tokens_from)
        addresses = []
        for role in ("TokenA", "TokenB"):
            record = source.require(role)
            ctx.record(role, record.address, transaction_hash=record.transaction_hash)
            addresses.append(ctx.manager.checksum(record.address))
        ctx.reporter.info(f"Reusing tokens from {settings.tokens_from} manifest")
        return tuple(ERC20(ctx.manager, a, ctx.tx) for a in addresses)

    names = settings.token_names or defaults.POOL_TOKEN_NAMES
    return deploy_token_pair(ctx, names)


def create_pool(ctx):
    """
    Create (or reuse) a pool for two tokens, initialize it and mint a first position.

    The manifest is written before a failed mint is reported, so the created
    pool stays on record.
    """
    settings = ctx.settings
    fee = settings.fee if settings.fee is not None else defaults.POOL_FEE
    price = settings.price if settings.price is not None else defaults.POOL_PRICE
    spacing = ctx.config.get_tick_spacing(fee)

    ctx.reporter.banner(f"CREATE POOL on {ctx.network}")
    ctx.reporter.kv("Deployer", ctx.manager.address)
    ctx.reporter.kv("Fee", f"{fee} ({fee / 10000}%)")

    token_a, token_b = _pool_tokens(ctx)
    token0, token1, swapped = sort_tokens(token_a.address, token_b.address)
    ctx.reporter.kv("token0", token0)
    ctx.reporter.kv("token1", token1)

    factory = UniswapV3Factory(ctx.manager, ctx.resolve("UniswapV3Factory"), ctx.tx)
    pool_address = factory.get_pool(token0, token1, fee)
    pool_tx = None
    if pool_address:
        ctx.reporter.step(f"Pool already exists: {pool_address}")
    else:
        ctx.reporter.step("Creating pool...")
        created = factory.create_pool(token0, token1, fee)
        pool_address = created["pool"]
        pool_tx = tx_hash_hex(created["receipt"]["transactionHash"])
        ctx.reporter.kv("Pool address", pool_address)
        ctx.reporter.tx("createPool", created["receipt"])

    ctx.record(
        "Pool", pool_address,
        transaction_hash=pool_tx,
        token0=token0,
        token1=token1,
        fee=fee,
    )

    pool = Pool(ctx.manager, pool_address, ctx.tx)
    if pool.is_initialized():
        ctx.reporter.info("Pool already initialized")
    else:
        # price is TokenB per TokenA; the pool quotes token1 per token0
        sqrt_price = encode_price_sqrt(1, price) if swapped else encode_price_sqrt(price, 1)
        ctx.reporter.step(f"Initializing pool (sqrtPriceX96={sqrt_price})...")
        receipt = pool.initialize(sqrt_price)
        ctx.reporter.tx("initialize", receipt)

    slot0 = pool.slot0()
    ctx.reporter.kv("sqrtPriceX96", slot0["sqrtPriceX96"])
    ctx.reporter.kv("Current tick", slot0["tick"])

    nfpm = NFPM(ctx.manager, ctx.resolve("NonfungiblePositionManager"), ctx.tx)
    ctx.reporter.step("Approving position manager...")
    for token in (token_a, token_b):
        token.approve_max(nfpm.address)

    tick_lower, tick_upper = tick_range_around(slot0["tick"], spacing, defaults.POOL_RANGE_SPACINGS)
    erc0 = token_a if token_a.address == token0 else token_b
    erc1 = token_b if erc0 is token_a else token_a
    amount0 = erc0.to_wei(settings.amount0 if settings.amount0 is not None else defaults.POOL_LIQUIDITY_AMOUNT)
    amount1 = erc1.to_wei(settings.amount1 if settings.amount1 is not None else defaults.POOL_LIQUIDITY_AMOUNT)

    ctx.reporter.step("Minting initial liquidity...")
    ctx.reporter.kv("Tick range", f"{tick_lower} to {tick_upper}")
    ctx.reporter.kv("Amount0", format_units(amount0, erc0.decimals))
    ctx.reporter.kv("Amount1", format_units(amount1, erc1.decimals))

    try:
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
    except Exception:
        ctx.save()
        raise

    liquidity_tx = tx_hash_hex(minted["receipt"]["transactionHash"])
    ctx.amend("Pool", liquidityTransaction=liquidity_tx, tokenId=minted["token_id"])
    ctx.reporter.kv("Position ID", minted["token_id"])
    ctx.reporter.kv("Liquidity", minted["liquidity"])
    ctx.reporter.tx("mint", minted["receipt"])

    return {
        "pool": pool_address,
        "token0": token0,
        "token1": token1,
        "fee": fee,
        "token_id": minted["token_id"],
    }


def _print_slot0(reporter, slot0):
    reporter.kv("sqrtPriceX96", slot0["sqrtPriceX96"])
    reporter.kv("Tick", slot0["tick"])
    reporter.kv("Observation index", slot0["observationIndex"])
    reporter.kv("Unlocked", slot0["unlocked"])


def pool_balances(ctx):
    """Token balances held by the pool and its current price"""
    pool = Pool(ctx.manager, ctx.resolve("Pool"))
    token_a = ERC20(ctx.manager, ctx.resolve("TokenA"))
    token_b = ERC20(ctx.manager, ctx.resolve("TokenB"))

    ctx.reporter.banner(f"POOL BALANCES: {pool.address}")

    balance_a = token_a.balance_of(pool.address)
    balance_b = token_b.balance_of(pool.address)
    ctx.reporter.kv(token_a.symbol, token_a.from_wei(balance_a))
    ctx.reporter.kv(token_b.symbol, token_b.from_wei(balance_b))

    ctx.reporter.section("Pool")
    slot0 = pool.slot0()
    _print_slot0(ctx.reporter, slot0)
    ctx.reporter.kv("Liquidity", pool.liquidity)
    ctx.reporter.kv("Fee", pool.fee)

    result = {
        "pool": pool.address,
        "balances": {token_a.symbol: balance_a, token_b.symbol: balance_b},
        "slot0": slot0,
    }

    if slot0["sqrtPriceX96"]:
        token0 = pool.token0
        erc0, erc1 = (token_a, token_b) if token0.lower() == token_a.address.lower() else (token_b, token_a)
        price = pool.get_price(erc0.decimals, erc1.decimals)
        ctx.reporter.kv(f"{erc0.symbol} in {erc1.symbol}", f"{price:.6f}")
        ctx.reporter.kv(f"{erc1.symbol} in {erc0.symbol}", f"{1 / price:.6f}")
        result["price"] = price
    else:
        ctx.reporter.info("Pool not initialized")

    return result


def pool_state(ctx):
    """Raw pool state: tokens, fee, slot0, liquidity, global fee growth"""
    pool = Pool(ctx.manager, ctx.resolve("Pool"))
    state = pool.state()

    ctx.reporter.banner(f"POOL STATE: {pool.address}")
    ctx.reporter.kv("token0", state["token0"])
    ctx.reporter.kv("token1", state["token1"])
    ctx.reporter.kv("Fee", state["fee"])
    _print_slot0(ctx.reporter, state["slot0"])
    ctx.reporter.kv("Liquidity", state["liquidity"])
    ctx.reporter.kv("feeGrowthGlobal0X128", state["feeGrowthGlobal0X128"])
    ctx.reporter.kv("feeGrowthGlobal1X128", state["feeGrowthGlobal1X128"])

    return state


def history(ctx):
    """Swap events in the last N blocks, plus Mint and Burn counts"""
    blocks = ctx.settings.blocks if ctx.settings.blocks is not None else defaults.HISTORY_BLOCKS
    pool = Pool(ctx.manager, ctx.resolve("Pool"))
    latest = ctx.manager.w3.eth.block_number
    from_block = max(latest - blocks, 0)

    ctx.reporter.banner(f"POOL HISTORY: {pool.address}")
    ctx.reporter.kv("Blocks", f"{from_block} to {latest}")

    swaps = pool.events("Swap", from_block, latest)
    ctx.reporter.section(f"Swaps ({len(swaps)})")
    for event in swaps:
        args = event["args"]
        ctx.reporter.info(
            f"block {event['blockNumber']} tx {tx_hash_hex(event['transactionHash'])}"
        )
        ctx.reporter.kv("  sender", args["sender"])
        ctx.reporter.kv("  recipient", args["recipient"])
        ctx.reporter.kv("  amount0", args["amount0"])
        ctx.reporter.kv("  amount1", args["amount1"])
        ctx.reporter.kv("  tick", args["tick"])

    mints = pool.events("Mint", from_block, latest)
    burns = pool.events("Burn", from_block, latest)
    ctx.reporter.section("Liquidity events")
    ctx.reporter.kv("Mint", len(mints))
    ctx.reporter.kv("Burn", len(burns))

    return {"swaps": len(swaps), "mints": len(mints), "burns": len(burns)}


CREATE_POOL = Operation(
    name="create-pool",
    func=create_pool,
    manifest=defaults.POOL_MANIFEST,
    manifest_required=False,
    roles=("UniswapV3Factory", "NonfungiblePositionManager"),
    description="Create and initialize a pool, then mint initial liquidity",
)

POOL_BALANCES = Operation(
    name="pool-balances",
    func=pool_balances,
    manifest=defaults.POOL_MANIFEST,
    roles=("Pool", "TokenA", "TokenB"),
    signer=False,
    description="Show pool token balances and price",
)

POOL_STATE = Operation(
    name="pool-state",
    func=pool_state,
    manifest=defaults.POOL_MANIFEST,
    roles=("Pool",),
    signer=False,
    description="Show raw pool state",
)

HISTORY = Operation(
    name="history",
    func=history,
    manifest=defaults.POOL_MANIFEST,
    roles=("Pool",),
    signer=False,
    description="Show recent swap, mint and burn events",
)

"""Token swap operation"""

from ..contracts import ERC20, Pool, SwapRouter
from ..core.exceptions import ConfigError, InsufficientBalanceError
from ..core.runner import Operation
from ..utils.transactions import tx_hash_hex
from . import defaults


def swap(ctx):
    """Exact-input swap of TokenA for TokenB (TokenB for TokenA with --reverse)"""
    settings = ctx.settings
    token_a = ERC20(ctx.manager, ctx.resolve("TokenA"), ctx.tx)
    token_b = ERC20(ctx.manager, ctx.resolve("TokenB"), ctx.tx)
    token_in, token_out = (token_b, token_a) if settings.reverse else (token_a, token_b)

    router = SwapRouter(ctx.manager, ctx.resolve("SwapRouter"), ctx.tx)

    record = ctx.manifest.get("Pool")
    fee = settings.fee if settings.fee is not None else (record.get("fee") if record else None)
    if fee is None:
        fee = Pool(ctx.manager, ctx.resolve("Pool")).fee
    fee = int(fee)

    amount = settings.amount if settings.amount is not None else defaults.SWAP_AMOUNT
    if amount <= 0:
        raise ConfigError(f"Swap amount must be greater than 0, got {amount}")
    amount_in = token_in.to_wei(amount)
    min_out = token_out.to_wei(settings.min_out if settings.min_out is not None else defaults.SWAP_MIN_OUT)

    ctx.reporter.banner(f"SWAP: {token_in.symbol} -> {token_out.symbol}")
    ctx.reporter.kv("Amount in", token_in.from_wei(amount_in))
    ctx.reporter.kv("Minimum out", token_out.from_wei(min_out))
    ctx.reporter.kv("Fee", fee)

    balance = token_in.balance_of()
    if balance < amount_in:
        raise InsufficientBalanceError(
            f"Insufficient {token_in.symbol}: have {token_in.from_wei(balance)}, "
            f"need {token_in.from_wei(amount_in)}"
        )

    if token_in.allowance(router.address) < amount_in:
        ctx.reporter.step("Approving router...")
        token_in.approve(router.address, ctx.config.MAX_UINT256)

    before_out = token_out.balance_of()

    ctx.reporter.step("Swapping...")
    receipt = router.exact_input_single(
        token_in.address,
        token_out.address,
        fee,
        amount_in,
        deadline=ctx.deadline(defaults.SWAP_DEADLINE_MINUTES),
        amount_out_minimum=min_out,
    )
    ctx.reporter.tx("exactInputSingle", receipt)

    received = token_out.balance_of() - before_out
    ctx.reporter.kv(f"Received {token_out.symbol}", token_out.from_wei(received))
    ctx.reporter.kv(f"{token_in.symbol} balance", token_in.from_wei(token_in.balance_of()))
    ctx.reporter.kv(f"{token_out.symbol} balance", token_out.from_wei(token_out.balance_of()))

    return {
        "token_in": token_in.address,
        "token_out": token_out.address,
        "amount_in": amount_in,
        "amount_out": received,
        "transactionHash": tx_hash_hex(receipt["transactionHash"]),
    }


SWAP = Operation(
    name="swap",
    func=swap,
    manifest=defaults.POSITION_MANIFEST,
    roles=("TokenA", "TokenB", "SwapRouter"),
    description="Swap TokenA for TokenB on the recorded pool",
)

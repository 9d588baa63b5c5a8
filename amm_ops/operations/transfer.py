"""Token transfer operation"""

from ..contracts import ERC20
from ..core.exceptions import ConfigError, InsufficientBalanceError
from ..core.runner import Operation
from ..utils.transactions import tx_hash_hex
from . import defaults


def transfer(ctx):
    """
    Send the same amount of TokenA and TokenB to a recipient.

    Both sender balances are checked before anything is sent. Afterwards
    the recipient's balance change is compared to the amount sent.
    """
    settings = ctx.settings
    if not settings.recipient:
        raise ConfigError("--recipient is required")
    recipient = ctx.manager.checksum(settings.recipient)
    amount = settings.amount if settings.amount is not None else defaults.TRANSFER_AMOUNT
    if amount <= 0:
        raise ConfigError(f"Transfer amount must be greater than 0, got {amount}")

    tokens = [
        ERC20(ctx.manager, ctx.resolve("TokenA"), ctx.tx),
        ERC20(ctx.manager, ctx.resolve("TokenB"), ctx.tx),
    ]

    ctx.reporter.banner("TRANSFER")
    ctx.reporter.kv("From", ctx.manager.address)
    ctx.reporter.kv("To", recipient)
    ctx.reporter.kv("Amount", amount)

    amounts = {}
    for token in tokens:
        amount_wei = token.to_wei(amount)
        balance = token.balance_of()
        ctx.reporter.kv(f"{token.symbol} balance", token.from_wei(balance))
        if balance < amount_wei:
            raise InsufficientBalanceError(
                f"Insufficient {token.symbol}: have {token.from_wei(balance)}, need {amount}"
            )
        amounts[token.address] = amount_wei

    results = []
    for token in tokens:
        amount_wei = amounts[token.address]
        before = token.balance_of(recipient)

        ctx.reporter.step(f"Transferring {amount} {token.symbol}...")
        receipt = token.transfer(recipient, amount_wei)
        ctx.reporter.tx(token.symbol, receipt)

        received = token.balance_of(recipient) - before
        ctx.reporter.kv(f"Recipient {token.symbol}", token.from_wei(token.balance_of(recipient)))
        ctx.verify(
            received == amount_wei,
            f"Recipient {token.symbol} balance changed by {received}, expected {amount_wei}",
        )
        results.append({
            "token": token.address,
            "amount": amount_wei,
            "received": received,
            "transactionHash": tx_hash_hex(receipt["transactionHash"]),
        })

    return {"recipient": recipient, "transfers": results}


TRANSFER = Operation(
    name="transfer",
    func=transfer,
    manifest=defaults.POOL_MANIFEST,
    roles=("TokenA", "TokenB"),
    description="Send TokenA and TokenB to a recipient",
)

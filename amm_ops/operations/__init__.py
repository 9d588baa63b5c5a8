"""One-shot operations, keyed by CLI name"""

from .deploy import DEPLOY_TOKENS, DEPLOY_WETH, DEPLOY_UNISWAP, OPEN_TRADING
from .pools import CREATE_POOL, POOL_BALANCES, POOL_STATE, HISTORY
from .liquidity import ADD_LIQUIDITY, INCREASE_LIQUIDITY, REMOVE_LIQUIDITY, COLLECT, QUERY_FEES
from .swap import SWAP
from .transfer import TRANSFER

OPERATIONS = {
    op.name: op
    for op in (
        DEPLOY_TOKENS,
        DEPLOY_WETH,
        DEPLOY_UNISWAP,
        OPEN_TRADING,
        CREATE_POOL,
        ADD_LIQUIDITY,
        INCREASE_LIQUIDITY,
        REMOVE_LIQUIDITY,
        COLLECT,
        QUERY_FEES,
        SWAP,
        POOL_BALANCES,
        POOL_STATE,
        HISTORY,
        TRANSFER,
    )
}

__all__ = ["OPERATIONS"]

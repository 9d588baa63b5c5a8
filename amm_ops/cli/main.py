"""Main CLI entry point"""

import argparse
import sys
from decimal import Decimal, InvalidOperation

from ..core.logs import setup_logging
from ..core.runner import OperationRunner
from ..core.settings import OperationSettings
from ..operations import OPERATIONS


def decimal_amount(value):
    """argparse type for whole-token amounts"""
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid amount: {value}")
    if not amount.is_finite() or amount < 0:
        raise argparse.ArgumentTypeError(f"amount must be a non-negative number: {value}")
    return amount


def add_common_arguments(parser):
    """Flags shared by every subcommand"""
    parser.add_argument("--network", help="Manifest network name (default: derived from chain ID)")
    parser.add_argument("--rpc-url", dest="rpc_url", help="RPC endpoint (default: RPC_URL from .env)")
    parser.add_argument("--deployments", help="Manifest root directory (default: deployments)")
    parser.add_argument("--manifest", help="Manifest name to read and write (e.g. pool, pool2)")
    parser.add_argument("--gas-config", dest="gas_config", help="Path to gas_config.json")
    parser.add_argument("--deadline-minutes", dest="deadline_minutes", type=int,
                        help="On-chain deadline for transactions, in minutes")
    parser.add_argument("--strict", action="store_true", default=None,
                        help="Treat post-transaction balance mismatches as errors")
    parser.add_argument("-v", "--verbose", action="store_true", default=None,
                        help="Debug logging")


def add_token_deploy_arguments(parser):
    parser.add_argument("--token", dest="token_names", nargs=2, action="append",
                        metavar=("NAME", "SYMBOL"),
                        help="Token name and symbol (give twice: TokenA then TokenB)")
    parser.add_argument("--supply", type=decimal_amount, help="Total supply per token (default: 1000000)")
    parser.add_argument("--decimals", type=int, help="Token decimals (default: 18)")


def add_token_id_argument(parser, required=True):
    parser.add_argument("--token-id", "--tokenId", dest="token_id", type=int, required=required,
                        help="Position NFT token ID")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="amm-ops",
        description="Uniswap V3 deployment and operations toolkit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""examples:
  amm-ops deploy-tokens --network sepolia
  amm-ops create-pool --tokens-from daibi2 --fee 500 --price 1
  amm-ops add-liquidity --tick-lower -10010 --tick-upper 10010 --amount0 10000 --amount1 10000
  amm-ops swap --amount 1000 --min-out 990
  amm-ops collect --token-id 42
  amm-ops transfer --recipient 0x... --amount 100 --strict

configuration:
  RPC_URL         Set in .env file
  PRIVATE_KEY     Set in wallet.env (PUBLIC_KEY for read-only commands)
  manifests       deployments/<network>/<name>-deployment.json
  artifacts       AMM_ARTIFACTS_DIR, ./artifacts, ./node_modules/@uniswap
  gas             gas_config.json
""",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    def add(name, help_text):
        sub = subparsers.add_parser(name, help=help_text)
        add_common_arguments(sub)
        sub.set_defaults(operation=OPERATIONS[name])
        return sub

    # ── Deployment ─────────────────────────────────────────────────────
    p = add("deploy-tokens", "Deploy TokenA and TokenB (managed token)")
    add_token_deploy_arguments(p)

    add("deploy-weth", "Deploy WETH9 from its artifact")

    p = add("deploy-uniswap", "Deploy Uniswap V3 factory, descriptor, position manager and router")
    p.add_argument("--weth", help="Existing WETH9 address (default: network default)")

    p = add("open-trading", "Call openTrading on a managed token (owner only)")
    p.add_argument("--token", help="Manifest role of the token (default: TokenA)")
    p.add_argument("--roots", dest="output_roots", nargs="*", default=None, metavar="ADDRESS",
                   help="outputRoots addresses")
    p.add_argument("--l2-block", dest="l2_block_number", type=int, required=True,
                   help="l2BlockNumber argument")
    p.add_argument("--limit", dest="new_limit", type=int, required=True, help="newLimit argument")

    # ── Pools ──────────────────────────────────────────────────────────
    p = add("create-pool", "Create and initialize a pool, then mint initial liquidity")
    p.add_argument("--tokens-from", dest="tokens_from",
                   help="Reuse TokenA/TokenB from this manifest instead of deploying")
    p.add_argument("--fee", type=int, help="Fee tier (default: 500)")
    p.add_argument("--price", type=decimal_amount, help="Initial price, TokenB per TokenA (default: 1)")
    p.add_argument("--amount0", type=decimal_amount, help="Initial token0 liquidity (default: 1000)")
    p.add_argument("--amount1", type=decimal_amount, help="Initial token1 liquidity (default: 1000)")
    add_token_deploy_arguments(p)

    add("pool-balances", "Show pool token balances and price")
    add("pool-state", "Show raw pool state")

    p = add("history", "Show recent swap, mint and burn events")
    p.add_argument("--blocks", type=int, help="Number of recent blocks to scan (default: 1000)")

    # ── Positions ──────────────────────────────────────────────────────
    p = add("add-liquidity", "Mint a new position with explicit ticks")
    p.add_argument("--tick-lower", dest="tick_lower", type=int, help="Lower tick (default: -10010)")
    p.add_argument("--tick-upper", dest="tick_upper", type=int, help="Upper tick (default: 10010)")
    p.add_argument("--amount0", type=decimal_amount, help="TokenA amount (default: 10000)")
    p.add_argument("--amount1", type=decimal_amount, help="TokenB amount (default: 10000)")
    p.add_argument("--fee", type=int, help="Fee tier (default: from manifest)")

    p = add("increase-liquidity", "Add liquidity to an existing position")
    add_token_id_argument(p, required=False)
    p.add_argument("--amount0", type=decimal_amount, help="TokenA amount (default: 1000)")
    p.add_argument("--amount1", type=decimal_amount, help="TokenB amount (default: 1000)")

    p = add("remove-liquidity", "Decrease a position's liquidity")
    add_token_id_argument(p)
    p.add_argument("--percentage", type=decimal_amount,
                   help="Fraction of liquidity to remove, 0-1 (default: 0.5)")

    p = add("collect", "Collect owed fees from a position")
    add_token_id_argument(p)

    p = add("query-fees", "Show a position's owed fees")
    add_token_id_argument(p)

    # ── Trading ────────────────────────────────────────────────────────
    p = add("swap", "Swap TokenA for TokenB")
    p.add_argument("--amount", type=decimal_amount, help="Amount in (default: 1000)")
    p.add_argument("--min-out", dest="min_out", type=decimal_amount, help="Minimum amount out (default: 0)")
    p.add_argument("--reverse", action="store_true", default=None, help="Swap TokenB for TokenA")
    p.add_argument("--fee", type=int, help="Fee tier (default: from manifest)")

    p = add("transfer", "Send TokenA and TokenB to a recipient")
    p.add_argument("--recipient", required=True, help="Recipient address")
    p.add_argument("--amount", type=decimal_amount, help="Amount of each token (default: 10000)")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "operation", None):
        parser.print_help()
        sys.exit(1)

    settings = OperationSettings.from_args(args)
    setup_logging(settings.verbose)

    runner = OperationRunner(settings)
    sys.exit(runner.run(args.operation))


if __name__ == "__main__":
    main()

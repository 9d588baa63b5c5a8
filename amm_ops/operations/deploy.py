"""Contract deployment operations"""

from ..contracts import ArtifactStore, ManagedToken
from ..core.exceptions import ConfigError
from ..core.runner import Operation
from ..utils.math import bytes32_string, format_units, parse_units
from ..utils.transactions import tx_hash_hex
from . import defaults


def deploy_token_pair(ctx, token_names, artifacts=None):
    """
    Deploy TokenA and TokenB from the managed token artifact and record them.

    Returns:
        (token_a, token_b) as ManagedToken wrappers
    """
    settings = ctx.settings
    artifacts = artifacts or ArtifactStore()
    decimals = settings.decimals if settings.decimals is not None else defaults.TOKEN_DECIMALS
    supply = settings.supply if settings.supply is not None else defaults.TOKEN_SUPPLY
    total_supply = parse_units(supply, decimals)

    if len(token_names) != 2:
        raise ConfigError(f"Exactly two tokens are deployed, got {len(token_names)} names")

    factory, _ = artifacts.factory(ctx.manager, defaults.MANAGED_TOKEN_ARTIFACT)

    tokens = []
    for role, (name, symbol) in zip(("TokenA", "TokenB"), token_names):
        ctx.reporter.step(f"Deploying {role} ({name}/{symbol})...")
        token, receipt = ManagedToken.deploy(
            ctx.manager, ctx.tx, factory, name, symbol, decimals, total_supply,
        )
        ctx.record(role, token.address, transaction_hash=tx_hash_hex(receipt["transactionHash"]))
        ctx.reporter.kv(f"{role} address", token.address)
        ctx.reporter.tx(role, receipt)
        tokens.append(token)

    return tokens[0], tokens[1]


def deploy_tokens(ctx):
    """Deploy two managed tokens with the full supply minted to the signer"""
    ctx.reporter.banner(f"DEPLOY TOKENS on {ctx.network}")
    ctx.reporter.kv("Deployer", ctx.manager.address)

    names = ctx.settings.token_names or defaults.DEPLOY_TOKEN_NAMES
    token_a, token_b = deploy_token_pair(ctx, names)

    ctx.reporter.section("Summary")
    ctx.reporter.kv("TokenA", token_a.address)
    ctx.reporter.kv("TokenB", token_b.address)

    return {"TokenA": token_a.address, "TokenB": token_b.address}


def deploy_weth(ctx):
    """Deploy WETH9 from its artifact"""
    ctx.reporter.banner(f"DEPLOY WETH9 on {ctx.network}")

    factory, _ = ArtifactStore().factory(ctx.manager, defaults.WETH_ARTIFACT)
    address, receipt = ctx.tx.deploy(factory, label="Deploy WETH9")
    ctx.record("WETH9", address, transaction_hash=tx_hash_hex(receipt["transactionHash"]))

    weth = ctx.manager.get_contract(address, "weth9")
    ctx.reporter.kv("WETH9 address", address)
    ctx.reporter.kv("Name", weth.functions.name().call())
    ctx.reporter.kv("Symbol", weth.functions.symbol().call())
    ctx.reporter.tx("WETH9", receipt)

    return {"WETH9": address}


def deploy_uniswap(ctx):
    """
    Deploy the Uniswap V3 core and periphery against an existing WETH9.

    Order: UniswapV3Factory, NFTDescriptor library, NonfungibleTokenPositionDescriptor
    (linked to the library), NonfungiblePositionManager, SwapRouter. Every record
    keeps its ABI inline and in deployments/<network>/abi/.
    """
    ctx.reporter.banner(f"DEPLOY UNISWAP V3 on {ctx.network}")
    ctx.reporter.kv("Deployer", ctx.manager.address)

    weth = ctx.settings.weth or ctx.config.get_default_address(ctx.network, "WETH9")
    if not weth:
        raise ConfigError(f"No WETH9 address for {ctx.network}; pass --weth")
    weth = ctx.manager.checksum(weth)
    ctx.record("WETH9", weth, abi=ctx.config.get_abi("weth9"))
    ctx.reporter.kv("WETH9", weth)

    artifacts = ArtifactStore()

    def deploy(role, artifact_name, *args, libraries=None):
        ctx.reporter.step(f"Deploying {role}...")
        factory, artifact = artifacts.factory(ctx.manager, artifact_name, libraries)
        address, receipt = ctx.tx.deploy(factory, *args, label=f"Deploy {role}")
        ctx.record(
            role, address,
            transaction_hash=tx_hash_hex(receipt["transactionHash"]),
            abi=artifact["abi"],
        )
        ctx.reporter.kv(f"{role} address", address)
        return address

    factory = deploy("UniswapV3Factory", defaults.FACTORY_ARTIFACT)
    descriptor_lib = deploy("NFTDescriptor", defaults.NFT_DESCRIPTOR_ARTIFACT)
    descriptor = deploy(
        "NonfungibleTokenPositionDescriptor",
        defaults.POSITION_DESCRIPTOR_ARTIFACT,
        weth,
        bytes32_string(defaults.NATIVE_CURRENCY_LABEL),
        libraries={"NFTDescriptor": descriptor_lib},
    )
    nfpm = deploy("NonfungiblePositionManager", defaults.NFPM_ARTIFACT, factory, weth, descriptor)
    router = deploy("SwapRouter", defaults.ROUTER_ARTIFACT, factory, weth)

    path = ctx.save()
    abi_files = ctx.store.save_abis(ctx.network, ctx.manifest)

    ctx.reporter.section("Summary")
    for role, record in ctx.manifest.contracts.items():
        ctx.reporter.kv(role, record.address)
    ctx.reporter.kv("Manifest", path)
    ctx.reporter.kv("ABI files", len(abi_files))

    return {
        "WETH9": weth,
        "UniswapV3Factory": factory,
        "NFTDescriptor": descriptor_lib,
        "NonfungibleTokenPositionDescriptor": descriptor,
        "NonfungiblePositionManager": nfpm,
        "SwapRouter": router,
    }


def open_trading(ctx):
    """Call openTrading on a managed token (signer must be the owner)"""
    settings = ctx.settings
    role = settings.token or "TokenA"
    if settings.l2_block_number is None or settings.new_limit is None:
        raise ConfigError("--l2-block and --limit are required")

    token = ManagedToken(ctx.manager, ctx.resolve(role), ctx.tx)
    ctx.reporter.banner(f"OPEN TRADING: {token.symbol}")

    owner = token.owner()
    ctx.reporter.kv("Owner", owner)
    if owner.lower() != ctx.manager.address.lower():
        ctx.reporter.warning(f"Signer {ctx.manager.address} is not the owner of {token.symbol}")

    roots = list(settings.output_roots or ())
    receipt = token.open_trading(roots, settings.l2_block_number, settings.new_limit)
    ctx.reporter.tx("openTrading", receipt)
    ctx.reporter.kv("Total supply", f"{format_units(token.total_supply(), token.decimals)} {token.symbol}")

    return {"token": token.address, "transactionHash": tx_hash_hex(receipt["transactionHash"])}


DEPLOY_TOKENS = Operation(
    name="deploy-tokens",
    func=deploy_tokens,
    manifest=defaults.TOKENS_MANIFEST,
    manifest_required=False,
    description="Deploy TokenA and TokenB",
)

DEPLOY_WETH = Operation(
    name="deploy-weth",
    func=deploy_weth,
    manifest=defaults.WETH_MANIFEST,
    manifest_required=False,
    description="Deploy WETH9",
)

DEPLOY_UNISWAP = Operation(
    name="deploy-uniswap",
    func=deploy_uniswap,
    description="Deploy Uniswap V3 factory and periphery",
)

OPEN_TRADING = Operation(
    name="open-trading",
    func=open_trading,
    manifest=defaults.TOKENS_MANIFEST,
    description="Call openTrading on a managed token",
)

"""Default parameters for operations (overridable from the command line)"""

from decimal import Decimal

# Manifest names under deployments/<network>/
TOKENS_MANIFEST = "daibi2"
WETH_MANIFEST = "weth"
POOL_MANIFEST = "pool"
POSITION_MANIFEST = "pool2"

# Artifact names
MANAGED_TOKEN_ARTIFACT = "guoWenCoin"
WETH_ARTIFACT = "WETH9"
FACTORY_ARTIFACT = "UniswapV3Factory"
NFT_DESCRIPTOR_ARTIFACT = "NFTDescriptor"
POSITION_DESCRIPTOR_ARTIFACT = "NonfungibleTokenPositionDescriptor"
NFPM_ARTIFACT = "NonfungiblePositionManager"
ROUTER_ARTIFACT = "SwapRouter"

NATIVE_CURRENCY_LABEL = "WETH"

# Token deployment
TOKEN_DECIMALS = 18
TOKEN_SUPPLY = Decimal(1_000_000)
DEPLOY_TOKEN_NAMES = (("HE", "HE"), ("SHE", "SHE"))
POOL_TOKEN_NAMES = (("TokenA", "TKA"), ("TokenB", "TKB"))

# Pool creation
POOL_FEE = 500
POOL_PRICE = Decimal(1)
POOL_LIQUIDITY_AMOUNT = Decimal(1000)
# Initial position spans this many tick spacings either side of the current tick
POOL_RANGE_SPACINGS = 10

# Positions
ADD_LIQUIDITY_TICK_LOWER = -10010
ADD_LIQUIDITY_TICK_UPPER = 10010
ADD_LIQUIDITY_AMOUNT = Decimal(10000)
INCREASE_LIQUIDITY_AMOUNT = Decimal(1000)
REMOVE_LIQUIDITY_PERCENTAGE = Decimal("0.5")

# Deadlines (minutes)
MINT_DEADLINE_MINUTES = 20
DECREASE_DEADLINE_MINUTES = 10
SWAP_DEADLINE_MINUTES = 10

# Swaps and transfers
SWAP_AMOUNT = Decimal(1000)
SWAP_MIN_OUT = Decimal(0)
TRANSFER_AMOUNT = Decimal(10000)

HISTORY_BLOCKS = 1000

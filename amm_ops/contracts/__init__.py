"""Contract wrappers"""

from .erc20 import ERC20
from .token import ManagedToken
from .factory import UniswapV3Factory
from .pool import Pool
from .nfpm import NFPM
from .router import SwapRouter
from .artifacts import ArtifactStore, link_libraries

__all__ = [
    "ERC20",
    "ManagedToken",
    "UniswapV3Factory",
    "Pool",
    "NFPM",
    "SwapRouter",
    "ArtifactStore",
    "link_libraries",
]

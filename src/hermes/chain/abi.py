"""ABI fragments for the Zephyr custody contract and ERC20 tokens."""


def _address(name: str, indexed: bool = False) -> dict:
    entry = {"name": name, "type": "address"}
    if indexed:
        entry["indexed"] = True
    return entry


def _event(name: str, inputs: list[dict]) -> dict:
    for item in inputs:
        item.setdefault("indexed", False)
    return {"anonymous": False, "inputs": inputs, "name": name, "type": "event"}


def _function(
    name: str,
    inputs: list[dict],
    outputs: tuple[dict, ...] | list[dict] = (),
    mutability: str = "nonpayable",
) -> dict:
    return {
        "inputs": inputs,
        "name": name,
        "outputs": list(outputs),
        "stateMutability": mutability,
        "type": "function",
    }


ZEPHYR_ABI = [
    # Events
    _event(
        "Offering",
        [
            _address("mortal", indexed=True),
            _address("tokenAddress", indexed=True),
            {"name": "amount", "type": "uint256"},
            {"name": "txHash", "type": "string"},
        ],
    ),
    _event(
        "Blessing",
        [
            _address("mortal", indexed=True),
            _address("tokenAddress", indexed=True),
            {"name": "amount", "type": "uint256"},
            {"name": "reference", "type": "string"},
        ],
    ),
    # Functions
    _function(
        "blessWithTokens",
        [
            _address("tokenAddress"),
            _address("mortal"),
            {"name": "amount", "type": "uint256"},
            {"name": "reference", "type": "string"},
        ],
    ),
    _function("blessToken", [_address("tokenAddress")]),
    _function("unBlessToken", [_address("tokenAddress")]),
    _function(
        "isTokenDivine",
        [_address("tokenAddress")],
        [{"name": "", "type": "bool"}],
        mutability="view",
    ),
    _function(
        "isZeusSleeping",
        [],
        [{"name": "", "type": "bool"}],
        mutability="view",
    ),
]

# ERC20 decimals()
ERC20_DECIMALS_ABI = [
    _function(
        "decimals",
        [],
        [{"name": "", "type": "uint8"}],
        mutability="view",
    ),
]

# chainvet

Checks that an OP Stack chain is configured like a standard chain: parameter
bounds, ownership roles, contract versions, bytecode hashes and the
uniqueness of its chain ID, name and public RPC.

## Installation

```
pip install .
pip install ".[test]"   # with the test dependencies
```

## Standard configuration

`chainvet.standard.loader.load_standard_config` reads a directory of TOML
files: `standard-config-roles-universal.toml`,
`standard-config-roles-<network>.toml`, `standard-config-params-<network>.toml`,
`standard-versions-<network>.toml` (for `mainnet` and `sepolia`),
`standard-bytecodes.toml`, `standard-immutables.toml` and
`standard-releases.toml`. It returns a `StandardConfig`, and raises
`ValueError` if the standard release is empty.

```python
from chainvet.standard.loader import load_standard_config

config = load_standard_config("path/to/standard")
config.params["mainnet"].check()          # raises ParamsError on a zero bound
resolutions = config.roles.l1.get_resolutions(True)
standard_versions = config.network_versions["mainnet"][config.release]
standard_hashes = config.bytecode_hashes[config.release]
```

- `chainvet.standard.params`: `Params` and its sections (`ResourceConfig`,
  `RollupConfigBounds`, `OptimismPortal2Bounds`, `SystemConfig`, the gas price
  oracle bounds). Each `check()` raises `ParamsError` naming the first zero or
  missing value.
- `chainvet.standard.roles`: `Roles`, `MultisigRoles`, `L1Roles`, `L2Roles`.
  `L1Roles.get_resolutions` overlays the fault-proof or legacy resolutions on
  the universal ones.
- `chainvet.standard.versions`: `ContractVersions`, `VersionedContract`,
  `L1ContractBytecodeHashes` and `ContractBytecodeImmutables`.

## Bounds, retries and cast

```python
from chainvet.utils import is_within_bounds, retry

is_within_bounds(50, (40, 60))   # True
is_within_bounds(61, (40, 60))   # False
is_within_bounds(1, (5, 2))      # ValueError: bounds are in wrong order

fetch = retry(some_function)     # up to 3 attempts with exponential backoff
```

`chainvet.utils.cast_call` runs `cast call <address> <calldata> ... -r <rpc>`
and returns its whitespace-separated output; it needs the `cast` tool on the
`PATH` and raises `CastCallError` on failure or empty output.

## Chain uniqueness

```python
from chainvet.uniqueness import ChainInfo, fetch_global_chains, check_is_globally_unique

global_ids = fetch_global_chains()
local = ChainInfo()
check_is_globally_unique(global_ids, local, 10, "My Chain", "https://rpc.example.com")
```

`fetch_global_chains` downloads the public chain list (a URL may be passed
instead); `parse_global_chains` indexes already decoded entries. RPC URLs are
compared after `normalize_url`, which lower-cases scheme and host, collapses
`//` in the path, adds a trailing slash and drops default ports.

Failures raise subclasses of `UniquenessError`: `ChainIdNotListedError`,
`LocalChainNameMismatchError`, `ChainPublicRpcNotListedError`,
`ChainIdDuplicatedError` and `ChainNameDuplicatedError`.

## Contract versions and bytecode

```python
from chainvet.rpc import JsonRpcClient
from chainvet.versioncheck import (
    get_contract_versions_from_chain,
    get_contract_bytecode_hashes_from_chain,
    require_standard_semvers,
    require_standard_bytecode_hashes,
)

with JsonRpcClient("https://l1.example.com") as client:
    versions = get_contract_versions_from_chain(
        client, addresses, standard_versions.get_non_empty()
    )
    require_standard_semvers(standard_versions, versions, is_testnet=False, release=config.release)

    hashes = get_contract_bytecode_hashes_from_chain(
        client,
        addresses,
        standard_hashes.get_non_empty(),
        addresses["ProxyAdmin"],
        config.bytecode_immutables.get(config.release),
    )
    require_standard_bytecode_hashes(standard_hashes, hashes, config.release)
```

`addresses` maps contract names (such as `OptimismPortalProxy`) to hex
addresses; a contract is looked up by name and then by its `Proxy` name.
Proxies are resolved to their implementation through the ProxyAdmin before
hashing, and immutable values are zeroed (`chainvet.immutables`) before the
Keccak-256 hash is taken.

A mismatch raises `StandardMismatchError`, whose `diff` lists each differing
contract. Testnets may run contract versions newer than the standard, never
older. `ProtocolVersions` is never compared.

`chainvet.rpc` also provides `keccak256` and `function_selector`.

## Genesis inputs

- `chainvet.genesis.metadata.load_validation_inputs` reads each chain
  directory's `meta.toml` into a `ValidationMetadata`, keyed by chain ID;
  directories ending in `-test` are skipped.
- `chainvet.genesis.commands` builds the genesis creation commands
  (`opnode1`, `opnode2`, `forge1`, or by name with
  `genesis_creation_command`) and holds `BUILD_COMMANDS` for `pnpm` and `yarn`.
- `chainvet.genesis.deployments` runs commands in a directory
  (`execute_command_in_dir`), forwards output lines (`stream_output`), and
  writes address files: a single `.deploy` JSON file (`write_deployments`) or
  one deployment JSON file per contract (`write_deployments_legacy`).

## What this package does not do

There is no command-line program and no test runner over a whole registry.
The package ships no chain data: chain configurations, address lists and the
standard TOML files are supplied by the caller. It builds the genesis
creation commands but does not check out, build or run anything to
regenerate a genesis, nor compare genesis allocations.
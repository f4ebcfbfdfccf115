"""Shell commands that regenerate genesis allocations at historical monorepo commits."""

from __future__ import annotations

from collections.abc import Callable

GeneratorFn = Callable[[int, str], str]

BUILD_COMMANDS: dict[str, str] = {
    tool: f"{tool} install --no-frozen-lockfile" for tool in ("pnpm", "yarn")
}

_OP_NODE_GENESIS = "go run op-node/cmd/main.go genesis l2"
_BEDROCK_DIR = "./packages/contracts-bedrock"
_OP_NODE_OUTPUTS = (
    "--outfile.l2=expected-genesis.json",
    "--outfile.rollup=rollup.json",
)


def _op_node_command(
    chain_id: int, deployments_flag: str, l1_rpc_url: str, *, config_lead: str = ""
) -> str:
    parts = (
        _OP_NODE_GENESIS,
        f"{config_lead}--deploy-config={_BEDROCK_DIR}/deploy-config/{chain_id}.json",
        *_OP_NODE_OUTPUTS,
        deployments_flag,
        f"--l1-rpc={l1_rpc_url}",
    )
    return " ".join(parts)


def opnode1(chain_id: int, l1_rpc_url: str) -> str:
    """op-node genesis command using a deployments directory; runs from the monorepo root."""
    return _op_node_command(
        chain_id,
        f"--deployment-dir={_BEDROCK_DIR}/deployments/{chain_id}",
        l1_rpc_url,
    )


def opnode2(chain_id: int, l1_rpc_url: str) -> str:
    """op-node genesis command using an L1 deployments file; runs from the monorepo root."""
    return _op_node_command(
        chain_id,
        f"--l1-deployments={_BEDROCK_DIR}/deployments/{chain_id}/.deploy",
        l1_rpc_url,
        config_lead=" ",
    )


def forge1(chain_id: int, l1_rpc_url: str) -> str:
    """Foundry state-dump command; runs from the contracts package directory.

    The L1 RPC URL is accepted for a uniform signature but is not used.
    """
    env = {
        "CONTRACT_ADDRESSES_PATH": f"./deployments/{chain_id}/.deploy",
        "DEPLOY_CONFIG_PATH": f"./deploy-config/{chain_id}.json",
        "STATE_DUMP_PATH": "statedump.json",
    }
    assignments = [f"{key}={value}" for key, value in env.items()]
    script = "forge script ./scripts/L2Genesis.s.sol:L2Genesis --sig 'runWithStateDump()'"
    return " ".join([*assignments, script])


GENESIS_CREATION_COMMANDS: dict[str, GeneratorFn] = {
    fn.__name__: fn for fn in (opnode1, opnode2, forge1)
}


def genesis_creation_command(name: str, chain_id: int, l1_rpc_url: str) -> str:
    """Build the genesis creation command registered under name."""
    generator = GENESIS_CREATION_COMMANDS.get(name)
    if generator is None:
        raise ValueError(f"unknown genesis creation command {name!r}")
    return generator(chain_id, l1_rpc_url)
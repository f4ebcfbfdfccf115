import pytest

from chainvet.standard.loader import NETWORKS, decode_toml_file, load_standard_config
from chainvet.standard.roles import MultisigRoles

RELEASE = "op-contracts/v1.6.0"

IMPLEMENTATIONS = {
    "mainnet": "0xe2F826324b2faf99E513D16D266c3F80aE87832B",
    "sepolia": "0x35028bAe87D71cbC192d545d38F960BA30B4B233",
}

PARAMS = """
[rollup_config]
block_time = [2, 2]
seq_window_size = [3600, 3600]

[optimism_portal_2]
proof_maturity_delay_seconds = [604800, 604800]
dispute_game_finality_delay_seconds = [302400, 302400]
respected_game_type = 0

[resource_config]
max_resource_limit = 20000000
elasticity_multiplier = 10
base_fee_max_change_denominator = 8
minimum_base_fee = 1000000000
system_tx_max_gas = 1000000
maximum_base_fee = "340282366920938463463374607431768211455"

[gas_price_oracle.pre-ecotone]
decimals = [6, 6]
overhead = [188, 188]
scalar = [684000, 684000]

[gas_price_oracle.ecotone]
decimals = [6, 6]
blob_base_fee_scalar = [0, 810949]
base_fee_scalar = [0, 1368]

[system_config]
gas_limit = [0, 200000000]
"""

ROLES_UNIVERSAL = """
[l1.universal]
AddressManager = { "owner()" = "ProxyAdmin" }

[l2.universal]
"0x4200000000000000000000000000000000000018" = { "owner()" = "L2ProxyAdminOwner" }
"""

MULTISIG = """
[l1.universal]
ProxyAdmin = { "owner()" = "ProxyAdminOwner" }

[key-handover.l1.universal]
ProxyAdmin = { "owner()" = "ProxyAdminOwner" }
"""

BYTECODES = f"""
["{RELEASE}"]
optimism_portal = "0x01"
system_config = "0x02"
"""

IMMUTABLES = f"""
["{RELEASE}"]
mips = '{{"1234":[{{"start":10,"length":32}}]}}'
"""


def _versions(network):
    return f"""
[releases."{RELEASE}"]
optimism_portal = {{ version = "3.10.0", implementation_address = "{IMPLEMENTATIONS[network]}" }}
system_config = {{ version = "2.2.0" }}

[releases."op-contracts/v1.4.0"]
optimism_portal = {{ version = "2.5.0" }}
"""


def _write(directory, release=RELEASE):
    (directory / "standard-config-roles-universal.toml").write_text(ROLES_UNIVERSAL)
    for network in NETWORKS:
        (directory / f"standard-config-roles-{network}.toml").write_text(MULTISIG)
        (directory / f"standard-config-params-{network}.toml").write_text(PARAMS)
        (directory / f"standard-versions-{network}.toml").write_text(_versions(network))
    (directory / "standard-bytecodes.toml").write_text(BYTECODES)
    (directory / "standard-immutables.toml").write_text(IMMUTABLES)
    (directory / "standard-releases.toml").write_text(f'standard_release = "{release}"\n')


@pytest.fixture
def config(tmp_path):
    _write(tmp_path)
    return load_standard_config(tmp_path)


def test_release(config):
    assert config.release == RELEASE


def test_bytecode_hashes(config):
    assert RELEASE in config.bytecode_hashes
    assert len(config.bytecode_hashes) == 1
    assert config.bytecode_hashes[RELEASE].get_non_empty() == ["OptimismPortal", "SystemConfig"]


def test_bytecode_immutables(config):
    assert RELEASE in config.bytecode_immutables
    assert config.bytecode_immutables[RELEASE].for_contract_with_name("MIPS").startswith('{"1234"')


@pytest.mark.parametrize("network", NETWORKS)
def test_params_are_valid(config, network):
    params = config.params[network]
    assert params.check() is None
    assert params.system_config.gas_limit == (0, 200000000)


@pytest.mark.parametrize("network", NETWORKS)
def test_multisig_roles_populated(config, network):
    roles = config.multisig_roles[network]
    assert roles != MultisigRoles()
    assert roles.key_handover.l1.universal == {"ProxyAdmin": {"owner()": "ProxyAdminOwner"}}


@pytest.mark.parametrize("network", NETWORKS)
def test_network_versions(config, network):
    versions = config.network_versions[network]
    assert len(versions) == 2
    assert RELEASE in versions
    release = versions["op-contracts/v1.6.0"]
    assert release.get("OptimismPortal").implementation_address == IMPLEMENTATIONS[network]
    assert release.get("OptimismPortal").address is None
    assert "fake-release" not in versions


def test_roles_loaded(config):
    assert config.roles.l1.universal == {"AddressManager": {"owner()": "ProxyAdmin"}}
    assert list(config.roles.l2.universal) == ["0x4200000000000000000000000000000000000018"]


def test_empty_release_rejected(tmp_path):
    _write(tmp_path, release="")
    with pytest.raises(ValueError, match="empty standard release"):
        load_standard_config(tmp_path)


def test_missing_file_raises(tmp_path):
    _write(tmp_path)
    (tmp_path / "standard-bytecodes.toml").unlink()
    with pytest.raises(FileNotFoundError):
        load_standard_config(tmp_path)


def test_decode_toml_file(tmp_path):
    _write(tmp_path)
    assert decode_toml_file(tmp_path, "standard-releases.toml") == {"standard_release": RELEASE}
import pytest

from chainvet.standard.params import (
    BigIntBounds,
    OptimismPortal2Bounds,
    Params,
    ParamsError,
    ResourceConfig,
    RollupConfigBounds,
    SystemConfig,
    Uint32Bounds,
)


def _valid_data():
    return {
        "rollup_config": {"block_time": [2, 2], "seq_window_size": [3600, 3600]},
        "optimism_portal_2": {
            "proof_maturity_delay_seconds": [604800, 604800],
            "dispute_game_finality_delay_seconds": [302400, 302400],
            "respected_game_type": 0,
        },
        "resource_config": {
            "max_resource_limit": 20000000,
            "elasticity_multiplier": 10,
            "base_fee_max_change_denominator": 8,
            "minimum_base_fee": 1000000000,
            "system_tx_max_gas": 1000000,
            "maximum_base_fee": "340282366920938463463374607431768211455",
        },
        "gas_price_oracle": {
            "pre-ecotone": {
                "decimals": [6, 6],
                "overhead": [188, 188],
                "scalar": [684000, 684000],
            },
            "ecotone": {
                "decimals": [6, 6],
                "blob_base_fee_scalar": [0, 810949],
                "base_fee_scalar": [0, 1368],
            },
        },
        "system_config": {"gas_limit": [0, 200000000]},
    }


def _valid_resource_config(**overrides):
    values = dict(
        max_resource_limit=20000000,
        elasticity_multiplier=10,
        base_fee_max_change_denominator=8,
        minimum_base_fee=1000000000,
        system_tx_max_gas=1000000,
        maximum_base_fee=12345,
    )
    values.update(overrides)
    return ResourceConfig(**values)


def test_valid_params_parse_and_check():
    params = Params.from_dict(_valid_data())
    assert params.check() is None
    assert params.rollup_config.sequencer_window_size == (3600, 3600)
    assert params.resource_config.maximum_base_fee == 340282366920938463463374607431768211455
    assert params.gpo_params.ecotone.base_fee_scalar == Uint32Bounds(0, 1368)
    assert params.gpo_params.pre_ecotone.scalar == BigIntBounds(684000, 684000)
    assert params.system_config.gas_limit == (0, 200000000)


def test_empty_params_fail_on_rollup_first():
    with pytest.raises(ParamsError, match="^RollupConfig: BlockTime upper bound is 0$"):
        Params.from_dict({}).check()


@pytest.mark.parametrize(
    "field_name, message",
    [
        ("max_resource_limit", "MaxResourceLimit is 0"),
        ("elasticity_multiplier", "ElasticityMultiplier is 0"),
        ("base_fee_max_change_denominator", "BaseFeeMaxChangeDenominator is 0"),
        ("minimum_base_fee", "MinimumBaseFee is 0"),
        ("system_tx_max_gas", "SystemTxMaxGas is 0"),
        ("maximum_base_fee", "MaximumBaseFee is 0 or nil"),
    ],
)
def test_resource_config_zero_fields(field_name, message):
    with pytest.raises(ParamsError, match=message):
        _valid_resource_config(**{field_name: 0}).check()


def test_resource_config_missing_maximum_base_fee():
    with pytest.raises(ParamsError, match="MaximumBaseFee is 0 or nil"):
        _valid_resource_config(maximum_base_fee=None).check()


def test_big_int_bounds_check():
    with pytest.raises(ParamsError, match="BigIntBounds upper bound is 0 or nil"):
        BigIntBounds(1, None).check()
    with pytest.raises(ParamsError, match="BigIntBounds upper bound is 0 or nil"):
        BigIntBounds(0, 0).check()


def test_uint32_bounds_check():
    with pytest.raises(ParamsError, match="Uint32Bounds upper bound is 0"):
        Uint32Bounds(1, 0).check()


def test_rollup_and_portal_checks():
    with pytest.raises(ParamsError, match="SequencerWindowSize upper bound is 0"):
        RollupConfigBounds(block_time=(1, 2)).check()
    with pytest.raises(ParamsError, match="DisputeGameFinalityDelaySeconds upper bound is 0"):
        OptimismPortal2Bounds(proof_maturity_delay_seconds=(1, 1)).check()
    with pytest.raises(ParamsError, match="GasLimit upper bound is 0"):
        SystemConfig().check()


def test_nested_message_for_ecotone():
    data = _valid_data()
    del data["gas_price_oracle"]["ecotone"]["decimals"]
    with pytest.raises(ParamsError, match="^Ecotone: Decimals: BigIntBounds upper bound is 0 or nil$"):
        Params.from_dict(data).check()


def test_nested_message_for_pre_ecotone():
    data = _valid_data()
    data["gas_price_oracle"]["pre-ecotone"]["overhead"] = [0, 0]
    with pytest.raises(ParamsError, match="^PreEcotone: Overhead: BigIntBounds upper bound is 0 or nil$"):
        Params.from_dict(data).check()


def test_bounds_must_have_two_entries():
    data = _valid_data()
    data["rollup_config"]["block_time"] = [1, 2, 3]
    with pytest.raises(ParamsError):
        Params.from_dict(data)


def test_uint8_overflow_rejected():
    data = _valid_data()
    data["resource_config"]["elasticity_multiplier"] = 256
    with pytest.raises(ParamsError):
        Params.from_dict(data)


def test_big_int_from_hex_string():
    config = ResourceConfig.from_dict({"maximum_base_fee": "0x10"})
    assert config.maximum_base_fee == 16
"""Bounds and parameters that standard chains must respect."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, NamedTuple


class ParamsError(ValueError):
    """A standard parameter is missing, zero or malformed."""


def _uint(value: Any, name: str, bits: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParamsError(f"{name}: expected an integer, got {value!r}")
    if not 0 <= value < 1 << bits:
        raise ParamsError(f"{name}: {value} does not fit in uint{bits}")
    return value


def _big(value: Any, name: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ParamsError(f"{name}: expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text, 10)
        except ValueError:
            pass
        try:
            return int(text, 0)
        except ValueError as exc:
            raise ParamsError(f"{name}: cannot parse integer {value!r}") from exc
    raise ParamsError(f"{name}: expected an integer, got {value!r}")


def _table(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, Mapping):
        raise ParamsError(f"{key}: expected a table, got {value!r}")
    return value


def _pair(data: Mapping[str, Any], key: str, bits: int) -> tuple[int, int]:
    value = data.get(key)
    if value is None:
        return (0, 0)
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ParamsError(f"{key}: expected exactly two bounds, got {value!r}")
    return (_uint(value[0], key, bits), _uint(value[1], key, bits))


def _big_bounds(data: Mapping[str, Any], key: str) -> BigIntBounds:
    value = data.get(key)
    if value is None:
        return BigIntBounds()
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ParamsError(f"{key}: expected exactly two bounds, got {value!r}")
    return BigIntBounds(_big(value[0], key), _big(value[1], key))


def _uint32_bounds(data: Mapping[str, Any], key: str) -> Uint32Bounds:
    return Uint32Bounds(*_pair(data, key, 32))


def _labelled(label: str, check: Callable[[], None]) -> None:
    try:
        check()
    except ParamsError as exc:
        raise ParamsError(f"{label}: {exc}") from exc


@dataclass
class ResourceConfig:
    """Resource metering settings of the system config contract."""

    max_resource_limit: int = 0
    elasticity_multiplier: int = 0
    base_fee_max_change_denominator: int = 0
    minimum_base_fee: int = 0
    system_tx_max_gas: int = 0
    maximum_base_fee: int | None = None

    def check(self) -> None:
        """Raise ParamsError if any setting is zero or missing."""
        if self.max_resource_limit == 0:
            raise ParamsError("MaxResourceLimit is 0")
        if self.elasticity_multiplier == 0:
            raise ParamsError("ElasticityMultiplier is 0")
        if self.base_fee_max_change_denominator == 0:
            raise ParamsError("BaseFeeMaxChangeDenominator is 0")
        if self.minimum_base_fee == 0:
            raise ParamsError("MinimumBaseFee is 0")
        if self.system_tx_max_gas == 0:
            raise ParamsError("SystemTxMaxGas is 0")
        if not self.maximum_base_fee:
            raise ParamsError("MaximumBaseFee is 0 or nil")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ResourceConfig:
        """Build from a decoded TOML table."""
        return cls(
            max_resource_limit=_uint(data.get("max_resource_limit", 0), "max_resource_limit", 32),
            elasticity_multiplier=_uint(
                data.get("elasticity_multiplier", 0), "elasticity_multiplier", 8
            ),
            base_fee_max_change_denominator=_uint(
                data.get("base_fee_max_change_denominator", 0),
                "base_fee_max_change_denominator",
                8,
            ),
            minimum_base_fee=_uint(data.get("minimum_base_fee", 0), "minimum_base_fee", 32),
            system_tx_max_gas=_uint(data.get("system_tx_max_gas", 0), "system_tx_max_gas", 32),
            maximum_base_fee=_big(data.get("maximum_base_fee"), "maximum_base_fee"),
        )


@dataclass
class SystemConfig:
    """Bounds on the system config contract."""

    gas_limit: tuple[int, int] = (0, 0)

    def check(self) -> None:
        """Raise ParamsError if the gas limit upper bound is zero."""
        if self.gas_limit[1] == 0:
            raise ParamsError("GasLimit upper bound is 0")


class BigIntBounds(NamedTuple):
    """Inclusive bounds on an arbitrarily large integer."""

    lower: int | None = None
    upper: int | None = None

    def check(self) -> None:
        """Raise ParamsError if the upper bound is zero or missing."""
        if not self.upper:
            raise ParamsError("BigIntBounds upper bound is 0 or nil")


class Uint32Bounds(NamedTuple):
    """Inclusive bounds on a 32-bit unsigned integer."""

    lower: int = 0
    upper: int = 0

    def check(self) -> None:
        """Raise ParamsError if the upper bound is zero."""
        if self.upper == 0:
            raise ParamsError("Uint32Bounds upper bound is 0")


@dataclass
class PreEcotoneGasPriceOracleBounds:
    """Gas price oracle bounds before the Ecotone upgrade."""

    decimals: BigIntBounds = field(default_factory=BigIntBounds)
    overhead: BigIntBounds = field(default_factory=BigIntBounds)
    scalar: BigIntBounds = field(default_factory=BigIntBounds)

    def check(self) -> None:
        """Raise ParamsError naming the first invalid bound."""
        _labelled("Decimals", self.decimals.check)
        _labelled("Overhead", self.overhead.check)
        _labelled("Scalar", self.scalar.check)


@dataclass
class EcotoneGasPriceOracleBounds:
    """Gas price oracle bounds from the Ecotone upgrade on."""

    decimals: BigIntBounds = field(default_factory=BigIntBounds)
    blob_base_fee_scalar: Uint32Bounds = field(default_factory=Uint32Bounds)
    base_fee_scalar: Uint32Bounds = field(default_factory=Uint32Bounds)

    def check(self) -> None:
        """Raise ParamsError naming the first invalid bound."""
        _labelled("Decimals", self.decimals.check)
        _labelled("BlobBaseFeeScalar", self.blob_base_fee_scalar.check)
        _labelled("BaseFeeScalar", self.base_fee_scalar.check)


@dataclass
class GasPriceOracleBounds:
    """Gas price oracle bounds for both eras."""

    pre_ecotone: PreEcotoneGasPriceOracleBounds = field(
        default_factory=PreEcotoneGasPriceOracleBounds
    )
    ecotone: EcotoneGasPriceOracleBounds = field(default_factory=EcotoneGasPriceOracleBounds)


@dataclass
class RollupConfigBounds:
    """Bounds on rollup configuration values."""

    alt_da: Mapping[str, Any] | None = None
    block_time: tuple[int, int] = (0, 0)
    sequencer_window_size: tuple[int, int] = (0, 0)

    def check(self) -> None:
        """Raise ParamsError if an upper bound is zero."""
        if self.block_time[1] == 0:
            raise ParamsError("BlockTime upper bound is 0")
        if self.sequencer_window_size[1] == 0:
            raise ParamsError("SequencerWindowSize upper bound is 0")


@dataclass
class OptimismPortal2Bounds:
    """Bounds on the fault-proof portal settings."""

    proof_maturity_delay_seconds: tuple[int, int] = (0, 0)
    dispute_game_finality_delay_seconds: tuple[int, int] = (0, 0)
    respected_game_type: int = 0

    def check(self) -> None:
        """Raise ParamsError if an upper bound is zero."""
        if self.proof_maturity_delay_seconds[1] == 0:
            raise ParamsError("ProofMaturityDelaySeconds upper bound is 0")
        if self.dispute_game_finality_delay_seconds[1] == 0:
            raise ParamsError("DisputeGameFinalityDelaySeconds upper bound is 0")


@dataclass
class Params:
    """All standard parameters of one superchain target."""

    rollup_config: RollupConfigBounds = field(default_factory=RollupConfigBounds)
    optimism_portal_2_config: OptimismPortal2Bounds = field(default_factory=OptimismPortal2Bounds)
    resource_config: ResourceConfig = field(default_factory=ResourceConfig)
    gpo_params: GasPriceOracleBounds = field(default_factory=GasPriceOracleBounds)
    system_config: SystemConfig = field(default_factory=SystemConfig)

    def check(self) -> None:
        """Raise ParamsError naming the first section holding a zero value."""
        sections = (
            ("RollupConfig", self.rollup_config.check),
            ("OptimismPortal2Config", self.optimism_portal_2_config.check),
            ("ResourceConfig", self.resource_config.check),
            ("PreEcotone", self.gpo_params.pre_ecotone.check),
            ("Ecotone", self.gpo_params.ecotone.check),
            ("SystemConfig", self.system_config.check),
        )
        for label, check in sections:
            _labelled(label, check)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Params:
        """Build from a decoded standard-config-params TOML document."""
        rollup = _table(data, "rollup_config")
        portal = _table(data, "optimism_portal_2")
        gpo = _table(data, "gas_price_oracle")
        pre = _table(gpo, "pre-ecotone")
        eco = _table(gpo, "ecotone")
        system = _table(data, "system_config")
        alt_da = rollup.get("alt_da")
        if alt_da is not None and not isinstance(alt_da, Mapping):
            raise ParamsError(f"alt_da: expected a table, got {alt_da!r}")
        return cls(
            rollup_config=RollupConfigBounds(
                alt_da=alt_da,
                block_time=_pair(rollup, "block_time", 64),
                sequencer_window_size=_pair(rollup, "seq_window_size", 64),
            ),
            optimism_portal_2_config=OptimismPortal2Bounds(
                proof_maturity_delay_seconds=_pair(portal, "proof_maturity_delay_seconds", 64),
                dispute_game_finality_delay_seconds=_pair(
                    portal, "dispute_game_finality_delay_seconds", 64
                ),
                respected_game_type=_uint(
                    portal.get("respected_game_type", 0), "respected_game_type", 32
                ),
            ),
            resource_config=ResourceConfig.from_dict(_table(data, "resource_config")),
            gpo_params=GasPriceOracleBounds(
                pre_ecotone=PreEcotoneGasPriceOracleBounds(
                    decimals=_big_bounds(pre, "decimals"),
                    overhead=_big_bounds(pre, "overhead"),
                    scalar=_big_bounds(pre, "scalar"),
                ),
                ecotone=EcotoneGasPriceOracleBounds(
                    decimals=_big_bounds(eco, "decimals"),
                    blob_base_fee_scalar=_uint32_bounds(eco, "blob_base_fee_scalar"),
                    base_fee_scalar=_uint32_bounds(eco, "base_fee_scalar"),
                ),
            ),
            system_config=SystemConfig(gas_limit=_pair(system, "gas_limit", 64)),
        )
"""Parameter models for every indicator.

Each indicator has its own frozen model tagged by ``kind``; together they form
the :data:`IndicatorParams` discriminated union, so a plain mapping such as
``{"kind": "rsi", "period": 21}`` can be validated into the right class.
Invalid combinations (non-positive periods, ``fast >= slow``) are rejected at
construction time.

Every model exposes ``lookback``: the minimum number of bars that yields one
output point.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import ConfigDict, Field, TypeAdapter, model_validator

from signalscore.types import FrozenModel


class PriceSource(str, Enum):
    """Price column (or blend) an indicator is computed from."""

    CLOSE = "close"
    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    HL2 = "hl2"
    HLC3 = "hlc3"
    OHLC4 = "ohlc4"


class _Params(FrozenModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def lookback(self) -> int:
        raise NotImplementedError

    @property
    def label(self) -> str:
        kind = getattr(self, "kind")
        period = getattr(self, "period", None)
        return f"{kind}({period})" if period is not None else kind


def _check_fast_slow(fast: int, slow: int) -> None:
    if fast >= slow:
        raise ValueError(f"fast period ({fast}) must be less than slow period ({slow})")


# ---------------------------------------------------------------------------
# Trend / Overlay
# ---------------------------------------------------------------------------


class SmaParams(_Params):
    kind: Literal["sma"] = "sma"
    period: int = Field(20, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return self.period


class EmaParams(_Params):
    kind: Literal["ema"] = "ema"
    period: int = Field(20, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return self.period


class WmaParams(_Params):
    kind: Literal["wma"] = "wma"
    period: int = Field(20, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return self.period


class DemaParams(_Params):
    kind: Literal["dema"] = "dema"
    period: int = Field(20, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return 2 * self.period - 1


class TemaParams(_Params):
    kind: Literal["tema"] = "tema"
    period: int = Field(20, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return 3 * self.period - 2


class HmaParams(_Params):
    kind: Literal["hma"] = "hma"
    period: int = Field(20, ge=2)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return self.period + int(math.sqrt(self.period)) - 1


class KamaParams(_Params):
    """Kaufman adaptive moving average.

    :param period: Efficiency ratio window.
    :param fast: Fastest smoothing period.
    :param slow: Slowest smoothing period.
    """

    kind: Literal["kama"] = "kama"
    period: int = Field(10, ge=1)
    fast: int = Field(2, ge=1)
    slow: int = Field(30, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @model_validator(mode="after")
    def _fast_below_slow(self) -> KamaParams:
        _check_fast_slow(self.fast, self.slow)
        return self

    @property
    def lookback(self) -> int:
        return self.period + 1


class ZlemaParams(_Params):
    kind: Literal["zlema"] = "zlema"
    period: int = Field(20, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lag(self) -> int:
        return (self.period - 1) // 2

    @property
    def lookback(self) -> int:
        return self.period + self.lag


class ParabolicSarParams(_Params):
    """Parabolic SAR acceleration settings.

    :param step: Acceleration factor increment (and starting value).
    :param max_step: Acceleration factor ceiling.
    """

    kind: Literal["psar"] = "psar"
    step: float = Field(0.02, gt=0)
    max_step: float = Field(0.2, gt=0)

    @model_validator(mode="after")
    def _step_below_max(self) -> ParabolicSarParams:
        if self.max_step < self.step:
            raise ValueError("max_step must be greater than or equal to step")
        return self

    @property
    def lookback(self) -> int:
        return 2

    @property
    def label(self) -> str:
        return f"psar({self.step},{self.max_step})"


class VwapParams(_Params):
    """Volume-weighted average price.

    :param anchor: ``"series"`` accumulates over the whole input, ``"day"``
        restarts at each UTC calendar day.
    """

    kind: Literal["vwap"] = "vwap"
    anchor: Literal["series", "day"] = "series"

    @property
    def lookback(self) -> int:
        return 1


class IchimokuParams(_Params):
    """Ichimoku cloud windows.

    :param tenkan: Conversion line window.
    :param kijun: Base line window.
    :param senkou_b: Leading span B window.
    """

    kind: Literal["ichimoku"] = "ichimoku"
    tenkan: int = Field(9, ge=1)
    kijun: int = Field(26, ge=1)
    senkou_b: int = Field(52, ge=1)

    @property
    def lookback(self) -> int:
        return max(self.tenkan, self.kijun, self.senkou_b)

    @property
    def label(self) -> str:
        return f"ichimoku({self.tenkan},{self.kijun},{self.senkou_b})"


class VortexParams(_Params):
    kind: Literal["vortex"] = "vortex"
    period: int = Field(14, ge=1)

    @property
    def lookback(self) -> int:
        return self.period + 1


# ---------------------------------------------------------------------------
# Bands
# ---------------------------------------------------------------------------


class BollingerParams(_Params):
    kind: Literal["bollinger"] = "bollinger"
    period: int = Field(20, ge=1)
    std_dev: float = Field(2.0, gt=0)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return self.period


class KeltnerParams(_Params):
    kind: Literal["keltner"] = "keltner"
    ema_period: int = Field(20, ge=1)
    atr_period: int = Field(10, ge=1)
    multiplier: float = Field(2.0, gt=0)

    @property
    def lookback(self) -> int:
        return max(self.ema_period, self.atr_period + 1)

    @property
    def label(self) -> str:
        return f"keltner({self.ema_period},{self.atr_period})"


class DonchianParams(_Params):
    kind: Literal["donchian"] = "donchian"
    period: int = Field(20, ge=1)

    @property
    def lookback(self) -> int:
        return self.period


class EnvelopesParams(_Params):
    kind: Literal["envelopes"] = "envelopes"
    period: int = Field(20, ge=1)
    percent: float = Field(2.5, gt=0, lt=100)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return self.period


# ---------------------------------------------------------------------------
# Momentum
# ---------------------------------------------------------------------------


class RsiParams(_Params):
    kind: Literal["rsi"] = "rsi"
    period: int = Field(14, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return self.period + 1


class StochasticParams(_Params):
    """Stochastic oscillator.

    :param k_period: High/low window for raw %K.
    :param k_smoothing: SMA applied to raw %K (1 = fast stochastic).
    :param d_period: SMA of %K giving %D.
    """

    kind: Literal["stochastic"] = "stochastic"
    k_period: int = Field(14, ge=1)
    k_smoothing: int = Field(1, ge=1)
    d_period: int = Field(3, ge=1)

    @property
    def lookback(self) -> int:
        return self.k_period + self.k_smoothing + self.d_period - 2

    @property
    def label(self) -> str:
        return f"stochastic({self.k_period},{self.k_smoothing},{self.d_period})"


class MacdParams(_Params):
    kind: Literal["macd"] = "macd"
    fast: int = Field(12, ge=1)
    slow: int = Field(26, ge=1)
    signal: int = Field(9, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @model_validator(mode="after")
    def _fast_below_slow(self) -> MacdParams:
        _check_fast_slow(self.fast, self.slow)
        return self

    @property
    def lookback(self) -> int:
        return self.slow + self.signal - 1

    @property
    def label(self) -> str:
        return f"macd({self.fast},{self.slow},{self.signal})"


class CciParams(_Params):
    kind: Literal["cci"] = "cci"
    period: int = Field(20, ge=1)

    @property
    def lookback(self) -> int:
        return self.period


class WilliamsRParams(_Params):
    kind: Literal["williams_r"] = "williams_r"
    period: int = Field(14, ge=1)

    @property
    def lookback(self) -> int:
        return self.period


class RocParams(_Params):
    kind: Literal["roc"] = "roc"
    period: int = Field(12, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return self.period + 1


class MomentumParams(_Params):
    kind: Literal["momentum"] = "momentum"
    period: int = Field(10, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return self.period + 1


class AwesomeOscillatorParams(_Params):
    kind: Literal["awesome"] = "awesome"
    fast: int = Field(5, ge=1)
    slow: int = Field(34, ge=1)

    @model_validator(mode="after")
    def _fast_below_slow(self) -> AwesomeOscillatorParams:
        _check_fast_slow(self.fast, self.slow)
        return self

    @property
    def lookback(self) -> int:
        return self.slow

    @property
    def label(self) -> str:
        return f"awesome({self.fast},{self.slow})"


class UltimateOscillatorParams(_Params):
    kind: Literal["ultimate"] = "ultimate"
    short: int = Field(7, ge=1)
    medium: int = Field(14, ge=1)
    long: int = Field(28, ge=1)

    @model_validator(mode="after")
    def _increasing(self) -> UltimateOscillatorParams:
        if not self.short < self.medium < self.long:
            raise ValueError("periods must satisfy short < medium < long")
        return self

    @property
    def lookback(self) -> int:
        return self.long + 1

    @property
    def label(self) -> str:
        return f"ultimate({self.short},{self.medium},{self.long})"


class PpoParams(_Params):
    kind: Literal["ppo"] = "ppo"
    fast: int = Field(12, ge=1)
    slow: int = Field(26, ge=1)
    signal: int = Field(9, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @model_validator(mode="after")
    def _fast_below_slow(self) -> PpoParams:
        _check_fast_slow(self.fast, self.slow)
        return self

    @property
    def lookback(self) -> int:
        return self.slow + self.signal - 1

    @property
    def label(self) -> str:
        return f"ppo({self.fast},{self.slow},{self.signal})"


class TsiParams(_Params):
    kind: Literal["tsi"] = "tsi"
    long: int = Field(25, ge=1)
    short: int = Field(13, ge=1)
    signal: int = Field(7, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return self.long + self.short + self.signal - 1

    @property
    def label(self) -> str:
        return f"tsi({self.long},{self.short},{self.signal})"


class KstParams(_Params):
    """Know Sure Thing: weighted sum of four smoothed rates of change.

    :param roc_periods: ROC windows, shortest first.
    :param sma_periods: SMA applied to each ROC.
    """

    kind: Literal["kst"] = "kst"
    roc_periods: tuple[int, int, int, int] = (10, 15, 20, 30)
    sma_periods: tuple[int, int, int, int] = (10, 10, 10, 15)
    source: PriceSource = PriceSource.CLOSE

    @model_validator(mode="after")
    def _positive(self) -> KstParams:
        if min(self.roc_periods + self.sma_periods) < 1:
            raise ValueError("KST periods must be >= 1")
        return self

    @property
    def lookback(self) -> int:
        return max(r + s for r, s in zip(self.roc_periods, self.sma_periods))


class DpoParams(_Params):
    """Detrended price oscillator.

    The price ``period // 2 + 1`` bars back is compared with the current SMA.
    """

    kind: Literal["dpo"] = "dpo"
    period: int = Field(20, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @property
    def displacement(self) -> int:
        return self.period // 2 + 1

    @property
    def lookback(self) -> int:
        return max(self.period, self.displacement + 1)


class CoppockParams(_Params):
    kind: Literal["coppock"] = "coppock"
    long_roc: int = Field(14, ge=1)
    short_roc: int = Field(11, ge=1)
    wma_period: int = Field(10, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return max(self.long_roc, self.short_roc) + self.wma_period

    @property
    def label(self) -> str:
        return f"coppock({self.long_roc},{self.short_roc},{self.wma_period})"


class AroonParams(_Params):
    kind: Literal["aroon"] = "aroon"
    period: int = Field(25, ge=1)

    @property
    def lookback(self) -> int:
        return self.period + 1


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------


class PivotPointsParams(_Params):
    kind: Literal["pivot_points"] = "pivot_points"

    @property
    def lookback(self) -> int:
        return 2


class FibonacciParams(_Params):
    """Fibonacci retracement levels over a rolling high/low window."""

    kind: Literal["fibonacci"] = "fibonacci"
    period: int = Field(100, ge=1)

    @property
    def lookback(self) -> int:
        return self.period


# ---------------------------------------------------------------------------
# Volume
# ---------------------------------------------------------------------------


class ObvParams(_Params):
    kind: Literal["obv"] = "obv"

    @property
    def lookback(self) -> int:
        return 1


class MfiParams(_Params):
    kind: Literal["mfi"] = "mfi"
    period: int = Field(14, ge=1)

    @property
    def lookback(self) -> int:
        return self.period + 1


class AdLineParams(_Params):
    kind: Literal["ad_line"] = "ad_line"

    @property
    def lookback(self) -> int:
        return 1


class CmfParams(_Params):
    kind: Literal["cmf"] = "cmf"
    period: int = Field(20, ge=1)

    @property
    def lookback(self) -> int:
        return self.period


class ForceIndexParams(_Params):
    kind: Literal["force_index"] = "force_index"
    period: int = Field(13, ge=1)

    @property
    def lookback(self) -> int:
        return self.period + 1


class EmvParams(_Params):
    """Ease of movement.

    :param period: SMA window over the one-bar values.
    :param volume_scale: Divisor applied to volume in the box ratio.
    """

    kind: Literal["emv"] = "emv"
    period: int = Field(14, ge=1)
    volume_scale: float = Field(100_000_000.0, gt=0)

    @property
    def lookback(self) -> int:
        return self.period + 1


class NviParams(_Params):
    kind: Literal["nvi"] = "nvi"
    start: float = Field(1000.0, gt=0)

    @property
    def lookback(self) -> int:
        return 2


class PviParams(_Params):
    kind: Literal["pvi"] = "pvi"
    start: float = Field(1000.0, gt=0)

    @property
    def lookback(self) -> int:
        return 2


class VrocParams(_Params):
    kind: Literal["vroc"] = "vroc"
    period: int = Field(14, ge=1)

    @property
    def lookback(self) -> int:
        return self.period + 1


class VolumeOscillatorParams(_Params):
    kind: Literal["volume_oscillator"] = "volume_oscillator"
    fast: int = Field(5, ge=1)
    slow: int = Field(10, ge=1)

    @model_validator(mode="after")
    def _fast_below_slow(self) -> VolumeOscillatorParams:
        _check_fast_slow(self.fast, self.slow)
        return self

    @property
    def lookback(self) -> int:
        return self.slow

    @property
    def label(self) -> str:
        return f"volume_oscillator({self.fast},{self.slow})"


# ---------------------------------------------------------------------------
# Volatility
# ---------------------------------------------------------------------------


class AtrParams(_Params):
    kind: Literal["atr"] = "atr"
    period: int = Field(14, ge=1)

    @property
    def lookback(self) -> int:
        return self.period + 1


class BbWidthParams(_Params):
    kind: Literal["bb_width"] = "bb_width"
    period: int = Field(20, ge=1)
    std_dev: float = Field(2.0, gt=0)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return self.period


class BbPercentBParams(_Params):
    kind: Literal["bb_percent_b"] = "bb_percent_b"
    period: int = Field(20, ge=1)
    std_dev: float = Field(2.0, gt=0)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return self.period


class StdDevParams(_Params):
    kind: Literal["stddev"] = "stddev"
    period: int = Field(20, ge=1)
    source: PriceSource = PriceSource.CLOSE

    @property
    def lookback(self) -> int:
        return self.period


class HistoricalVolatilityParams(_Params):
    kind: Literal["historical_volatility"] = "historical_volatility"
    period: int = Field(20, ge=1)
    periods_per_year: int = Field(252, ge=1)

    @property
    def lookback(self) -> int:
        return self.period + 1


class AdxParams(_Params):
    kind: Literal["adx"] = "adx"
    period: int = Field(14, ge=1)

    @property
    def lookback(self) -> int:
        return 2 * self.period


class MassIndexParams(_Params):
    """Mass index: rolling sum of the single/double EMA ratio of the bar range."""

    kind: Literal["mass_index"] = "mass_index"
    ema_period: int = Field(9, ge=1)
    sum_period: int = Field(25, ge=1)

    @property
    def lookback(self) -> int:
        return 2 * self.ema_period + self.sum_period - 2

    @property
    def label(self) -> str:
        return f"mass_index({self.ema_period},{self.sum_period})"


class ChaikinVolatilityParams(_Params):
    kind: Literal["chaikin_volatility"] = "chaikin_volatility"
    ema_period: int = Field(10, ge=1)
    roc_period: int = Field(10, ge=1)

    @property
    def lookback(self) -> int:
        return self.ema_period + self.roc_period

    @property
    def label(self) -> str:
        return f"chaikin_volatility({self.ema_period},{self.roc_period})"


IndicatorParams = Annotated[
    Union[
        SmaParams,
        EmaParams,
        WmaParams,
        DemaParams,
        TemaParams,
        HmaParams,
        KamaParams,
        ZlemaParams,
        ParabolicSarParams,
        VwapParams,
        IchimokuParams,
        VortexParams,
        BollingerParams,
        KeltnerParams,
        DonchianParams,
        EnvelopesParams,
        RsiParams,
        StochasticParams,
        MacdParams,
        CciParams,
        WilliamsRParams,
        RocParams,
        MomentumParams,
        AwesomeOscillatorParams,
        UltimateOscillatorParams,
        PpoParams,
        TsiParams,
        KstParams,
        DpoParams,
        CoppockParams,
        AroonParams,
        PivotPointsParams,
        FibonacciParams,
        ObvParams,
        MfiParams,
        AdLineParams,
        CmfParams,
        ForceIndexParams,
        EmvParams,
        NviParams,
        PviParams,
        VrocParams,
        VolumeOscillatorParams,
        AtrParams,
        BbWidthParams,
        BbPercentBParams,
        StdDevParams,
        HistoricalVolatilityParams,
        AdxParams,
        MassIndexParams,
        ChaikinVolatilityParams,
    ],
    Field(discriminator="kind"),
]

_ADAPTER: TypeAdapter[Any] = TypeAdapter(IndicatorParams)


def parse_params(data: dict[str, Any]) -> Any:
    """Validate a mapping into the params model named by its ``kind``.

    :param data: Mapping with a ``kind`` key plus indicator settings.
    :returns: The matching params model.
    :raises pydantic.ValidationError: If ``kind`` is unknown or values are invalid.
    """
    return _ADAPTER.validate_python(data)

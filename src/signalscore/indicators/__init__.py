"""Technical indicator library.

Every indicator is a pure function ``fn(series, params=None)`` returning a
:class:`~signalscore.types.PointSeries` or a multi-output bundle aligned to a
suffix of the input bars. Series shorter than the indicator's lookback give
empty output, never an error.

:func:`compute` dispatches any :data:`IndicatorParams` to its function.
"""

from __future__ import annotations

from typing import Any, Callable

from signalscore.indicators.bands import bollinger, donchian, envelopes, keltner
from signalscore.indicators.levels import fibonacci, pivot_points
from signalscore.indicators.momentum import (
    aroon,
    awesome_oscillator,
    cci,
    coppock,
    dpo,
    kst,
    macd,
    momentum,
    ppo,
    roc,
    rsi,
    stochastic,
    tsi,
    ultimate_oscillator,
    williams_r,
)
from signalscore.indicators.params import (
    AdLineParams,
    AdxParams,
    AroonParams,
    AtrParams,
    AwesomeOscillatorParams,
    BbPercentBParams,
    BbWidthParams,
    BollingerParams,
    CciParams,
    ChaikinVolatilityParams,
    CmfParams,
    CoppockParams,
    DemaParams,
    DonchianParams,
    DpoParams,
    EmaParams,
    EmvParams,
    EnvelopesParams,
    FibonacciParams,
    ForceIndexParams,
    HistoricalVolatilityParams,
    HmaParams,
    IchimokuParams,
    IndicatorParams,
    KamaParams,
    KeltnerParams,
    KstParams,
    MacdParams,
    MassIndexParams,
    MfiParams,
    MomentumParams,
    NviParams,
    ObvParams,
    ParabolicSarParams,
    PivotPointsParams,
    PpoParams,
    PriceSource,
    PviParams,
    RocParams,
    RsiParams,
    SmaParams,
    StdDevParams,
    StochasticParams,
    TemaParams,
    TsiParams,
    UltimateOscillatorParams,
    VolumeOscillatorParams,
    VortexParams,
    VrocParams,
    VwapParams,
    WilliamsRParams,
    WmaParams,
    ZlemaParams,
    parse_params,
)
from signalscore.indicators.trend import (
    dema,
    ema,
    hma,
    ichimoku,
    kama,
    parabolic_sar,
    sma,
    tema,
    vortex,
    vwap,
    wma,
    zlema,
)
from signalscore.indicators.volatility import (
    adx,
    atr,
    bb_percent_b,
    bb_width,
    chaikin_volatility,
    historical_volatility,
    mass_index,
    stddev,
)
from signalscore.indicators.volume import (
    ad_line,
    cmf,
    emv,
    force_index,
    mfi,
    nvi,
    obv,
    pvi,
    volume_oscillator,
    vroc,
)
from signalscore.types import OHLCVSeries

# kind -> (indicator function, params class)
INDICATORS: dict[str, tuple[Callable[..., Any], type]] = {
    "sma": (sma, SmaParams),
    "ema": (ema, EmaParams),
    "wma": (wma, WmaParams),
    "dema": (dema, DemaParams),
    "tema": (tema, TemaParams),
    "hma": (hma, HmaParams),
    "kama": (kama, KamaParams),
    "zlema": (zlema, ZlemaParams),
    "psar": (parabolic_sar, ParabolicSarParams),
    "vwap": (vwap, VwapParams),
    "ichimoku": (ichimoku, IchimokuParams),
    "vortex": (vortex, VortexParams),
    "bollinger": (bollinger, BollingerParams),
    "keltner": (keltner, KeltnerParams),
    "donchian": (donchian, DonchianParams),
    "envelopes": (envelopes, EnvelopesParams),
    "rsi": (rsi, RsiParams),
    "stochastic": (stochastic, StochasticParams),
    "macd": (macd, MacdParams),
    "cci": (cci, CciParams),
    "williams_r": (williams_r, WilliamsRParams),
    "roc": (roc, RocParams),
    "momentum": (momentum, MomentumParams),
    "awesome": (awesome_oscillator, AwesomeOscillatorParams),
    "ultimate": (ultimate_oscillator, UltimateOscillatorParams),
    "ppo": (ppo, PpoParams),
    "tsi": (tsi, TsiParams),
    "kst": (kst, KstParams),
    "dpo": (dpo, DpoParams),
    "coppock": (coppock, CoppockParams),
    "aroon": (aroon, AroonParams),
    "pivot_points": (pivot_points, PivotPointsParams),
    "fibonacci": (fibonacci, FibonacciParams),
    "obv": (obv, ObvParams),
    "mfi": (mfi, MfiParams),
    "ad_line": (ad_line, AdLineParams),
    "cmf": (cmf, CmfParams),
    "force_index": (force_index, ForceIndexParams),
    "emv": (emv, EmvParams),
    "nvi": (nvi, NviParams),
    "pvi": (pvi, PviParams),
    "vroc": (vroc, VrocParams),
    "volume_oscillator": (volume_oscillator, VolumeOscillatorParams),
    "atr": (atr, AtrParams),
    "bb_width": (bb_width, BbWidthParams),
    "bb_percent_b": (bb_percent_b, BbPercentBParams),
    "stddev": (stddev, StdDevParams),
    "historical_volatility": (historical_volatility, HistoricalVolatilityParams),
    "adx": (adx, AdxParams),
    "mass_index": (mass_index, MassIndexParams),
    "chaikin_volatility": (chaikin_volatility, ChaikinVolatilityParams),
}


def compute(series: OHLCVSeries, params: Any) -> Any:
    """Run the indicator selected by ``params.kind``.

    :param series: Validated OHLCV input.
    :param params: Any params model, or a mapping with a ``kind`` key.
    :returns: The indicator's PointSeries or bundle.
    :raises KeyError: If ``kind`` is not a known indicator.
    """
    if isinstance(params, dict):
        params = parse_params(params)
    fn, _ = INDICATORS[params.kind]
    return fn(series, params)


def default_params(kind: str) -> Any:
    """Params model with default settings for ``kind``."""
    _, params_cls = INDICATORS[kind]
    return params_cls()


def lookback(params: Any) -> int:
    """Minimum number of bars for ``params`` to produce one point."""
    return params.lookback


__all__ = [
    "INDICATORS",
    "IndicatorParams",
    "PriceSource",
    "compute",
    "default_params",
    "lookback",
    "parse_params",
    # Trend / overlay
    "sma",
    "ema",
    "wma",
    "dema",
    "tema",
    "hma",
    "kama",
    "zlema",
    "parabolic_sar",
    "vwap",
    "ichimoku",
    "vortex",
    # Bands
    "bollinger",
    "keltner",
    "donchian",
    "envelopes",
    # Momentum
    "rsi",
    "stochastic",
    "macd",
    "cci",
    "williams_r",
    "roc",
    "momentum",
    "awesome_oscillator",
    "ultimate_oscillator",
    "ppo",
    "tsi",
    "kst",
    "dpo",
    "coppock",
    "aroon",
    # Levels
    "pivot_points",
    "fibonacci",
    # Volume
    "obv",
    "mfi",
    "ad_line",
    "cmf",
    "force_index",
    "emv",
    "nvi",
    "pvi",
    "vroc",
    "volume_oscillator",
    # Volatility
    "atr",
    "bb_width",
    "bb_percent_b",
    "stddev",
    "historical_volatility",
    "adx",
    "mass_index",
    "chaikin_volatility",
]

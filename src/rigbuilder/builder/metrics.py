"""
配置指标模块 - Build Metrics Module

根据当前配置计算总价与性能估算。
Compute total price and a performance estimate for the current build.
"""

from __future__ import annotations

import math

from ..schemas import SLOT_ORDER, BuildConfig, BuildMetrics
from .compatibility import estimate_power_draw

CPU_PRICE_PER_POINT = 1000
"""
CPU 分数换算 - CPU price per score point

CPU 价格每 1000 计 1 分，上限 100。
One point per 1000 of CPU price, capped at 100.
"""

GPU_PRICE_PER_POINT = 2000
"""
显卡分数换算 - GPU price per score point

显卡价格每 2000 计 1 分，上限 100。
One point per 2000 of GPU price, capped at 100.
"""

PERFORMANCE_TIERS = (
    (30, "entry"),
    (60, "mid"),
    (80, "high"),
)
"""
性能档位 - Performance Tiers

分数低于阈值即落入对应档位，80 及以上为 enthusiast。
A score below a threshold falls into that tier; 80 and above is enthusiast.
"""


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def performance_tier(score: int) -> str:
    for threshold, tier in PERFORMANCE_TIERS:
        if score < threshold:
            return tier
    return "enthusiast"


def compute_metrics(config: BuildConfig) -> BuildMetrics:
    """
    计算配置指标 - Compute Build Metrics

    性能分是以价格代替性能的粗略估算，不是跑分。
    The performance score is a price-as-performance proxy, not a benchmark.

    计算方式 Calculation:
    1. 总价 = 所有插槽配件价格之和
    2. cpu_score = min(100, CPU 价格 / 1000)
    3. gpu_score = min(100, 显卡价格 / 2000)
    4. 性能分 = round((cpu_score + gpu_score) / 2)

    参数 Parameters:
        config: 配置快照
                Build snapshot

    返回 Returns:
        指标对象
        Metrics object
    """
    total_price = 0.0
    for slot in SLOT_ORDER:
        component = config.get(slot)
        if component is not None:
            total_price += component.price

    cpu_score = min(100.0, (config.cpu.price if config.cpu else 0) / CPU_PRICE_PER_POINT)
    gpu_score = min(100.0, (config.gpu.price if config.gpu else 0) / GPU_PRICE_PER_POINT)
    score = _round_half_up((cpu_score + gpu_score) / 2)

    estimated_power = 0.0
    if config.cpu or config.gpu:
        estimated_power = estimate_power_draw(config)

    return BuildMetrics(
        total_price=total_price,
        performance_score=score,
        performance_tier=performance_tier(score),
        estimated_power=estimated_power,
    )

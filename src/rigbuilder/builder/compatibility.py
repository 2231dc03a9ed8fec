"""兼容性检查模块"""

from __future__ import annotations

from typing import List, Optional

from ..schemas import BuildConfig, CompatibilityIssue, Component

# 主板、风扇、硬盘等其他配件的固定基础功耗
BASELINE_OVERHEAD_WATTS = 150
# 电源功率低于 draw * 1.2 时提示余量不足
PSU_HEADROOM_FACTOR = 1.2
# 机箱未标注显卡长度限制时视为不限
DEFAULT_MAX_GPU_LENGTH_MM = 999


def _number(component: Optional[Component], key: str, default: float = 0) -> float:
    if component is None:
        return default
    value = component.meta.get(key)
    if value is None or isinstance(value, (bool, list)):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _form_factors(value) -> List[str]:
    if isinstance(value, list):
        return [str(v) for v in value if v]
    if value:
        return [str(value)]
    return []


def _fmt(value: float) -> str:
    return f"{value:g}"


def estimate_power_draw(config: BuildConfig) -> float:
    """估算整机功耗：CPU TDP + 显卡 TDP + 基础功耗"""
    return _number(config.cpu, "tdp") + _number(config.gpu, "tdp") + BASELINE_OVERHEAD_WATTS


def evaluate(config: BuildConfig) -> List[CompatibilityIssue]:
    """检查硬件兼容性

    Args:
        config: 当前配置快照

    Returns:
        按固定顺序排列的兼容性问题列表，空列表表示无问题
    """
    issues: List[CompatibilityIssue] = []
    cpu, motherboard, ram = config.cpu, config.motherboard, config.ram
    gpu, case, psu = config.gpu, config.case, config.psu

    # 1. CPU 与主板 Socket 兼容
    if cpu and motherboard:
        cpu_socket = cpu.meta.get("socket")
        mb_socket = motherboard.meta.get("socket")
        if cpu_socket != mb_socket:
            issues.append(
                CompatibilityIssue(
                    type="error",
                    message=f"CPU socket {cpu_socket} does not match motherboard socket {mb_socket}",
                    slots=["cpu", "motherboard"],
                )
            )

    # 2. 内存与主板 DDR 类型兼容
    if ram and motherboard:
        ram_type = ram.meta.get("type")
        mb_ram_type = motherboard.meta.get("ramType")
        if ram_type != mb_ram_type:
            issues.append(
                CompatibilityIssue(
                    type="error",
                    message=f"Memory type {ram_type} is not supported by the motherboard ({mb_ram_type})",
                    slots=["ram", "motherboard"],
                )
            )

    # 3. 电源功率是否足够
    if psu and (cpu or gpu):
        draw = estimate_power_draw(config)
        wattage = _number(psu, "wattage")
        if wattage < draw:
            issues.append(
                CompatibilityIssue(
                    type="error",
                    message=f"PSU wattage {_fmt(wattage)}W is below the estimated draw of {_fmt(draw)}W",
                    slots=["psu"] + [slot for slot in ("cpu", "gpu") if config.get(slot) is not None],
                )
            )
        elif wattage < draw * PSU_HEADROOM_FACTOR:
            issues.append(
                CompatibilityIssue(
                    type="warning",
                    message=f"PSU wattage {_fmt(wattage)}W leaves little headroom over the estimated draw of {_fmt(draw)}W",
                    slots=["psu"],
                )
            )

    # 4. 主板与机箱板型兼容
    if case and motherboard:
        case_form_factors = _form_factors(case.meta.get("formFactor"))
        mb_form_factor = motherboard.meta.get("formFactor")
        if mb_form_factor and mb_form_factor not in case_form_factors:
            issues.append(
                CompatibilityIssue(
                    type="error",
                    message=(
                        f"{mb_form_factor} motherboard does not fit the case "
                        f"(supports {', '.join(case_form_factors) or 'none'})"
                    ),
                    slots=["case", "motherboard"],
                )
            )

    # 5. 显卡与机箱尺寸兼容
    if gpu and case:
        gpu_length = _number(gpu, "length")
        max_gpu_length = _number(case, "maxGpuLength", DEFAULT_MAX_GPU_LENGTH_MM)
        if gpu_length > max_gpu_length:
            issues.append(
                CompatibilityIssue(
                    type="error",
                    message=f"GPU length {_fmt(gpu_length)}mm exceeds the case limit of {_fmt(max_gpu_length)}mm",
                    slots=["gpu", "case"],
                )
            )

    return issues

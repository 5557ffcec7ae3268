"""
Display formatting for simulation outputs.

Speeds that sit on the calculator's clamp bounds and the fin deflection
sentinel are shown as open-ended values rather than exact numbers.
"""

from rocketsim.core.fin_deflection import MAX_DEFLECTION_MM


def format_fin_deflection(deflection_mm: float) -> str:
    """
    Format a fin deflection for display.

    The 15 mm cap doubles as the "exceeds safe limit or could not be
    computed" sentinel and is shown as "15mm or more".

    Examples
    --------
    >>> format_fin_deflection(2.345)
    '2.35mm'
    >>> format_fin_deflection(15.0)
    '15mm or more'
    """
    if deflection_mm >= MAX_DEFLECTION_MM:
        return f"{MAX_DEFLECTION_MM:.0f}mm or more"
    return f"{deflection_mm:.2f}mm"


def format_speed_value(speed: float, limit: float = 300.0) -> str:
    """
    Format a divergence or flutter speed.

    Values at or above ``limit`` are shown as "<limit>+ m/s".

    Examples
    --------
    >>> format_speed_value(123.4)
    '123 m/s'
    >>> format_speed_value(300.0)
    '300+ m/s'
    """
    if speed >= limit:
        return f"{limit:.0f}+ m/s"
    return f"{speed:.0f} m/s"

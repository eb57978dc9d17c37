"""Human-readable labels for rates and scenarios."""

from .models import CopFixedRate, Rate, ScenarioKey

SCENARIO_LABELS = {
    ScenarioKey.BEST_UVR_VIS_HIPOTECARIO: "Mejor UVR - VIS",
    ScenarioKey.BEST_UVR_NO_VIS_HIPOTECARIO: "Mejor UVR - No VIS",
    ScenarioKey.BEST_COP_VIS_HIPOTECARIO: "Mejor Pesos - VIS",
    ScenarioKey.BEST_COP_NO_VIS_HIPOTECARIO: "Mejor Pesos - No VIS",
    ScenarioKey.BEST_UVR_VIS_PAYROLL: "Mejor UVR con Nómina - VIS",
    ScenarioKey.BEST_UVR_NO_VIS_PAYROLL: "Mejor UVR con Nómina - No VIS",
    ScenarioKey.BEST_COP_VIS_PAYROLL: "Mejor Pesos con Nómina - VIS",
    ScenarioKey.BEST_COP_NO_VIS_PAYROLL: "Mejor Pesos con Nómina - No VIS",
    ScenarioKey.BEST_DIGITAL_HIPOTECARIO: "Mejor Canal Digital",
}


def format_rate(rate: Rate) -> str:
    """
    Format a rate the way banks quote it.

    Examples:
        CopFixedRate(12.0) -> "12.00% E.A."
        CopFixedRate(11.5, 14.0) -> "11.50% - 14.00% E.A."
        UvrSpreadRate(6.5) -> "UVR + 6.50%"
    """
    if isinstance(rate, CopFixedRate):
        if rate.ea_percent_to and rate.ea_percent_to != rate.ea_percent_from:
            return f"{rate.ea_percent_from:.2f}% - {rate.ea_percent_to:.2f}% E.A."
        return f"{rate.ea_percent_from:.2f}% E.A."

    if rate.spread_ea_to and rate.spread_ea_to != rate.spread_ea_from:
        return f"UVR + {rate.spread_ea_from:.2f}% - {rate.spread_ea_to:.2f}%"
    return f"UVR + {rate.spread_ea_from:.2f}%"

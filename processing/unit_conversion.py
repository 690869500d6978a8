"""
Unit conversion — fluid ounces to milliliters.

Public API:
    ounces_to_milliliters(oz) → float
"""

# US fluid ounce in milliliters.
ML_PER_OZ: float = 29.5735


def ounces_to_milliliters(oz: float) -> float:
    """
    Convert a volume in fluid ounces to milliliters.

    No clamping: NaN and negative values pass straight through.
    """
    return oz * ML_PER_OZ

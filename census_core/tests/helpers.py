# census_core/tests/helpers.py

def scoped(unit):
    """Unit header for the DRF test client (HTTP_ prefix required)."""
    return {"HTTP_X_UNIT": str(unit)}

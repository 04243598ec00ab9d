"""US EPA AQI conversion for particulate matter.

Tables hold (concentration_high, aqi_low, aqi_high) per band. The lower
concentration of a band is the previous band's high plus 0.1, since EPA
breakpoints are given to one decimal place.
"""

# === AQI curve parameters ===
PM25_AQI = (
    (12.0, 0.0, 50.0),
    (35.4, 51.0, 100.0),
    (55.4, 101.0, 150.0),
    (150.4, 151.0, 200.0),
    (250.4, 201.0, 300.0),
    (500.4, 301.0, 500.0),
)

PM10_AQI = (
    (54.0, 0.0, 50.0),
    (154.0, 51.0, 100.0),
    (254.0, 101.0, 150.0),
    (354.0, 151.0, 200.0),
    (424.0, 201.0, 300.0),
    (604.0, 301.0, 500.0),
)

# Shown in place of an index when the concentration is off the table.
OFF_SCALE = 501.0

CATEGORIES = (
    (50.0, "Good"),
    (100.0, "Moderate"),
    (150.0, "Unhealthy for Sensitive Groups"),
    (200.0, "Unhealthy"),
    (300.0, "Very Unhealthy"),
    (500.0, "Hazardous"),
)


def aqi(table, conc):
    """Convert a concentration in ug/m3 to an AQI number using `table`.

    Returns None for values off the top end of the table, which AQI does
    not define.
    """
    conc_lo = 0.0
    for conc_hi, aqi_lo, aqi_hi in table:
        if conc <= conc_hi:
            return aqi_lo + (aqi_hi - aqi_lo) / (conc_hi - conc_lo) * (conc - conc_lo)
        conc_lo = conc_hi + 0.1
    return None


def lrapa(conc):
    """Apply the LRAPA correction to a PM2.5 concentration."""
    return conc * 0.5 - 0.66


def shown(index):
    """Index for display: OFF_SCALE stands in for an undefined one."""
    return OFF_SCALE if index is None else index


def category(index):
    if index is None or index > CATEGORIES[-1][0]:
        return "Off Scale"
    for upper, name in CATEGORIES:
        # Indices are whole numbers per band; 50.5 still reads as Good.
        if index < upper + 1:
            return name
    return "Off Scale"

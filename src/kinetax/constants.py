"""Physical constants and numerical guards for Kinetax."""

# Universal gas constant in J/(mol·K)
# Cantera uses 8314.46 J/kmol·K. Kinetax uses mol-based units throughout.
R_GAS = 8.314462618

# One atmosphere in Pascals
ONE_ATM = 101325.0

# Floor used before taking logs of reduced pressures and falloff centers
SMALL_NUMBER = 1e-300

# Cap on reciprocal equilibrium constants
BIG_NUMBER = 1e300

# Temperatures [K] at which multi-term Plog nodes must stay positive
PLOG_CHECK_TEMPERATURES = (200.0, 500.0, 1000.0, 2000.0, 5000.0)

"""
Physical and numerical constants for reefer container simulation.

This module centralizes the physical constants and empirical coefficients
used by the property, flow and heat transfer models. All values are SI
(temperatures in °C unless the name says otherwise).

Usage:
    from reefersim.core.constants import GAS_CONSTANT_AIR, KELVIN_OFFSET

    density = pressure / (GAS_CONSTANT_AIR * (temp + KELVIN_OFFSET))
"""

# =============================================================================
# Thermodynamic Constants
# =============================================================================

ABSOLUTE_ZERO: float = -273.15  # °C
KELVIN_OFFSET: float = 273.15  # K
STANDARD_PRESSURE: float = 101325.0  # Pa
GAS_CONSTANT_AIR: float = 287.058  # J/(kg·K) - specific gas constant of dry air
GAS_CONSTANT_VAPOR: float = 461.5  # J/(kg·K) - specific gas constant of water vapor
MOLECULAR_WEIGHT_RATIO: float = 0.622  # - ratio of water to dry air molar mass

# =============================================================================
# Air Property Correlations
# =============================================================================

# Sutherland's law for dynamic viscosity
SUTHERLAND_REFERENCE_VISCOSITY: float = 1.825e-5  # Pa·s at reference temperature
SUTHERLAND_REFERENCE_TEMP: float = 293.15  # K
SUTHERLAND_CONSTANT: float = 120.0  # K

# Linear fits valid from -20 °C to 50 °C
CONDUCTIVITY_INTERCEPT: float = 0.0242  # W/(m·K)
CONDUCTIVITY_SLOPE: float = 7.73e-5  # W/(m·K²)
SPECIFIC_HEAT_INTERCEPT: float = 1006.0  # J/(kg·K)
SPECIFIC_HEAT_SLOPE: float = 0.034  # J/(kg·K²)

# =============================================================================
# Psychrometrics
# =============================================================================

# Magnus form of saturation vapor pressure
MAGNUS_COEFFICIENT: float = 610.78  # Pa
MAGNUS_A: float = 17.27  # -
MAGNUS_B: float = 237.3  # °C

LATENT_HEAT_REFERENCE: float = 2.501e6  # J/kg - latent heat of vaporization at 0 °C
LATENT_HEAT_SLOPE: float = 2370.0  # J/(kg·K)

# =============================================================================
# Flow Regimes and Correlations
# =============================================================================

LAMINAR_LIMIT: float = 2300.0  # Reynolds number at end of laminar regime
TURBULENT_LIMIT: float = 10000.0  # Reynolds number at start of Dittus-Boelter regime
SMOOTH_PIPE_LIMIT: float = 1.0e5  # Reynolds number upper bound for Blasius

LAMINAR_NUSSELT: float = 3.66  # - fully developed, constant wall temperature
DITTUS_BOELTER_COEFFICIENT: float = 0.023
DITTUS_BOELTER_RE_EXPONENT: float = 0.8
DITTUS_BOELTER_PR_EXPONENT: float = 0.4

LAMINAR_FRICTION_CONSTANT: float = 64.0
BLASIUS_COEFFICIENT: float = 0.316
BLASIUS_EXPONENT: float = -0.25
DEFAULT_ROUGHNESS: float = 1.5e-6  # m - drawn aluminium / smooth plastic
SMOOTH_RELATIVE_ROUGHNESS: float = 1.0e-5  # - below this Blasius is used
COLEBROOK_INITIAL_GUESS: float = 0.02
COLEBROOK_MAX_ITERATIONS: int = 50
COLEBROOK_TOLERANCE: float = 1.0e-6

# Empirical duct-flow turbulence correlation I = C * Re^(-1/8)
TURBULENCE_COEFFICIENT: float = 0.16
TURBULENCE_EXPONENT: float = -0.125
OBSTACLE_ENHANCEMENT: float = 1.2  # - produce-induced mixing

# Entry length and development
LAMINAR_ENTRY_COEFFICIENT: float = 0.05  # Le = 0.05 * Re * D
TURBULENT_ENTRY_COEFFICIENT: float = 10.0  # Le = 10 * D
DEVELOPMENT_DECAY: float = 3.0  # - 95% developed at one entry length
ENTRY_ENHANCEMENT: float = 0.2  # - heat transfer gain in the undeveloped region

# Packed bed geometry
SPECIFIC_SURFACE_AREA: float = 50.0  # m²/m³ of produce
BASE_RESISTANCE: float = 2.0  # - resistance factor at zero packing
MINOR_LOSS_COEFFICIENT: float = 2.5  # - entry plus exit loss

# =============================================================================
# Numerical Parameters
# =============================================================================

EPSILON: float = 1.0e-6  # floor for divisors
CONVECTIVE_SAFETY: float = 10.0  # CFL safety divisor
DIFFUSIVE_SAFETY: float = 20.0  # Fourier safety divisor
MASS_FLOW_SAFETY: float = 10.0  # residence time safety divisor
EXCHANGE_SAFETY: float = 10.0  # heat exchange time constant safety divisor
MIN_TEMPERATURE: float = -50.0  # °C - physical plausibility bound
MAX_TEMPERATURE: float = 100.0  # °C - physical plausibility bound
MIN_INITIAL_TEMPERATURE: float = -20.0  # °C
MAX_INITIAL_TEMPERATURE: float = 50.0  # °C

# =============================================================================
# Respiration
# =============================================================================

SECONDS_PER_HOUR: float = 3600.0
RESPIRATION_HEAT_PER_MG: float = 10.7  # J per mg CO2 produced

# =============================================================================
# Cooling Unit
# =============================================================================

DEFAULT_TURBULENCE_INTENSITY: float = 0.16  # - nominal intensity for the TCPI
TURBULENCE_PENALTY: float = 0.1  # - E = 1 + penalty * I²
VARIATION_PENALTY: float = 0.2  # - gamma in the TCPI
MIN_TCPI: float = 0.1  # - floor when computing desired power
DEHUMIDIFICATION_THRESHOLD: float = 1.0e-7  # kg/s - flooring for numerical noise
TEMPERATURE_GATE_SCALE: float = 0.2  # °C
HUMIDITY_GATE_SCALE: float = 5.0e-5  # kg/kg

# =============================================================================
# Vertical Distribution
# =============================================================================

POSITION_ALPHA: float = 0.3  # - maximum fractional loss at the floor
POSITION_BETA: float = 3.0  # - decay with relative height

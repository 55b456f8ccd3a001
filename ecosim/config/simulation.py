"""Integration, recording and termination constants.

These values are part of the engine's behavioral contract: changing any of
them changes recorded trajectories.
"""

# =============================================================================
# INTEGRATION
# =============================================================================
# Fixed RK4 step size in simulation time units.
DT = 0.01

# Default time horizon of a run.
DEFAULT_HORIZON = 100.0

# =============================================================================
# RECORDING
# =============================================================================
# A TimeStepRecord is emitted once at least this much time has elapsed since
# the previous one.
RECORD_INTERVAL = 0.1

# Decimal places kept in recorded output (internal state keeps full precision)
RECORD_TIME_DECIMALS = 2
RECORD_POPULATION_DECIMALS = 1

# =============================================================================
# EQUILIBRIUM DETECTION
# =============================================================================
# Number of trailing recorded samples inspected for stability.
EQUILIBRIUM_WINDOW = 50

# Maximum coefficient of variation (stddev / mean) for both populations.
EQUILIBRIUM_TOLERANCE = 0.01

# Extra time simulated after equilibrium is first detected.
POST_EQUILIBRIUM_GRACE = 10.0

# =============================================================================
# EXTINCTION
# =============================================================================
# A population below this many individuals is extinct.
EXTINCTION_THRESHOLD = 1.0

# =============================================================================
# STREAMING
# =============================================================================
# Micro-steps advanced per streaming batch.
STREAM_BATCH_STEPS = 10

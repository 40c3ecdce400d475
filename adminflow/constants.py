"""Default values shared across adminflow modules."""

DEFAULT_PLAYBACK_INTERVAL = 1.5
DEFAULT_SUCCESS_RATE = 0.9
DEFAULT_MIN_DURATION_UNITS = 1.0
DEFAULT_MAX_DURATION_UNITS = 4.0
DEFAULT_TIME_UNIT = 1.0
DEFAULT_LOG_MAX_ENTRIES = 1000
DEFAULT_FALLBACK_PHASE = "Other"
DEFAULT_STEP_ESTIMATE_MINUTES = 5
SIMULATED_ERROR_MESSAGE = "Simulated execution error"

DEFAULT_PHASE_ORDER = [
    "Trigger Detection",
    "Immediate Response",
    "Proposal Phase",
    "Booking Confirmation",
    "Logistics Setup",
    "Pre-Event Management",
    "Event Delivery",
    "Post-Event Follow-up",
]

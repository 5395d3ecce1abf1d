"""
exceptions.py — Error and warning types raised by the simulation harness.
"""


class SimulationError(Exception):
    """Base class for errors raised by the harness itself.

    Numerical failures (e.g. a singular design in the event-study fit) are
    not wrapped; they propagate from numpy unchanged.
    """


class InvalidConfigurationError(SimulationError, ValueError):
    """
    Raised when a parameter set is rejected before any data is generated.

    Triggers:

    - ``staggered`` is not a boolean
    - ``het_indiv`` is not one of 'homogeneous', 'random', 'large_first'
    - ``het_time`` is not one of 'constant', 'linear'
    """


class CollinearTermsWarning(UserWarning):
    """Event-time terms dropped because they are collinear with the fixed effects."""

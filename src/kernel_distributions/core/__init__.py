"""
===============================================================================
KERNEL DISTRIBUTIONS - Core Types
===============================================================================
Quaternion type, numerical constants and error types shared by every module.

Modules:
    quaternion  -- Fixed-precision Quaternion with exp / log
    constants   -- Tolerances, supported precisions, log-density constants
    exceptions  -- ShapeMismatchError, DegenerateWeightsError,
                   NumericDomainWarning
===============================================================================
"""

"""
errortrap - Error trapping and error expectations for unit tests.

Captures the errors and warnings raised while a test method runs, drops
known noise, and reconciles each one against the errors the test declared
it expects.

Usage:
    errortrap run <path>        # Run TrappingTestCase classes in a file
    errortrap severities        # Show the severity table
    errortrap sample-config     # Print a sample YAML configuration
"""

__version__ = "0.1.0"

"""VestLedger - linear vesting accounting engine"""

__version__ = "0.1.0"

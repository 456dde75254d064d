# Checks package init
# Makes the batch check importable as pwncheck.checks.run_batch_check
from .batch_check import run_batch_check

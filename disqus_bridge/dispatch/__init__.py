"""
Dispatch Package

Correlation of responses to calls, argument classification, the readable
and write-only request channels, and the forum credential gate.
"""

from .arguments import CallShape, classify
from .channels import ReadableChannel, WriteOnlyChannel, merge_params
from .correlator import Correlator, PendingCall
from .gate import CredentialGate, DeferredCall

__all__ = [
    "CallShape",
    "classify",
    "Correlator",
    "PendingCall",
    "ReadableChannel",
    "WriteOnlyChannel",
    "merge_params",
    "CredentialGate",
    "DeferredCall",
]

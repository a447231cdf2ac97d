"""
Issuance Kernel

Client-side view-model core for Material Issue Forms (MIF) and Material
Request Forms (MRF):
- Normalized request lines and notes
- Explicit panel lifecycle state machine
- Typed exceptions with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"

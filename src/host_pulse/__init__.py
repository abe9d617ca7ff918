"""host_pulse: sample host resource counters and report them over HTTP."""

__version__ = "0.1.0"

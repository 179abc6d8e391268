"""LSF error injection engine.

Mutates structured descriptions of signed utterances to simulate learner
mistakes at a controllable severity.
"""

__version__ = "0.1.0"
